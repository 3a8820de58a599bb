# tools/stream_video.py

import argparse
import signal
import sys

import numpy as np
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import DEFAULT_CONFIG_PATH, load_config, validate_config
from logger.logger import JSONLogger
from simulator.epoch import EpochRunner
from simulator.renderer import DEFAULT_PALETTE, ffmpeg_command, frame_size, validate_palette
from simulator.turing_machine import TuringMachine

# stdout carries the video stream
console = Console(stderr=True)


def build_runner(config, sink, logger=None, palette=DEFAULT_PALETTE):
    """Validate everything up front and wire a machine, palette and sink into an EpochRunner."""
    validate_config(config)
    palette = validate_palette(palette, config["symbols"])

    rng = np.random.default_rng(config["seed"])
    machine = TuringMachine(
        config["width"],
        config["height"],
        config["states"],
        config["symbols"],
        rng=rng,
    )
    return EpochRunner(
        machine,
        palette,
        sink,
        reset_steps=config["reset_steps"],
        picture_steps=config["picture_steps"],
        logger=logger,
        max_frames=config["max_frames"],
    )


def install_stop_handlers(runner):
    """Route SIGINT/SIGTERM to a clean stop; returns the previous handlers."""
    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, runner.request_stop)
    return previous


def restore_handlers(previous):
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def stream(config, sink, logger=None, show_progress=False):
    """Stream raw frames to `sink` until max_frames is reached or a stop signal arrives."""
    runner = build_runner(config, sink, logger=logger)
    previous = install_stop_handlers(runner)

    console.print(
        f"[cyan]Streaming {config['width']}x{config['height']} {frame_size(config['width'], config['height']):,}-byte frames "
        f"({config['states']} states, {config['symbols']} symbols)...[/cyan]"
    )

    try:
        if show_progress:
            with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    TextColumn("{task.completed:,} frames, epoch {task.fields[epoch]}"),
                    TimeElapsedColumn(),
                    console=console
            ) as progress:
                total = config["max_frames"] or None
                task = progress.add_task("[cyan]Streaming...", total=total, epoch=0)
                while not runner.done:
                    runner.advance()
                    progress.update(task, completed=runner.frames, epoch=runner.epoch)
            runner.finish()
        else:
            runner.run()
    finally:
        restore_handlers(previous)

    console.print(f"[green]Wrote {runner.frames:,} frames over {runner.epoch + 1:,} epochs.[/green]")
    return runner


def open_sink(output):
    if output == "-":
        return sys.stdout.buffer
    return open(output, "wb")


# === CLI ===
def main(argv=None):
    parser = argparse.ArgumentParser(description="Stream a random 2D Turing machine as raw rgb24 video")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to runtime config JSON")
    parser.add_argument("--output", default="-", help="Output file for raw frames ('-' for stdout)")
    parser.add_argument("--frames", type=int, help="Stop after this many frames (overrides max_frames)")
    parser.add_argument("--seed", type=int, help="Seed for the table generator (overrides seed)")
    parser.add_argument("--print-ffmpeg", action="store_true", help="Print the matching ffmpeg command and exit")
    parser.add_argument("--progress", action="store_true", help="Show a progress display on stderr")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
        if args.frames is not None:
            config["max_frames"] = args.frames
        if args.seed is not None:
            config["seed"] = args.seed
        validate_config(config)
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 2

    if args.print_ffmpeg:
        print(ffmpeg_command(config["width"], config["height"], config["fps"]))
        return 0

    logger = JSONLogger(config["output_directory"], config["log_file_prefix"])
    sink = open_sink(args.output)
    try:
        stream(config, sink, logger=logger, show_progress=args.progress)
    except (ValueError, TypeError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return 2
    except BrokenPipeError:
        console.print("[red]Output pipe closed by the consumer.[/red]")
        return 1
    except OSError as e:
        console.print(f"[red]Output error: {e}[/red]")
        return 1
    finally:
        if sink is not sys.stdout.buffer:
            sink.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
