# app.py

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.prompt import Prompt, IntPrompt, Confirm

from config.config_loader import DEFAULT_CONFIG_PATH, load_config, save_config
from logger.logger import JSONLogger
from simulator.renderer import ffmpeg_command
from tools.stream_video import main as stream_main, stream
from tools.table_inspect import main as inspect_main

# stdout may carry the video stream
console = Console(stderr=True)


# === Utilities ===
def load_runtime_config(path=DEFAULT_CONFIG_PATH):
    if not Path(path).exists():
        console.print(f"[red]Error: {path} not found![/red]")
        sys.exit(1)
    return load_config(path, quiet=True)


def save_runtime_config(config, path=DEFAULT_CONFIG_PATH):
    save_config(config, path)
    console.print("[green]Configuration updated successfully.[/green]")


def show_main_menu():
    console.print("\n[bold cyan]2D Turing Machine Video[/bold cyan]")
    console.print("[1] Stream Video to File")
    console.print("[2] Inspect a Random Table")
    console.print("[3] Edit Config")
    console.print("[4] Exit")


def handle_stream(config):
    console.print("\n[bold]Stream Video to File[/bold]")

    output = Prompt.ask("Output file", default="out.rgb")
    frames = IntPrompt.ask("Number of frames", default=config.get("max_frames") or 240)
    if Path(output).exists() and not Confirm.ask(f"{output} exists. Overwrite?", default=False):
        return

    run_config = dict(config, max_frames=frames)
    logger = JSONLogger(config["output_directory"], config["log_file_prefix"])
    try:
        with open(output, "wb") as sink:
            stream(run_config, sink, logger=logger, show_progress=True)
    except (ValueError, TypeError) as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        return
    except OSError as e:
        console.print(f"[red]Output error: {e}[/red]")
        return

    console.print("[cyan]Encode with:[/cyan]")
    console.print(f"  cat {output} | {ffmpeg_command(config['width'], config['height'], config['fps'])}")


def handle_inspect(config):
    console.print("\n[bold]Inspect a Random Table[/bold]")

    states = IntPrompt.ask("Number of States", default=config.get("states", 4))
    symbols = IntPrompt.ask("Number of Symbols", default=config.get("symbols", 6))
    seed = Prompt.ask("Seed (blank for random)", default="")

    argv = ["--states", str(states), "--symbols", str(symbols)]
    if seed.strip():
        argv += ["--seed", seed.strip()]
    inspect_main(argv)


def handle_edit_config(config):
    console.print("\n[bold]Edit Configuration[/bold]")

    width = IntPrompt.ask("Width", default=config.get("width", 512))
    height = IntPrompt.ask("Height", default=config.get("height", 512))
    states = IntPrompt.ask("Number of States", default=config.get("states", 4))
    symbols = IntPrompt.ask("Number of Symbols", default=config.get("symbols", 6))
    reset_steps = IntPrompt.ask("Epoch Step Budget", default=config.get("reset_steps", 2_500_000))
    picture_steps = IntPrompt.ask("Steps per Frame", default=config.get("picture_steps", 10_000))

    updated = dict(config)
    updated.update({
        "width": width,
        "height": height,
        "states": states,
        "symbols": symbols,
        "reset_steps": reset_steps,
        "picture_steps": picture_steps
    })

    try:
        save_runtime_config(updated)
    except (ValueError, TypeError) as e:
        console.print(f"[red]Not saved: {e}[/red]")


def interactive_main():
    config = load_runtime_config()

    while True:
        show_main_menu()
        choice = Prompt.ask("\nChoose an option", choices=["1", "2", "3", "4"], default="4")

        if choice == "1":
            handle_stream(config)
        elif choice == "2":
            handle_inspect(config)
        elif choice == "3":
            handle_edit_config(config)
            config = load_runtime_config()
        elif choice == "4":
            console.print("[bold green]Goodbye![/bold green]")
            break


# === CLI Mode for Automation ===
def cli_main(args):
    argv = ["--config", args.config]
    if args.frames is not None:
        argv += ["--frames", str(args.frames)]
    return stream_main(argv)


def main():
    parser = argparse.ArgumentParser(description="2D Turing Machine Video Application")
    parser.add_argument("--stream", action="store_true", help="Stream raw frames to stdout immediately")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help="Path to runtime config JSON")
    parser.add_argument("--frames", type=int, help="Stop after this many frames")
    args = parser.parse_args()

    if args.stream:
        sys.exit(cli_main(args))
    else:
        interactive_main()


if __name__ == "__main__":
    main()
