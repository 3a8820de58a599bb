# simulator/renderer.py

import numpy as np

from simulator.kernels import render_pixels

# Output contract: 8-bit RGB, row-major, no header (ffmpeg "rgb24")
PIXEL_FORMAT = "rgb24"
BYTES_PER_PIXEL = 3

DEFAULT_PALETTE = [
    [0, 0, 0],        # black
    [255, 255, 255],  # white
    [170, 170, 170],  # light gray
    [85, 85, 85],     # dark gray
    [255, 0, 0],      # red
    [0, 0, 255],      # blue
    [0, 255, 0],      # green
]


def frame_size(width, height):
    return width * height * BYTES_PER_PIXEL


def validate_palette(palette, symbols):
    """Check palette covers every symbol; returns it as an (n, 3) uint8 array."""
    arr = np.asarray(palette)
    if arr.ndim != 2 or arr.shape[1] != BYTES_PER_PIXEL:
        raise ValueError(f"Palette must be a list of RGB triples, got shape {arr.shape}.")
    if arr.shape[0] < symbols:
        raise ValueError(f"Palette has {arr.shape[0]} colors but the machine uses {symbols} symbols.")
    if not np.issubdtype(arr.dtype, np.integer):
        raise TypeError(f"Palette channels must be integers, got {arr.dtype}.")
    if arr.min() < 0 or arr.max() > 255:
        raise ValueError("Palette channels must be in [0, 255].")
    return arr.astype(np.uint8)


def render(machine, palette):
    """
    Map every tape cell to its palette color, in place in machine.image.

    The returned array is the machine's persistent buffer: the next call
    overwrites it, so copy it if a stable snapshot is needed.
    """
    pixels = machine.image.reshape(-1, BYTES_PER_PIXEL)
    render_pixels(machine.tape, palette, pixels)
    return machine.image


def write_frame(sink, image):
    """Write one frame to the sink and flush it before the next frame is rendered."""
    sink.write(memoryview(image).cast("B"))
    sink.flush()


def ffmpeg_command(width, height, fps=24, output="out.mp4"):
    return (
        f"ffmpeg -y -f rawvideo -s {width}x{height} -pix_fmt {PIXEL_FORMAT} -r {fps} "
        f"-i - -an -vcodec mpeg4 {output}"
    )
