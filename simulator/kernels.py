# simulator/kernels.py

from numba import njit


@njit(cache=True)
def run_steps(tape, next_states, write_symbols, directions, position, state, width, height, states, count):
    """
    Advance a machine `count` steps in place on `tape`.
    Returns (position, state, changed) where changed is True if any step wrote a new symbol.
    """
    changed = False

    for _ in range(count):
        curr_symbol = int(tape[position])
        idx = states * curr_symbol + state

        write_symbol = write_symbols[idx]
        tape[position] = write_symbol
        if write_symbol != curr_symbol:
            changed = True
        state = int(next_states[idx])

        x = position % width
        y = position // width
        direction = directions[idx]
        if direction == 0:  # NORTH
            y = height - 1 if y == 0 else y - 1
        elif direction == 1:  # EAST
            x = 0 if x + 1 == width else x + 1
        elif direction == 2:  # SOUTH
            y = 0 if y + 1 == height else y + 1
        else:  # WEST
            x = width - 1 if x == 0 else x - 1
        position = y * width + x

    return position, state, changed


@njit(cache=True)
def render_pixels(tape, palette, pixels):
    """Write palette[tape[i]] into row i of the (cells, 3) pixel view, in place."""
    colors = palette.shape[0]
    for i in range(tape.shape[0]):
        symbol = tape[i]
        if symbol >= colors:
            raise IndexError("tape symbol outside the palette")
        pixels[i, 0] = palette[symbol, 0]
        pixels[i, 1] = palette[symbol, 1]
        pixels[i, 2] = palette[symbol, 2]
