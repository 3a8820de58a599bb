# simulator/turing_machine.py

import numpy as np

from simulator.kernels import run_steps
from simulator.transition_table import Direction, build_table, check_counts


class TuringMachine:
    """
    A finite 2D Turing machine on a toroidal tape of width * height cells.

    The head position is a row-major linear index; moving off one edge wraps to
    the opposite edge, each axis independently. `image` is the persistent RGB
    buffer the renderer overwrites on every frame.
    """

    def __init__(self, width, height, states, symbols, rng=None, table=None):
        check_counts(states, symbols)
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an integer, got {type(value)}.")
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}.")

        self.width = width
        self.height = height
        self.states = states
        self.symbols = symbols
        self.rng = rng if rng is not None else np.random.default_rng()
        self.position = 0
        self.state = 0
        self.table = None
        self.tape = np.zeros(width * height, dtype=np.uint8)
        self.image = np.zeros((height, width, 3), dtype=np.uint8)
        self._install_table(table)

    @property
    def xy(self):
        return self.position % self.width, self.position // self.width

    def _install_table(self, table):
        if table is None:
            table = build_table(self.states, self.symbols, self.rng)
        elif (table.states, table.symbols) != (self.states, self.symbols):
            raise ValueError(
                f"Table is for {table.states} states x {table.symbols} symbols, "
                f"machine has {self.states} x {self.symbols}."
            )
        self.table = table

    def step(self):
        """Advance one step. Returns True if the step changed the symbol under the head."""
        curr_symbol = int(self.tape[self.position])
        idx = self.states * curr_symbol + self.state
        table = self.table

        write_symbol = int(table.write_symbol[idx])
        self.tape[self.position] = write_symbol
        changed = write_symbol != curr_symbol
        self.state = int(table.next_state[idx])

        x, y = self.xy
        direction = table.direction[idx]
        if direction == Direction.NORTH:
            y = self.height - 1 if y == 0 else y - 1
        elif direction == Direction.EAST:
            x = 0 if x + 1 == self.width else x + 1
        elif direction == Direction.SOUTH:
            y = 0 if y + 1 == self.height else y + 1
        else:
            x = self.width - 1 if x == 0 else x - 1
        self.position = y * self.width + x
        return changed

    def run(self, count):
        """Advance `count` steps using the compiled kernel. Returns True if any step changed the tape."""
        if count < 0:
            raise ValueError(f"Step count must be non-negative, got {count}.")
        if count == 0:
            return False
        table = self.table
        position, state, changed = run_steps(
            self.tape,
            table.next_state,
            table.write_symbol,
            table.direction,
            self.position,
            self.state,
            self.width,
            self.height,
            self.states,
            count,
        )
        self.position = int(position)
        self.state = int(state)
        return bool(changed)

    def reset(self, table=None):
        """Start a new epoch: fresh table, blank tape, head at the origin in state 0."""
        self._install_table(table)
        self.tape.fill(0)
        self.position = 0
        self.state = 0
