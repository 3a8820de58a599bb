# simulator/transition_table.py

import hashlib
import json
from enum import IntEnum

import numpy as np

# Counts are stored as uint8 on the tape and in the table
MAX_COUNT = 256


class Direction(IntEnum):
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3

    @property
    def letter(self):
        return self.name[0]


NUM_DIRECTIONS = len(Direction)


def check_counts(states, symbols):
    for name, value in (("states", states), ("symbols", symbols)):
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
            raise TypeError(f"{name} must be an integer, got {type(value)}.")
        if not 1 <= value <= MAX_COUNT:
            raise ValueError(f"{name} must be in [1, {MAX_COUNT}], got {value}.")


class TransitionTable:
    """
    Transition table of a 2D Turing machine.

    Maps (state, symbol) to (next_state, write_symbol, direction). Entries are
    flattened with the symbol as the outer key: index = symbol * states + state.
    """

    def __init__(self, states, symbols, next_state, write_symbol, direction):
        check_counts(states, symbols)
        size = states * symbols
        for name, arr in (("next_state", next_state), ("write_symbol", write_symbol), ("direction", direction)):
            if arr.shape != (size,):
                raise ValueError(f"{name} must have shape ({size},), got {arr.shape}.")
        self.states = states
        self.symbols = symbols
        self.next_state = next_state
        self.write_symbol = write_symbol
        self.direction = direction

    def __len__(self):
        return self.states * self.symbols

    def __repr__(self):
        return f"TransitionTable(states={self.states}, symbols={self.symbols}, hash={self.table_hash()[:12]})"

    def index(self, state, symbol):
        return symbol * self.states + state

    def entry(self, state, symbol):
        idx = self.index(state, symbol)
        return (
            int(self.next_state[idx]),
            int(self.write_symbol[idx]),
            Direction(int(self.direction[idx])),
        )

    def to_rules(self):
        """Serialize as [next_state, write_symbol, direction] lists in flattened order."""
        return [
            [int(n), int(w), int(d)]
            for n, w, d in zip(self.next_state, self.write_symbol, self.direction)
        ]

    def table_hash(self):
        rules_json = json.dumps(self.to_rules(), sort_keys=True)
        return hashlib.sha256(rules_json.encode("utf-8")).hexdigest()

    @classmethod
    def from_entries(cls, states, symbols, entries):
        """Build a table from explicit (next_state, write_symbol, direction) triples in flattened order."""
        check_counts(states, symbols)
        entries = list(entries)
        if len(entries) != states * symbols:
            raise ValueError(f"Expected {states * symbols} entries, got {len(entries)}.")

        next_state = np.empty(len(entries), dtype=np.uint8)
        write_symbol = np.empty(len(entries), dtype=np.uint8)
        direction = np.empty(len(entries), dtype=np.uint8)
        for idx, (n, w, d) in enumerate(entries):
            if not 0 <= n < states:
                raise ValueError(f"Entry {idx}: next_state {n} out of range [0, {states}).")
            if not 0 <= w < symbols:
                raise ValueError(f"Entry {idx}: write_symbol {w} out of range [0, {symbols}).")
            next_state[idx] = n
            write_symbol[idx] = w
            direction[idx] = Direction(d)
        return cls(states, symbols, next_state, write_symbol, direction)


def build_table(states, symbols, rng=None):
    """Draw a uniformly random transition table from the given numpy Generator."""
    check_counts(states, symbols)
    if rng is None:
        rng = np.random.default_rng()
    size = states * symbols
    next_state = rng.integers(0, states, size=size, dtype=np.uint8, endpoint=False)
    write_symbol = rng.integers(0, symbols, size=size, dtype=np.uint8, endpoint=False)
    direction = rng.integers(0, NUM_DIRECTIONS, size=size, dtype=np.uint8, endpoint=False)
    return TransitionTable(states, symbols, next_state, write_symbol, direction)
