import argparse
import json

import numpy as np
from rich.console import Console
from rich.table import Table

from simulator.transition_table import Direction, build_table

console = Console()


def state_letter(state):
    """A, B, ... Z, then numeric for larger machines."""
    if state < 26:
        return chr(ord('A') + state)
    return str(state)


def format_entry(next_state, write_symbol, direction):
    return f"{write_symbol}{Direction(direction).letter}{state_letter(next_state)}"


def table_rows(table):
    """State x symbol grid of compact actions, e.g. '1EB' = write 1, move east, go to state B."""
    rows = []
    for state in range(table.states):
        row = [state_letter(state)]
        for symbol in range(table.symbols):
            row.append(format_entry(*table.entry(state, symbol)))
        rows.append(row)
    return rows


def pretty_print_table(table):
    grid = Table(title=f"Transition Table {table.table_hash()[:12]}", show_header=True, header_style="bold magenta")
    grid.add_column("State", justify="center")
    for symbol in range(table.symbols):
        grid.add_column(str(symbol), justify="center")
    for row in table_rows(table):
        grid.add_row(*row)
    console.print(grid)


def main(argv=None):
    parser = argparse.ArgumentParser(description="2D Turing Machine Table Inspector")
    parser.add_argument("--states", type=int, default=4, help="Number of machine states (default=4)")
    parser.add_argument("--symbols", type=int, default=6, help="Number of tape symbols (default=6)")
    parser.add_argument("--seed", type=int, help="Seed for the table generator")
    parser.add_argument("--json", action="store_true", help="Print the serialized rules instead of a grid")
    args = parser.parse_args(argv)

    table = build_table(args.states, args.symbols, np.random.default_rng(args.seed))

    if args.json:
        print(json.dumps({"table_hash": table.table_hash(), "table": table.to_rules()}))
    else:
        pretty_print_table(table)


if __name__ == "__main__":
    main()
