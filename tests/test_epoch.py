"""Tests for simulator.epoch."""

import io

import numpy as np
import pytest

from simulator.epoch import REASON_BUDGET, REASON_SHUTDOWN, REASON_STAGNANT, EpochRunner
from simulator.renderer import DEFAULT_PALETTE, frame_size, validate_palette
from simulator.transition_table import Direction, TransitionTable
from simulator.turing_machine import TuringMachine

PALETTE = validate_palette(DEFAULT_PALETTE, 2)


class ListLogger:
    def __init__(self):
        self.entries = []

    def log_epoch(self, entry):
        self.entries.append(entry)


def still_machine():
    """Never changes the tape."""
    table = TransitionTable.from_entries(1, 2, [(0, 0, Direction.EAST), (0, 1, Direction.EAST)])
    return TuringMachine(4, 1, 1, 2, rng=np.random.default_rng(0), table=table)


def flipping_machine():
    """Changes the tape on every step."""
    table = TransitionTable.from_entries(1, 2, [(0, 1, Direction.EAST), (0, 0, Direction.SOUTH)])
    return TuringMachine(4, 2, 1, 2, rng=np.random.default_rng(0), table=table)


class TestStagnationReset:
    def test_resets_at_first_picture_without_change(self) -> None:
        machine = still_machine()
        old_table = machine.table
        sink = io.BytesIO()
        runner = EpochRunner(machine, PALETTE, sink, reset_steps=100, picture_steps=3)

        runner.tick()
        runner.tick()
        assert runner.steps == 2
        assert runner.epoch == 0

        runner.tick()
        assert len(sink.getvalue()) == frame_size(4, 1)
        assert runner.steps == 0
        assert runner.epoch == 1
        assert runner.changed is False
        assert machine.table is not old_table
        assert not machine.tape.any()
        assert (machine.position, machine.state) == (0, 0)

    def test_logs_stagnant_epoch(self) -> None:
        logger = ListLogger()
        runner = EpochRunner(still_machine(), PALETTE, io.BytesIO(), 100, 3, logger=logger)
        runner.advance()

        assert len(logger.entries) == 1
        entry = logger.entries[0]
        assert entry["reason"] == REASON_STAGNANT
        assert entry["epoch"] == 0
        assert entry["steps"] == 3
        assert entry["frames"] == 1
        assert entry["table"] == [[0, 0, 1], [0, 1, 1]]
        assert len(entry["table_hash"]) == 64

    def test_changing_epoch_keeps_running(self) -> None:
        runner = EpochRunner(flipping_machine(), PALETTE, io.BytesIO(), 100, 3)
        for _ in range(9):
            runner.tick()
        assert runner.epoch == 0
        assert runner.steps == 9
        assert runner.frames == 3


class TestBudgetReset:
    def test_resets_after_budget_even_when_changing(self) -> None:
        logger = ListLogger()
        runner = EpochRunner(flipping_machine(), PALETTE, io.BytesIO(), reset_steps=5, picture_steps=2, logger=logger)

        for _ in range(4):
            runner.tick()
        assert runner.epoch == 0
        assert runner.frames == 2

        runner.tick()
        assert runner.epoch == 1
        assert runner.steps == 0
        assert runner.frames == 2
        assert logger.entries[0]["reason"] == REASON_BUDGET
        assert logger.entries[0]["steps"] == 5

    def test_advance_stops_at_budget(self) -> None:
        runner = EpochRunner(flipping_machine(), PALETTE, io.BytesIO(), reset_steps=5, picture_steps=2)
        seen = []
        for _ in range(3):
            seen.append(runner.steps_to_boundary())
            runner.advance()
        assert seen == [2, 2, 1]
        assert runner.epoch == 1
        assert runner.steps == 0

    def test_budget_and_picture_on_same_step(self) -> None:
        logger = ListLogger()
        runner = EpochRunner(flipping_machine(), PALETTE, io.BytesIO(), reset_steps=4, picture_steps=2, logger=logger)
        runner.advance()
        runner.advance()
        assert runner.frames == 2
        assert runner.epoch == 1
        assert [e["reason"] for e in logger.entries] == [REASON_BUDGET]


    def test_advance_caps_chunk_below_boundary(self) -> None:
        sink = io.BytesIO()
        runner = EpochRunner(flipping_machine(), PALETTE, sink, reset_steps=1000, picture_steps=12)
        runner.max_chunk = 5

        seen = []
        for _ in range(3):
            runner.advance()
            seen.append((runner.steps, runner.frames))

        assert seen == [(5, 0), (10, 0), (12, 1)]
        assert len(sink.getvalue()) == frame_size(4, 2)

    def test_stop_between_chunks_leaves_whole_frames(self) -> None:
        sink = io.BytesIO()
        runner = EpochRunner(flipping_machine(), PALETTE, sink, reset_steps=1000, picture_steps=12)
        runner.max_chunk = 5
        runner.advance()
        runner.request_stop()
        runner.run()
        assert runner.steps == 5
        assert sink.getvalue() == b""


class TestAdvanceMatchesTick:
    def test_same_stream_and_state(self) -> None:
        def make():
            machine = TuringMachine(8, 6, 2, 3, rng=np.random.default_rng(17))
            return EpochRunner(machine, validate_palette(DEFAULT_PALETTE, 3), io.BytesIO(), 30, 7)

        fast, slow = make(), make()
        total = 0
        for _ in range(25):
            total += fast.steps_to_boundary()
            fast.advance()
        for _ in range(total):
            slow.tick()

        assert fast.sink.getvalue() == slow.sink.getvalue()
        assert (fast.epoch, fast.steps, fast.frames) == (slow.epoch, slow.steps, slow.frames)
        assert np.array_equal(fast.machine.tape, slow.machine.tape)
        assert fast.machine.position == slow.machine.position


class TestRun:
    def test_stops_after_max_frames(self) -> None:
        logger = ListLogger()
        sink = io.BytesIO()
        runner = EpochRunner(flipping_machine(), PALETTE, sink, 1000, 10, logger=logger, max_frames=3)

        assert runner.run() == 3
        assert len(sink.getvalue()) == 3 * frame_size(4, 2)
        assert logger.entries[-1]["reason"] == REASON_SHUTDOWN

    def test_stop_request_ends_run(self) -> None:
        sink = io.BytesIO()
        runner = EpochRunner(flipping_machine(), PALETTE, sink, 1000, 10)
        runner.request_stop()
        assert runner.run() == 0
        assert sink.getvalue() == b""

    def test_frames_are_snapshots_of_the_tape(self) -> None:
        sink = io.BytesIO()
        machine = flipping_machine()
        runner = EpochRunner(machine, PALETTE, sink, 1000, 1, max_frames=1)
        runner.run()
        # First step writes white at the origin and moves east
        assert sink.getvalue()[:6] == bytes([255, 255, 255, 0, 0, 0])


class TestValidation:
    @pytest.mark.parametrize("reset_steps,picture_steps", [(0, 1), (1, 0)])
    def test_rejects_zero_intervals(self, reset_steps, picture_steps) -> None:
        with pytest.raises(ValueError):
            EpochRunner(still_machine(), PALETTE, io.BytesIO(), reset_steps, picture_steps)

    def test_rejects_negative_max_frames(self) -> None:
        with pytest.raises(ValueError):
            EpochRunner(still_machine(), PALETTE, io.BytesIO(), 1, 1, max_frames=-1)
