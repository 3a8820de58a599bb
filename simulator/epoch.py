# simulator/epoch.py

from simulator.renderer import render, write_frame

REASON_STAGNANT = "stagnant"
REASON_BUDGET = "budget"
REASON_SHUTDOWN = "shutdown"

# Upper bound on steps per compiled call, so a stop request is seen promptly
MAX_CHUNK_STEPS = 1_000_000


class EpochRunner:
    """
    Drives a TuringMachine through epochs and streams frames to a byte sink.

    Every `picture_steps` steps a frame is written; if no step since the last
    reset changed the tape, the epoch ends. An epoch also ends once it has run
    `reset_steps` steps. Ending an epoch draws a new table and clears the tape.
    """

    def __init__(self, machine, palette, sink, reset_steps, picture_steps, logger=None, max_frames=0):
        for name, value in (("reset_steps", reset_steps), ("picture_steps", picture_steps)):
            if value < 1:
                raise ValueError(f"{name} must be at least 1, got {value}.")
        if max_frames < 0:
            raise ValueError(f"max_frames must be non-negative, got {max_frames}.")

        self.machine = machine
        self.palette = palette
        self.sink = sink
        self.reset_steps = reset_steps
        self.picture_steps = picture_steps
        self.logger = logger
        self.max_frames = max_frames

        self.steps = 0
        self.changed = False
        self.epoch = 0
        self.frames = 0
        self.epoch_frames = 0
        self.stop_requested = False
        self.max_chunk = MAX_CHUNK_STEPS

    @property
    def done(self):
        if self.stop_requested:
            return True
        return self.max_frames > 0 and self.frames >= self.max_frames

    def request_stop(self, *_):
        """Ask run() to return after the current chunk. Usable as a signal handler."""
        self.stop_requested = True

    def steps_to_boundary(self):
        to_picture = self.picture_steps - self.steps % self.picture_steps
        to_budget = self.reset_steps - self.steps
        return min(to_picture, to_budget)

    def tick(self):
        """Advance a single step and handle any boundary it lands on."""
        self.changed = self.machine.step() or self.changed
        self.steps += 1
        self._handle_boundary()

    def advance(self):
        """Advance toward the next frame or budget boundary, at most max_chunk steps, and handle it if reached."""
        count = min(self.steps_to_boundary(), self.max_chunk)
        self.changed = self.machine.run(count) or self.changed
        self.steps += count
        self._handle_boundary()

    def _handle_boundary(self):
        if self.steps % self.picture_steps == 0:
            self.emit_frame()
            if not self.changed:
                self.reset_epoch(REASON_STAGNANT)
        if self.steps >= self.reset_steps:
            self.reset_epoch(REASON_BUDGET)

    def emit_frame(self):
        image = render(self.machine, self.palette)
        write_frame(self.sink, image)
        self.frames += 1
        self.epoch_frames += 1

    def epoch_record(self, reason):
        table = self.machine.table
        return {
            "epoch": self.epoch,
            "reason": reason,
            "steps": self.steps,
            "frames": self.epoch_frames,
            "changed": self.changed,
            "states": table.states,
            "symbols": table.symbols,
            "table_hash": table.table_hash(),
            "table": table.to_rules(),
        }

    def reset_epoch(self, reason):
        if self.logger is not None:
            self.logger.log_epoch(self.epoch_record(reason))
        self.machine.reset()
        self.steps = 0
        self.changed = False
        self.epoch += 1
        self.epoch_frames = 0

    def run(self):
        """Run epochs until a stop is requested or max_frames frames have been written."""
        while not self.done:
            self.advance()
        self.finish()
        return self.frames

    def finish(self):
        """Log the epoch that was running when streaming stopped."""
        if self.logger is not None:
            self.logger.log_epoch(self.epoch_record(REASON_SHUTDOWN))
