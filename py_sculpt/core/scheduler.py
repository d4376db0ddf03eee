"""
Tick-driven scheduling for the sculpting components.

Long-running timed sequences (mountain growth, flattening, restart waits)
are plain state objects advanced by ``Scheduler.tick`` instead of
suspended coroutines. A ``Delay`` is the "wait N seconds, then resume"
primitive: a sequence keeps one around and checks it every tick.
"""

from typing import Callable, List, Protocol

import structlog

logger = structlog.get_logger()


class Delay:
    """Resumable countdown measured in scheduler seconds."""

    def __init__(self, seconds: float):
        if seconds < 0:
            raise ValueError(f"Delay must be non-negative, got {seconds}")
        self.seconds = float(seconds)
        self.elapsed = 0.0

    @property
    def done(self) -> bool:
        return self.elapsed >= self.seconds

    @property
    def remaining(self) -> float:
        return max(self.seconds - self.elapsed, 0.0)

    def advance(self, dt: float) -> bool:
        """Advance by ``dt`` seconds. Returns True once the delay has elapsed."""
        self.elapsed += dt
        return self.done

    def reset(self, seconds: float = None) -> None:
        if seconds is not None:
            self.seconds = float(seconds)
        self.elapsed = 0.0


class TimedSequence(Protocol):
    """Anything the scheduler can resume once per tick."""

    def advance(self, dt: float) -> None: ...


FrameTask = Callable[[float], None]


class Scheduler:
    """
    Drives per-frame tasks and timed sequences from a single tick.

    Frame tasks run first, every tick, in registration order. Timed
    sequences are resumed after them with the same (scaled) delta time.
    """

    def __init__(self, time_scale: float = 1.0):
        self.time_scale = time_scale
        self.frame_tasks: List[FrameTask] = []
        self.sequences: List[TimedSequence] = []
        self.elapsed = 0.0
        self.frame_count = 0

    def add_frame_task(self, task: FrameTask) -> None:
        self.frame_tasks.append(task)

    def add_sequence(self, sequence: TimedSequence) -> None:
        self.sequences.append(sequence)

    def tick(self, dt: float) -> None:
        """Run one frame with ``dt`` seconds since the previous one."""
        dt = dt * self.time_scale
        self.elapsed += dt
        self.frame_count += 1

        for task in self.frame_tasks:
            task(dt)
        for sequence in self.sequences:
            sequence.advance(dt)
