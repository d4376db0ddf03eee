"""
Sculpting engine: wires every component onto one shared height field.

Two cadences run off the same tick:

- per-frame tasks (walkers, road carver) run every tick without suspending
- timed sequences (mountain lifecycle, stroke mountains, stats reporting)
  resume from their own delays

Components take the field lock around each read -> compute -> write, so the
engine can be ticked from a background driver thread while a host thread
reads snapshots.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import List, Optional

import structlog

from .alea_prng import AleaPRNG
from .autonomous_walker import AutonomousWalker, WalkerOptions, WalkerPolicy
from .brush_stamp import MaskLibrary
from .field_analysis import analyze_field
from .height_field import HeightField
from .mountain_lifecycle import MountainLifecycle, MountainOptions
from .path_carver import PathCarver, PathOptions
from .scheduler import Delay, Scheduler
from .stroke_mountains import StrokeMountainBuilder, StrokeMountainOptions
from ..utils import random as random_utils

logger = structlog.get_logger()


@dataclass
class EngineOptions:
    """Which components run, and with what tunables. ``None`` disables one."""

    mountains: Optional[MountainOptions] = field(default_factory=MountainOptions)
    stroke_mountains: Optional[StrokeMountainOptions] = None
    walkers: List[WalkerOptions] = field(default_factory=lambda: [WalkerOptions()])
    roads: Optional[PathOptions] = field(default_factory=PathOptions)
    time_scale: float = 1.0
    stats_interval: float = 0.0  # Seconds between stats log lines, 0 disables

    def __post_init__(self):
        if self.time_scale <= 0:
            raise ValueError("time_scale must be positive")
        if self.stats_interval < 0:
            raise ValueError("stats_interval must be non-negative")

    @classmethod
    def from_settings(cls, settings) -> "EngineOptions":
        """Build engine options from the environment-level feature toggles."""
        walkers = []
        if settings.enable_walker:
            walkers.append(WalkerOptions.for_policy(WalkerPolicy.UNCLAMPED))
        if settings.enable_clamped_walker:
            walkers.append(WalkerOptions.for_policy(WalkerPolicy.CLAMPED))
        return cls(
            mountains=MountainOptions() if settings.enable_mountains else None,
            stroke_mountains=(
                StrokeMountainOptions() if settings.enable_stroke_mountains else None
            ),
            walkers=walkers,
            roads=PathOptions() if settings.enable_roads else None,
            time_scale=settings.time_scale,
            stats_interval=settings.stats_interval,
        )


class _StatsReporter:
    """Timed sequence logging field statistics at a fixed interval."""

    def __init__(self, height_field: HeightField, interval: float):
        self.field = height_field
        self.delay = Delay(interval)

    def advance(self, dt: float) -> None:
        if self.delay.advance(dt):
            self.delay.reset()
            logger.info("Height field stats", **analyze_field(self.field).to_dict())


class SculptEngine:
    """Owns the scheduler and every sculpting component of a session."""

    def __init__(
        self,
        height_field: Optional[HeightField],
        options: Optional[EngineOptions] = None,
        prng: Optional[AleaPRNG] = None,
        masks: Optional[MaskLibrary] = None,
        seed: Optional[str] = None,
    ):
        """
        Initialize the engine.

        Args:
            height_field: Shared height field; a missing field is fatal
            options: Component selection and tunables
            prng: Random source shared by all components
            masks: Brush masks for stroke mountains (procedural defaults if omitted)
            seed: Reseeds the shared PRNG when no ``prng`` is given
        """
        if height_field is None:
            logger.error("No height field assigned, sculpting halted")
            raise ValueError("SculptEngine requires a height field")

        self.field = height_field
        self.options = options or EngineOptions()
        if prng is None:
            prng = random_utils.set_random_seed(seed) if seed else random_utils.get_prng()
        self.prng = prng

        self.scheduler = Scheduler(time_scale=self.options.time_scale)
        self.walkers: List[AutonomousWalker] = []
        self.roads: Optional[PathCarver] = None
        self.mountains: Optional[MountainLifecycle] = None
        self.stroke_mountains: Optional[StrokeMountainBuilder] = None

        for walker_options in self.options.walkers:
            walker = AutonomousWalker(self.field, walker_options, prng=self.prng)
            self.walkers.append(walker)
            self.scheduler.add_frame_task(walker.tick)

        if self.options.roads is not None:
            self.roads = PathCarver(self.field, self.options.roads, prng=self.prng)
            self.scheduler.add_frame_task(self.roads.tick)

        if self.options.mountains is not None:
            self.mountains = MountainLifecycle(
                self.field, self.options.mountains, prng=self.prng
            )
            self.scheduler.add_sequence(self.mountains)

        if self.options.stroke_mountains is not None:
            masks = masks or MaskLibrary.default(prng=self.prng)
            self.stroke_mountains = StrokeMountainBuilder(
                self.field, masks, self.options.stroke_mountains, prng=self.prng
            )
            self.scheduler.add_sequence(self.stroke_mountains)

        if self.options.stats_interval > 0:
            self.scheduler.add_sequence(
                _StatsReporter(self.field, self.options.stats_interval)
            )

        self._tick_lock = threading.Lock()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

        logger.info(
            "Sculpt engine ready",
            resolution=self.field.resolution,
            walkers=len(self.walkers),
            roads=self.roads is not None,
            mountains=self.mountains is not None,
            stroke_mountains=self.stroke_mountains is not None,
        )

    def tick(self, dt: float) -> None:
        """Advance every component by one frame of ``dt`` seconds."""
        with self._tick_lock:
            self.scheduler.tick(dt)

    def run_for(self, seconds: float, dt: float = 1.0 / 60.0) -> int:
        """
        Simulate ``seconds`` of frames with a fixed delta, as fast as possible.

        Returns:
            Number of ticks run
        """
        if dt <= 0:
            raise ValueError("dt must be positive")
        ticks = int(round(seconds / dt))
        for _ in range(ticks):
            self.tick(dt)
        return ticks

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self, frame_rate: float = 60.0) -> None:
        """Tick in real time on a background thread until ``stop`` is called."""
        if self.running:
            return
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._drive, args=(1.0 / frame_rate,), name="sculpt-driver", daemon=True
        )
        self._thread.start()
        logger.info("Sculpt driver started", frame_rate=frame_rate)

    def stop(self, timeout: Optional[float] = None) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("Sculpt driver stopped", frames=self.scheduler.frame_count)

    def _drive(self, frame_interval: float) -> None:
        last = time.monotonic()
        while not self._stop.wait(frame_interval):
            now = time.monotonic()
            self.tick(now - last)
            last = now
