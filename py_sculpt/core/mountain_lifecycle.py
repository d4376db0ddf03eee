"""
Mountain lifecycle: timed growth and budget-driven flattening.

This module implements:
- Area-budgeted mountain creation (footprint reserved on acceptance)
- Time-parameterized radial cone growth from the pre-existing terrain
- An optional hold phase once a mountain is fully grown
- A single global flatten-all event once the budget is saturated, lerping
  every mountain back to its baseline in creation order

Everything is a resumable state machine advanced by ``advance(dt)``; no
step blocks or sleeps.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .height_field import HeightField
from .scheduler import Delay
from ..utils import random as random_utils

logger = structlog.get_logger()


class MountainState(str, Enum):
    """Lifecycle state of a single mountain."""

    GROWING = "growing"
    HOLDING = "holding"
    GROWN = "grown"  # fully grown, or growth cancelled by flatten-all
    FLATTENING = "flattening"
    REMOVED = "removed"


class CyclePhase(str, Enum):
    """Phase of the global creation/flatten cycle."""

    CREATING = "creating"
    PRE_FLATTEN = "pre_flatten"
    FLATTENING = "flattening"


@dataclass
class MountainOptions:
    """Tunables for the mountain lifecycle."""

    max_mountain_percentage: float = 30.0  # % of grid area mountains may occupy
    min_radius: int = 20  # Smallest random mountain radius (cells)
    max_radius: int = 60  # Largest random mountain radius (cells, inclusive)
    min_target_height: float = 10.0
    max_target_height: float = 30.0
    grow_duration: float = 5.0  # Seconds from baseline to full cone
    hold_duration: float = 0.0  # Seconds to hold a grown mountain, 0 skips
    flatten_duration: float = 3.0  # Seconds to lerp one mountain back to baseline
    pause_between_mountains: float = 1.0  # Seconds between creation attempts
    flatten_pause_duration: float = 2.0  # Delay before the flatten-all begins
    max_height: Optional[float] = None  # Clamp ceiling; None leaves heights unbounded

    def __post_init__(self):
        if not 0 < self.max_mountain_percentage <= 100:
            raise ValueError(
                f"max_mountain_percentage must be in (0, 100], got {self.max_mountain_percentage}"
            )
        if self.min_radius < 1 or self.max_radius < self.min_radius:
            raise ValueError(
                f"Invalid radius range [{self.min_radius}, {self.max_radius}]"
            )
        if self.max_target_height < self.min_target_height:
            raise ValueError(
                f"Invalid target height range [{self.min_target_height}, {self.max_target_height}]"
            )
        for name in (
            "grow_duration",
            "hold_duration",
            "flatten_duration",
            "pause_between_mountains",
            "flatten_pause_duration",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")


@dataclass
class Mountain:
    """A sculpted bump and the private baseline of its footprint."""

    id: int
    center: Tuple[int, int]  # (col, row)
    radius: int
    target_height: float
    window: Tuple[int, int, int, int]  # clipped (col0, row0, col1, row1)
    baseline: np.ndarray  # heights of the window before sculpting
    multiplier: np.ndarray  # clamp01(1 - d / radius) over the window
    state: MountainState = MountainState.GROWING
    elapsed: float = 0.0
    flatten_from: Optional[np.ndarray] = field(default=None, repr=False)

    @property
    def area(self) -> float:
        return math.pi * self.radius**2


def _lerp_grid(start: np.ndarray, end: np.ndarray, t: float) -> np.ndarray:
    return start + (end - start) * min(max(t, 0.0), 1.0)


class MountainLifecycle:
    """Creates, grows and flattens mountains under a global area budget."""

    def __init__(
        self,
        field: HeightField,
        options: Optional[MountainOptions] = None,
        prng: Optional[AleaPRNG] = None,
    ):
        """
        Initialize the lifecycle.

        Args:
            field: Shared height field
            options: Lifecycle tunables
            prng: Random source (shared PRNG if omitted)
        """
        self.field = field
        self.options = options or MountainOptions()
        self.prng = prng or random_utils.get_prng()

        self.mountains: List[Mountain] = []  # active registry, creation order
        self.total_area = 0.0
        self.phase = CyclePhase.CREATING
        self.flatten_cycles = 0

        self._next_id = 0
        self._creation_delay = Delay(self.options.pause_between_mountains)
        self._pre_flatten_delay = Delay(self.options.flatten_pause_duration)
        self._flatten_queue: List[Mountain] = []

        # Terrain as it was before any active mountain touched it
        self._pre_mountain = np.zeros(field.heights.shape, dtype=np.float64)
        self._covered = np.zeros(field.heights.shape, dtype=bool)

        if self.budget < math.pi * self.options.min_radius**2:
            logger.warning(
                "Mountain budget smaller than the minimum footprint",
                budget=self.budget,
                min_radius=self.options.min_radius,
            )

    @property
    def budget(self) -> float:
        """Maximum total footprint area before a flatten-all is forced."""
        return self.options.max_mountain_percentage / 100.0 * self.field.area

    @property
    def saturated(self) -> bool:
        """True once not even a minimum-radius mountain would fit."""
        smallest = math.pi * self.options.min_radius**2
        return self.total_area + smallest > self.budget

    def request_mountain(
        self, col: int, row: int, radius: int, target_height: float
    ) -> Optional[Mountain]:
        """
        Try to start a mountain.

        The footprint is reserved immediately. Candidates that would push the
        total over budget are dropped, as are requests made while a flatten
        cycle is pending or running.

        Returns:
            The new Mountain, or None when the candidate was dropped
        """
        with self.field.lock:
            return self._accept(col, row, radius, target_height)

    def _accept(
        self, col: int, row: int, radius: int, target_height: float
    ) -> Optional[Mountain]:
        if self.phase is not CyclePhase.CREATING or radius < 1:
            return None

        area = math.pi * radius**2
        if self.total_area + area > self.budget:
            logger.debug(
                "Mountain candidate dropped",
                radius=radius,
                area=area,
                total_area=self.total_area,
                budget=self.budget,
            )
            return None

        window = self.field.clip_region(
            col - radius, row - radius, 2 * radius + 1, 2 * radius + 1
        )
        if window is None:
            return None
        col0, row0, col1, row1 = window

        cols = np.arange(col0, col1) - col
        rows = np.arange(row0, row1) - row
        dx, dy = np.meshgrid(cols, rows)
        distance = np.sqrt(dx * dx + dy * dy)

        # Cells under an earlier mountain take that mountain's baseline, so
        # flattening in creation order ends on the untouched terrain
        covered = self._covered[row0:row1, col0:col1]
        pre_mountain = self._pre_mountain[row0:row1, col0:col1]
        current = self.field.heights[row0:row1, col0:col1]
        pre_mountain[~covered] = current[~covered]
        covered[:] = True
        baseline = pre_mountain.copy()

        mountain = Mountain(
            id=self._next_id,
            center=(col, row),
            radius=radius,
            target_height=target_height,
            window=window,
            baseline=baseline,
            multiplier=np.clip(1.0 - distance / radius, 0.0, 1.0),
        )
        self._next_id += 1
        self.mountains.append(mountain)
        self.total_area += area

        logger.info(
            "Mountain accepted",
            mountain_id=mountain.id,
            center=mountain.center,
            radius=radius,
            target_height=target_height,
            total_area=self.total_area,
        )
        return mountain

    def flatten_all(self) -> None:
        """Cancel every growing mountain in place and start the flatten cycle."""
        with self.field.lock:
            self._trigger_flatten()

    def _trigger_flatten(self) -> None:
        if self.phase is not CyclePhase.CREATING:
            return
        for mountain in self.mountains:
            if mountain.state in (MountainState.GROWING, MountainState.HOLDING):
                mountain.state = MountainState.GROWN
        self.phase = CyclePhase.PRE_FLATTEN
        self._pre_flatten_delay.reset(self.options.flatten_pause_duration)
        logger.info(
            "Flatten-all triggered",
            mountains=len(self.mountains),
            total_area=self.total_area,
        )

    def advance(self, dt: float) -> None:
        """Resume the lifecycle by ``dt`` seconds."""
        with self.field.lock:
            self._advance(dt)

    def _advance(self, dt: float) -> None:
        if self.phase is CyclePhase.CREATING:
            self._advance_growth(dt)
            if self._creation_delay.advance(dt):
                self._creation_delay.reset()
                self._spawn_random_mountain()
                if self.saturated:
                    self._trigger_flatten()
        elif self.phase is CyclePhase.PRE_FLATTEN:
            if self._pre_flatten_delay.advance(dt):
                self._flatten_queue = list(self.mountains)
                self.phase = CyclePhase.FLATTENING
        else:
            self._advance_flatten(dt)

    # ------------------------------------------------------------------ internal

    def _spawn_random_mountain(self) -> Optional[Mountain]:
        opts = self.options
        col = self.prng.randint(0, self.field.width)
        row = self.prng.randint(0, self.field.height)
        radius = self.prng.randint(opts.min_radius, opts.max_radius + 1)
        target = self.prng.uniform(opts.min_target_height, opts.max_target_height)
        return self._accept(col, row, radius, target)

    def _write(self, mountain: Mountain, values: np.ndarray) -> None:
        col0, row0, col1, row1 = mountain.window
        if self.options.max_height is not None:
            values = np.clip(values, 0.0, self.options.max_height)
        self.field.heights[row0:row1, col0:col1] = values

    def _advance_growth(self, dt: float) -> None:
        opts = self.options
        with self.field.lock:
            for mountain in self.mountains:
                if mountain.state is MountainState.GROWING:
                    mountain.elapsed += dt
                    t = 1.0 if opts.grow_duration <= 0 else mountain.elapsed / opts.grow_duration
                    peak = mountain.target_height * mountain.multiplier
                    self._write(mountain, _lerp_grid(mountain.baseline, peak, t))
                    if t >= 1.0:
                        mountain.elapsed = 0.0
                        if opts.hold_duration > 0:
                            mountain.state = MountainState.HOLDING
                        else:
                            mountain.state = MountainState.GROWN
                elif mountain.state is MountainState.HOLDING:
                    mountain.elapsed += dt
                    if mountain.elapsed >= opts.hold_duration:
                        mountain.state = MountainState.GROWN

    def _advance_flatten(self, dt: float) -> None:
        if not self._flatten_queue:
            self._finish_flatten()
            return

        mountain = self._flatten_queue[0]
        col0, row0, col1, row1 = mountain.window
        with self.field.lock:
            if mountain.state is not MountainState.FLATTENING:
                mountain.state = MountainState.FLATTENING
                mountain.elapsed = 0.0
                mountain.flatten_from = self.field.heights[row0:row1, col0:col1].astype(
                    np.float64
                )

            mountain.elapsed += dt
            duration = self.options.flatten_duration
            t = 1.0 if duration <= 0 else mountain.elapsed / duration
            self._write(mountain, _lerp_grid(mountain.flatten_from, mountain.baseline, t))

        if t >= 1.0:
            mountain.state = MountainState.REMOVED
            mountain.flatten_from = None
            self.total_area -= mountain.area
            self._flatten_queue.pop(0)
            if not self._flatten_queue:
                self._finish_flatten()

    def _finish_flatten(self) -> None:
        self.mountains.clear()
        self._covered.fill(False)
        self.total_area = 0.0
        self.phase = CyclePhase.CREATING
        self.flatten_cycles += 1
        self._creation_delay.reset()
        logger.info("Flatten cycle complete", cycles=self.flatten_cycles)
