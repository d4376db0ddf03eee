"""
Road carving by a self-avoiding randomized walk.

Each tick the road head may curve, then tries to step forward. Steps onto
an already visited cell or outside the inset border are refused and the
head picks a new cardinal direction instead. A square swath around the
head is flattened to zero every tick. After ``timer_value`` seconds the
road stops, waits ``restart_wait`` seconds and a brand new road starts.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

import structlog

from .alea_prng import AleaPRNG
from .height_field import HeightField
from .scheduler import Delay
from ..utils import random as random_utils

logger = structlog.get_logger()

Vec2 = Tuple[int, int]

UP: Vec2 = (0, 1)
DOWN: Vec2 = (0, -1)
LEFT: Vec2 = (-1, 0)
RIGHT: Vec2 = (1, 0)
CARDINALS = (UP, DOWN, LEFT, RIGHT)


@dataclass
class PathOptions:
    """Tunables for the road carver."""

    timer_value: float = 10.0  # Seconds of carving per road
    restart_wait: float = 10.0  # Seconds to wait before starting a new road
    min_road_width: int = 3
    max_road_width: int = 8  # Exclusive upper bound of the width, also the border inset
    curve_probability: float = 0.2  # Chance per tick to rotate the heading
    min_curve_angle: float = 20.0  # Degrees
    max_curve_angle: float = 60.0  # Degrees
    road_height: float = 0.0  # Height the swath is flattened to

    def __post_init__(self):
        if self.timer_value <= 0 or self.restart_wait < 0:
            raise ValueError("timer_value must be positive and restart_wait non-negative")
        if self.min_road_width < 1 or self.max_road_width < self.min_road_width:
            raise ValueError(
                f"Invalid road width range [{self.min_road_width}, {self.max_road_width})"
            )
        if not 0.0 <= self.curve_probability <= 1.0:
            raise ValueError("curve_probability must be within [0, 1]")


def rotate_direction(direction: Vec2, angle_degrees: float) -> Vec2:
    """
    Rotate an integer direction and round back to integers.

    Rounding can leave a cardinal unchanged at shallow angles, or collapse
    a diagonal to a degenerate vector; callers live with that.
    """
    radians = math.radians(angle_degrees)
    cos = math.cos(radians)
    sin = math.sin(radians)
    x, y = direction
    return int(round(x * cos - y * sin)), int(round(x * sin + y * cos))


class PathCarver:
    """Carves winding, self-avoiding roads into the height field."""

    def __init__(
        self,
        field: HeightField,
        options: Optional[PathOptions] = None,
        prng: Optional[AleaPRNG] = None,
    ):
        self.field = field
        self.options = options or PathOptions()
        self.prng = prng or random_utils.get_prng()

        inset = self.options.max_road_width
        if field.width <= 2 * inset or field.height <= 2 * inset:
            logger.error(
                "Height field too small for road inset",
                width=field.width,
                height=field.height,
                inset=inset,
            )
            raise ValueError("Height field too small for the configured road width")

        self.position: Vec2 = (inset, inset)
        self.direction: Vec2 = UP
        self.road_width = self.options.min_road_width
        self.visited: Set[Vec2] = set()
        self.trail: List[Vec2] = []  # committed positions of the current road
        self.paths_started = 0

        self.timer = self.options.timer_value
        self._restart: Optional[Delay] = None

        self.start_path()

    @property
    def waiting(self) -> bool:
        return self._restart is not None

    def start_path(
        self,
        position: Optional[Vec2] = None,
        direction: Optional[Vec2] = None,
        road_width: Optional[int] = None,
    ) -> None:
        """Begin a new road; anything not given is rolled at random."""
        inset = self.options.max_road_width
        if position is None:
            position = (
                self.prng.randint(inset, self.field.width - inset),
                self.prng.randint(inset, self.field.height - inset),
            )
        if road_width is None:
            road_width = self.prng.randint(
                self.options.min_road_width, self.options.max_road_width
            )

        self.position = (int(position[0]), int(position[1]))
        if direction is None:
            self.randomize_direction()
        else:
            self.direction = direction
        self.road_width = int(road_width)
        self.visited.clear()
        self.trail = [self.position]
        self.paths_started += 1

        logger.info(
            "Road started",
            position=self.position,
            direction=self.direction,
            road_width=self.road_width,
        )

    def randomize_direction(self) -> None:
        self.direction = CARDINALS[self.prng.randint(0, len(CARDINALS))]

    def within_bounds(self, position: Vec2) -> bool:
        inset = self.options.max_road_width
        x, y = position
        return (
            inset <= x < self.field.width - inset
            and inset <= y < self.field.height - inset
        )

    def step(self) -> bool:
        """
        Advance the road head by one cell if possible.

        Returns:
            True if the head moved, False if the step was refused
        """
        self.visited.add(self.position)

        if self.prng.chance(self.options.curve_probability):
            angle = self.prng.uniform(
                self.options.min_curve_angle, self.options.max_curve_angle
            )
            if self.prng.random() < 0.5:
                angle = -angle
            self.direction = rotate_direction(self.direction, angle)

        candidate = (
            self.position[0] + self.direction[0],
            self.position[1] + self.direction[1],
        )
        if candidate in self.visited or not self.within_bounds(candidate):
            self.randomize_direction()
            return False

        self.position = candidate
        self.trail.append(candidate)
        return True

    def flatten(self) -> None:
        """Flatten the square swath centered on the road head."""
        half = self.road_width // 2
        col, row = self.position
        with self.field.lock:
            window = self.field.clip_region(
                col - half, row - half, self.road_width, self.road_width
            )
            if window is None:
                return
            col0, row0, col1, row1 = window
            self.field.heights[row0:row1, col0:col1] = self.options.road_height

    def tick(self, dt: float) -> None:
        """Per-frame update: wait out a restart, or carve one segment."""
        if self._restart is not None:
            if self._restart.advance(dt):
                self._restart = None
                self.start_path()
            return

        self.timer -= dt
        if self.timer <= 0:
            self.timer = self.options.timer_value
            self._restart = Delay(self.options.restart_wait)
            logger.debug("Road finished", length=len(self.trail))
            return

        self.step()
        self.flatten()
