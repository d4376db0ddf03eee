"""
Autonomous brush walker.

A roaming radial brush that moves every tick, bounces off the grid edges,
stamps wherever it is and periodically re-rolls its heading and brush
properties. The two sculpting policies share one implementation:

- ``UNCLAMPED``: fixed sculpt speed and step factor, heights accumulate
  without an upper bound
- ``CLAMPED``: sculpt speed re-rolled with the heading, also used as the
  step factor, results clamped into [0, max_height]
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import numpy as np
import structlog

from .alea_prng import AleaPRNG
from .brush_stamp import apply_kernel, radial_kernel
from .height_field import HeightField
from ..utils import random as random_utils

logger = structlog.get_logger()


class WalkerPolicy(str, Enum):
    UNCLAMPED = "unclamped"
    CLAMPED = "clamped"


@dataclass
class WalkerOptions:
    """Tunables for an autonomous walker."""

    policy: WalkerPolicy = WalkerPolicy.UNCLAMPED
    sculpt_speed: float = 0.003  # Peak delta per tick (unclamped)
    speed_factor: float = 0.05  # Step factor (unclamped); step = factor * 100 cells
    max_sculpt_speed: float = 0.005  # Upper bound of the re-rolled speed (clamped)
    max_height: float = 0.5  # Clamp ceiling (clamped)
    max_brush_size: float = 20.0  # Upper bound of the re-rolled brush size
    direction_change_interval: float = 2.0  # Seconds between re-rolls
    world_size: Optional[float] = None  # World extent of the grid; None means 1 unit per cell

    def __post_init__(self):
        self.policy = WalkerPolicy(self.policy)
        if self.direction_change_interval <= 0:
            raise ValueError("direction_change_interval must be positive")
        if self.max_brush_size < 0 or self.max_sculpt_speed < 0:
            raise ValueError("Brush size and sculpt speed maxima must be non-negative")
        if self.max_height <= 0:
            raise ValueError("max_height must be positive")
        if self.world_size is not None and self.world_size <= 0:
            raise ValueError("world_size must be positive")

    @classmethod
    def for_policy(cls, policy: WalkerPolicy) -> "WalkerOptions":
        """Defaults tuned per policy; the clamped walker uses a smaller, twitchier brush."""
        policy = WalkerPolicy(policy)
        if policy is WalkerPolicy.CLAMPED:
            return cls(policy=policy, max_brush_size=10.0, direction_change_interval=1.0)
        return cls(policy=policy)


class AutonomousWalker:
    """A brush that wanders the field and stamps every tick."""

    def __init__(
        self,
        field: HeightField,
        options: Optional[WalkerOptions] = None,
        prng: Optional[AleaPRNG] = None,
    ):
        self.field = field
        self.options = options or WalkerOptions()
        self.prng = prng or random_utils.get_prng()

        self.position = np.array(
            [field.width // 2, field.height // 2], dtype=np.float64
        )
        self.direction = np.array([1.0, 0.0])
        self.brush_size = 0.0
        self.sculpt_speed = self.options.sculpt_speed
        self.time_since_change = 0.0

        self.randomize_direction()
        self.randomize_brush()

    @property
    def clamped(self) -> bool:
        return self.options.policy is WalkerPolicy.CLAMPED

    @property
    def step_factor(self) -> float:
        return self.sculpt_speed if self.clamped else self.options.speed_factor

    @property
    def brush_radius(self) -> int:
        world_size = self.options.world_size or self.field.width
        return int(round(self.brush_size * self.field.width / world_size))

    @property
    def cell(self) -> Tuple[int, int]:
        return int(round(self.position[0])), int(round(self.position[1]))

    def randomize_direction(self) -> None:
        angle = self.prng.angle()
        self.direction = np.array([math.cos(angle), math.sin(angle)])

    def randomize_brush(self) -> None:
        self.brush_size = self.prng.uniform(0.0, self.options.max_brush_size)
        if self.clamped:
            self.sculpt_speed = self.prng.uniform(0.0, self.options.max_sculpt_speed)

    def move(self) -> None:
        """Step along the heading and reflect off any crossed edge."""
        self.position += self.direction * self.step_factor * 100
        x, y = self.position
        if x < 0 or x >= self.field.width:
            self.direction[0] *= -1
        if y < 0 or y >= self.field.height:
            self.direction[1] *= -1

    def sculpt(self) -> bool:
        """Stamp the radial brush at the current cell."""
        kernel = radial_kernel(self.brush_radius, self.sculpt_speed)
        col, row = self.cell
        clamp_max = self.options.max_height if self.clamped else None
        with self.field.lock:
            return apply_kernel(self.field, col, row, kernel, clamp_max=clamp_max)

    def update_timer(self, dt: float) -> None:
        self.time_since_change += dt
        if self.time_since_change >= self.options.direction_change_interval:
            self.randomize_direction()
            self.randomize_brush()
            self.time_since_change = 0.0
            logger.debug(
                "Walker re-rolled",
                direction=self.direction.tolist(),
                brush_size=self.brush_size,
                sculpt_speed=self.sculpt_speed,
            )

    def tick(self, dt: float) -> None:
        """Move, stamp, then advance the re-roll timer."""
        self.move()
        self.sculpt()
        self.update_timer(dt)
