"""
Stroke-built mountains: textured brush dabs applied one per tick.

Emulates a user holding a terrain brush down: a random center and size are
chosen, then a random number of strokes is dabbed around the center, each
with a random mask and opacity. One mountain is built at a time and a pause
follows each finished mountain.
"""

from dataclasses import dataclass
from typing import Optional

import structlog

from .alea_prng import AleaPRNG
from .brush_stamp import MaskLibrary, apply_kernel, mask_kernel
from .height_field import HeightField
from .scheduler import Delay
from ..utils import random as random_utils

logger = structlog.get_logger()


@dataclass
class StrokeMountainOptions:
    """Tunables for stroke-built mountains."""

    mountain_interval: float = 1.0  # Seconds between mountains
    max_mountain_height: float = 25.0  # Clamp ceiling for stroked cells
    min_brush_size: int = 30
    max_brush_size: int = 100  # Exclusive
    min_brush_opacity: float = 1.0  # Opacity range is divided by 10 per stroke
    max_brush_opacity: float = 8.0
    detail_layers: int = 20  # Exclusive upper bound of the stroke count
    min_strokes: int = 3

    def __post_init__(self):
        if self.min_brush_size < 1 or self.max_brush_size < self.min_brush_size:
            raise ValueError(
                f"Invalid brush size range [{self.min_brush_size}, {self.max_brush_size})"
            )
        if self.max_brush_opacity < self.min_brush_opacity:
            raise ValueError("max_brush_opacity must not be below min_brush_opacity")
        if self.min_strokes < 1 or self.detail_layers < self.min_strokes:
            raise ValueError(
                f"Invalid stroke range [{self.min_strokes}, {self.detail_layers})"
            )
        if self.mountain_interval < 0 or self.max_mountain_height <= 0:
            raise ValueError("mountain_interval must be >= 0 and max_mountain_height > 0")


@dataclass
class StrokePlan:
    """The mountain currently being dabbed."""

    center: tuple  # (col, row)
    brush_size: int
    strokes_total: int
    strokes_done: int = 0


class StrokeMountainBuilder:
    """Builds mountains out of mask-sampled brush strokes."""

    def __init__(
        self,
        field: HeightField,
        masks: MaskLibrary,
        options: Optional[StrokeMountainOptions] = None,
        prng: Optional[AleaPRNG] = None,
    ):
        self.field = field
        self.masks = masks
        self.options = options or StrokeMountainOptions()
        self.prng = prng or random_utils.get_prng()

        self.current: Optional[StrokePlan] = None
        self.mountains_built = 0
        self._pause: Optional[Delay] = None

    @property
    def generating(self) -> bool:
        return self.current is not None

    def plan_mountain(self) -> StrokePlan:
        opts = self.options
        plan = StrokePlan(
            center=(
                self.prng.randint(0, self.field.width),
                self.prng.randint(0, self.field.height),
            ),
            brush_size=self.prng.randint(opts.min_brush_size, opts.max_brush_size),
            strokes_total=self.prng.randint(opts.min_strokes, opts.detail_layers),
        )
        logger.debug(
            "Stroke mountain planned",
            center=plan.center,
            brush_size=plan.brush_size,
            strokes=plan.strokes_total,
        )
        return plan

    def apply_stroke(self, plan: StrokePlan) -> bool:
        """Dab one randomized stroke of ``plan``."""
        opts = self.options
        size = plan.brush_size
        opacity = self.prng.uniform(opts.min_brush_opacity, opts.max_brush_opacity) / 10.0
        offset_col = self.prng.randint(-(size // 2), size // 2)
        offset_row = self.prng.randint(-(size // 2), size // 2)
        mask = self.masks.pick(self.prng)

        kernel = mask_kernel(size, mask, opacity)
        col = plan.center[0] + offset_col
        row = plan.center[1] + offset_row
        with self.field.lock:
            return apply_kernel(
                self.field, col, row, kernel, clamp_max=opts.max_mountain_height
            )

    def advance(self, dt: float) -> None:
        """Dab the next stroke, or wait out the pause between mountains."""
        if self._pause is not None:
            if not self._pause.advance(dt):
                return
            self._pause = None

        if self.current is None:
            self.current = self.plan_mountain()

        self.apply_stroke(self.current)
        self.current.strokes_done += 1

        if self.current.strokes_done >= self.current.strokes_total:
            self.mountains_built += 1
            logger.info(
                "Stroke mountain built",
                center=self.current.center,
                strokes=self.current.strokes_done,
            )
            self.current = None
            self._pause = Delay(self.options.mountain_interval)
