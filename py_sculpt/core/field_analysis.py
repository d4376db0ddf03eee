"""Summary statistics of a height field."""

from dataclasses import asdict, dataclass
from typing import Dict

import numpy as np

from .height_field import HeightField


@dataclass
class FieldStats:
    min_height: float
    max_height: float
    mean_height: float
    raised_fraction: float  # share of cells above the threshold

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def analyze_field(field: HeightField, threshold: float = 1e-6) -> FieldStats:
    heights = field.snapshot()
    return FieldStats(
        min_height=float(np.min(heights)),
        max_height=float(np.max(heights)),
        mean_height=float(np.mean(heights)),
        raised_fraction=float(np.mean(heights > threshold)),
    )
