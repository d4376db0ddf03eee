"""
Height field storage shared by every sculpting component.

The field is a dense NumPy grid indexed ``[row, col]``. Accessors take
``(col, row)`` like the host terrain API and silently ignore anything
outside the grid: sculpting is best-effort and a brush hanging off the
edge simply has no effect there.
"""

import threading
from typing import Optional, Tuple

import numpy as np
import structlog

logger = structlog.get_logger()


class HeightField:
    """Mutable grid of non-negative height samples with bounds-safe access."""

    def __init__(self, width: int, height: Optional[int] = None, fill: float = 0.0):
        """
        Initialize the height field.

        Args:
            width: Number of columns
            height: Number of rows (defaults to ``width``, square fields)
            fill: Initial height of every sample
        """
        if height is None:
            height = width
        if width <= 0 or height <= 0:
            logger.error("Invalid height field resolution", width=width, height=height)
            raise ValueError(f"Invalid height field resolution: {width}x{height}")

        self.width = int(width)
        self.height = int(height)
        self.heights = np.full((self.height, self.width), fill, dtype=np.float32)

        # Guards every read -> compute -> write sequence on the grid
        self.lock = threading.RLock()

    @classmethod
    def from_array(cls, array: np.ndarray) -> "HeightField":
        """Adopt an existing 2D array of heights (copied, stored as float32)."""
        array = np.asarray(array)
        if array.ndim != 2:
            raise ValueError(f"Height array must be 2D, got shape {array.shape}")
        field = cls(array.shape[1], array.shape[0])
        field.heights[:, :] = array
        return field

    @property
    def resolution(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    def in_bounds(self, col: int, row: int) -> bool:
        return 0 <= col < self.width and 0 <= row < self.height

    def get(self, col: int, row: int) -> Optional[float]:
        """Return the height at (col, row), or None outside the grid."""
        if not self.in_bounds(col, row):
            return None
        return float(self.heights[row, col])

    def set(self, col: int, row: int, value: float) -> bool:
        """Write a height; out-of-bounds writes are ignored. Returns True if written."""
        if not self.in_bounds(col, row):
            return False
        self.heights[row, col] = value
        return True

    def clip_region(
        self, origin_col: int, origin_row: int, width: int, height: int
    ) -> Optional[Tuple[int, int, int, int]]:
        """
        Intersect a requested rectangle with the grid.

        Returns:
            (col0, row0, col1, row1) half-open window, or None when the
            rectangle lies entirely outside the grid
        """
        col0 = max(origin_col, 0)
        row0 = max(origin_row, 0)
        col1 = min(origin_col + width, self.width)
        row1 = min(origin_row + height, self.height)
        if col0 >= col1 or row0 >= row1:
            return None
        return col0, row0, col1, row1

    def get_region(
        self, origin_col: int, origin_row: int, width: int, height: int
    ) -> np.ndarray:
        """
        Copy a sub-rectangle of the grid.

        The copy only covers the in-bounds part of the request; an empty
        array comes back when nothing overlaps.
        """
        window = self.clip_region(origin_col, origin_row, width, height)
        if window is None:
            return np.zeros((0, 0), dtype=self.heights.dtype)
        col0, row0, col1, row1 = window
        return self.heights[row0:row1, col0:col1].copy()

    def set_region(self, origin_col: int, origin_row: int, grid: np.ndarray) -> None:
        """Write ``grid`` with its top-left sample at (origin_col, origin_row), clipped."""
        grid = np.asarray(grid)
        rows, cols = grid.shape
        window = self.clip_region(origin_col, origin_row, cols, rows)
        if window is None:
            return
        col0, row0, col1, row1 = window
        src_col = col0 - origin_col
        src_row = row0 - origin_row
        self.heights[row0:row1, col0:col1] = grid[
            src_row : src_row + (row1 - row0), src_col : src_col + (col1 - col0)
        ]

    def snapshot(self) -> np.ndarray:
        """Full copy of the grid taken under the lock."""
        with self.lock:
            return self.heights.copy()

    def fill(self, value: float) -> None:
        with self.lock:
            self.heights.fill(value)
