"""
Brush stamps: height deltas computed from a brush falloff.

Two falloff families are provided:

- radial: a linear cone from ``peak`` at the brush center to zero at the rim
- mask-sampled: a grayscale stamp image sampled bilinearly, faded toward the
  rim and scaled by an opacity

Every function here is pure. Kernels are additive deltas; the caller decides
whether the result is clamped (see ``apply_kernel``) and holds the field lock
while applying them.
"""

from typing import Iterable, List, Optional

import numpy as np

from .alea_prng import AleaPRNG
from .height_field import HeightField

# ITU-R 601 luma weights, same as a texture's grayscale value
_LUMA = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation with ``t`` clamped to [0, 1]."""
    t = min(max(t, 0.0), 1.0)
    return a + (b - a) * t


def clamp01(value):
    return np.clip(value, 0.0, 1.0)


def radial_falloff(dx: int, dy: int, radius: float, peak: float) -> float:
    """
    Height delta of a radial brush at offset (dx, dy) from its center.

    Args:
        dx: Column offset from the brush center
        dy: Row offset from the brush center
        radius: Brush radius in cells
        peak: Delta at the very center

    Returns:
        ``lerp(peak, 0, distance / radius)`` inside the radius, 0 elsewhere
    """
    distance = float(np.sqrt(dx * dx + dy * dy))
    if radius <= 0 or distance >= radius:
        return 0.0
    return lerp(peak, 0.0, distance / radius)


def _offset_grid(half: int):
    offsets = np.arange(-half, half + 1, dtype=np.float64)
    dx, dy = np.meshgrid(offsets, offsets)  # dx varies along columns
    return dx, dy, np.sqrt(dx * dx + dy * dy)


def radial_kernel(radius: int, peak: float) -> np.ndarray:
    """
    Vectorized radial falloff over the brush's bounding square.

    Returns:
        (2r+1, 2r+1) array of deltas indexed [row, col], center at [r, r]
    """
    radius = max(int(radius), 0)
    _, _, distance = _offset_grid(radius)
    if radius == 0:
        return np.zeros_like(distance)
    kernel = peak * (1.0 - distance / radius)
    kernel[distance >= radius] = 0.0
    return kernel


def to_grayscale(image) -> np.ndarray:
    """
    Convert a mask image to float grayscale in [0, 1].

    Accepts 2D grayscale or (H, W, 3|4) RGB(A) arrays. Integer images are
    normalized by their dtype's maximum.
    """
    image = np.asarray(image)
    if np.issubdtype(image.dtype, np.integer):
        data = image.astype(np.float64) / np.iinfo(image.dtype).max
    else:
        data = image.astype(np.float64)

    if data.ndim == 3:
        if data.shape[2] < 3:
            data = data[:, :, 0]
        else:
            data = data[:, :, :3] @ _LUMA
    elif data.ndim != 2:
        raise ValueError(f"Mask image must be 2D or RGB(A), got shape {image.shape}")

    return clamp01(data)


def _bilinear(image: np.ndarray, u, v):
    """Clamp-to-edge bilinear lookup with pixel centers at (i + 0.5) / size."""
    rows, cols = image.shape
    x = np.asarray(u, dtype=np.float64) * cols - 0.5
    y = np.asarray(v, dtype=np.float64) * rows - 0.5

    x0 = np.floor(x)
    y0 = np.floor(y)
    fx = x - x0
    fy = y - y0

    x0i = np.clip(x0.astype(int), 0, cols - 1)
    x1i = np.clip(x0.astype(int) + 1, 0, cols - 1)
    y0i = np.clip(y0.astype(int), 0, rows - 1)
    y1i = np.clip(y0.astype(int) + 1, 0, rows - 1)

    top = image[y0i, x0i] * (1 - fx) + image[y0i, x1i] * fx
    bottom = image[y1i, x0i] * (1 - fx) + image[y1i, x1i] * fx
    return top * (1 - fy) + bottom * fy


def sample_bilinear(image: np.ndarray, u: float, v: float) -> float:
    """Sample a grayscale mask at normalized coordinates, result in [0, 1]."""
    return float(clamp01(_bilinear(image, u, v)))


def mask_falloff(
    dx: int, dy: int, size: int, mask: np.ndarray, opacity: float
) -> float:
    """
    Height delta of a mask-sampled brush at offset (dx, dy).

    The offset is mapped onto the mask with
    ``u = (dx + size) / (2 * size)``, ``v = (dy + size) / (2 * size)``;
    the sampled strength is faded by ``1 - distance / size`` and scaled by
    ``opacity``. Cells with ``distance / size > 1`` get nothing.
    """
    if size <= 0:
        return 0.0
    distance = float(np.sqrt(dx * dx + dy * dy)) / size
    if distance > 1.0:
        return 0.0
    u = (dx + size) / (2.0 * size)
    v = (dy + size) / (2.0 * size)
    strength = sample_bilinear(mask, u, v)
    return float(clamp01(opacity * strength * (1.0 - distance)))


def mask_kernel(size: int, mask: np.ndarray, opacity: float) -> np.ndarray:
    """Vectorized ``mask_falloff`` over the (2*size+1) bounding square."""
    size = max(int(size), 0)
    dx, dy, distance = _offset_grid(size)
    if size == 0:
        return np.zeros_like(distance)
    distance = distance / size
    strength = clamp01(
        _bilinear(mask, (dx + size) / (2.0 * size), (dy + size) / (2.0 * size))
    )
    kernel = clamp01(opacity * strength * (1.0 - distance))
    kernel[distance > 1.0] = 0.0
    return kernel


def apply_kernel(
    field: HeightField,
    center_col: int,
    center_row: int,
    kernel: np.ndarray,
    clamp_max: Optional[float] = None,
) -> bool:
    """
    Add a centered kernel to the field in one region read/write.

    Kernel cells that fall outside the grid are skipped. When ``clamp_max``
    is given the touched cells are clamped into [0, clamp_max].

    Returns:
        False if the kernel missed the grid entirely
    """
    half_rows = kernel.shape[0] // 2
    half_cols = kernel.shape[1] // 2
    origin_col = center_col - half_cols
    origin_row = center_row - half_rows

    window = field.clip_region(origin_col, origin_row, kernel.shape[1], kernel.shape[0])
    if window is None:
        return False
    col0, row0, col1, row1 = window

    region = field.get_region(origin_col, origin_row, kernel.shape[1], kernel.shape[0])
    region += kernel[
        row0 - origin_row : row1 - origin_row, col0 - origin_col : col1 - origin_col
    ]
    if clamp_max is not None:
        np.clip(region, 0.0, clamp_max, out=region)
    field.set_region(col0, row0, region)
    return True


class MaskLibrary:
    """Indexable collection of grayscale brush masks."""

    def __init__(self, masks: Iterable):
        self._masks: List[np.ndarray] = [to_grayscale(mask) for mask in masks]
        if not self._masks:
            raise ValueError("MaskLibrary needs at least one mask")

    def __len__(self) -> int:
        return len(self._masks)

    def __getitem__(self, index: int) -> np.ndarray:
        return self._masks[index]

    def pick(self, prng: AleaPRNG) -> np.ndarray:
        """Pick a random mask."""
        return self._masks[prng.randint(0, len(self._masks))]

    @classmethod
    def default(cls, size: int = 64, prng: Optional[AleaPRNG] = None) -> "MaskLibrary":
        """
        Procedural stand-ins for a terrain editor's stock brushes.

        Args:
            size: Edge length of each square mask in pixels
            prng: Generator for the speckled mask (a fixed seed if omitted)
        """
        prng = prng or AleaPRNG("mask-library")
        coords = (np.arange(size, dtype=np.float64) + 0.5) / size * 2.0 - 1.0
        x, y = np.meshgrid(coords, coords)
        r = np.sqrt(x * x + y * y)

        soft_round = clamp01(1.0 - r)
        gaussian = np.exp(-(r**2) / 0.18)
        ring = clamp01(1.0 - np.abs(r - 0.55) / 0.35)
        noise = np.array(
            [[prng.random() for _ in range(size)] for _ in range(size)]
        )
        speckled = clamp01(soft_round * (0.6 + 0.4 * noise))

        return cls([soft_round, gaussian, ring, speckled])

