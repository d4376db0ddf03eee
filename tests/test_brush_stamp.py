"""
Tests for brush falloffs, mask sampling and kernel application.
"""

import pytest
import numpy as np
from py_sculpt.core.alea_prng import AleaPRNG
from py_sculpt.core.height_field import HeightField
from py_sculpt.core.brush_stamp import (
    MaskLibrary,
    apply_kernel,
    lerp,
    mask_falloff,
    mask_kernel,
    radial_falloff,
    radial_kernel,
    sample_bilinear,
    to_grayscale,
)


class TestRadialFalloff:
    """Test the linear cone brush."""

    def test_center_gets_peak(self):
        assert radial_falloff(0, 0, 5, 2.0) == 2.0

    def test_rim_and_beyond_get_nothing(self):
        assert radial_falloff(5, 0, 5, 2.0) == 0.0
        assert radial_falloff(3, 4, 5, 2.0) == 0.0  # distance exactly 5
        assert radial_falloff(6, 0, 5, 2.0) == 0.0
        assert radial_falloff(0, 0, 0, 2.0) == 0.0

    def test_linear_profile(self):
        assert radial_falloff(1, 0, 5, 2.0) == pytest.approx(1.6)
        assert radial_falloff(0, -4, 5, 1.0) == pytest.approx(0.2)

    def test_kernel_matches_scalar(self):
        kernel = radial_kernel(5, 2.0)

        assert kernel.shape == (11, 11)
        assert kernel[5, 5] == 2.0
        for dx, dy in [(0, 0), (1, 0), (2, 3), (-4, 1), (5, 0), (5, 5)]:
            assert kernel[5 + dy, 5 + dx] == pytest.approx(radial_falloff(dx, dy, 5, 2.0))

    def test_zero_radius_kernel_is_empty(self):
        kernel = radial_kernel(0, 1.0)
        assert kernel.shape == (1, 1)
        assert kernel[0, 0] == 0.0

    def test_lerp_clamps_t(self):
        assert lerp(0.0, 10.0, 0.5) == 5.0
        assert lerp(0.0, 10.0, 2.0) == 10.0
        assert lerp(0.0, 10.0, -1.0) == 0.0


class TestMaskSampling:
    """Test grayscale conversion and bilinear sampling."""

    def test_bilinear_pixel_centers(self):
        image = np.array([[0.0, 1.0]])

        assert sample_bilinear(image, 0.25, 0.5) == pytest.approx(0.0)
        assert sample_bilinear(image, 0.5, 0.5) == pytest.approx(0.5)
        assert sample_bilinear(image, 0.75, 0.5) == pytest.approx(1.0)

    def test_bilinear_clamps_to_edge(self):
        image = np.array([[0.2, 0.8]])

        assert sample_bilinear(image, -1.0, 0.5) == pytest.approx(0.2)
        assert sample_bilinear(image, 2.0, 0.5) == pytest.approx(0.8)

    def test_grayscale_from_rgb(self):
        white = np.full((2, 2, 3), 255, dtype=np.uint8)
        red = np.zeros((2, 2, 4), dtype=np.float64)
        red[:, :, 0] = 1.0

        np.testing.assert_allclose(to_grayscale(white), np.ones((2, 2)))
        np.testing.assert_allclose(to_grayscale(red), np.full((2, 2), 0.299))

    def test_grayscale_rejects_bad_shapes(self):
        with pytest.raises(ValueError):
            to_grayscale(np.zeros(4))


class TestMaskFalloff:
    """Test the mask-sampled brush."""

    def test_uniform_mask_scales_with_opacity(self):
        mask = np.ones((4, 4))

        assert mask_falloff(0, 0, 10, mask, 0.5) == pytest.approx(0.5)
        assert mask_falloff(5, 0, 10, mask, 0.5) == pytest.approx(0.25)

    def test_outside_brush_gets_nothing(self):
        mask = np.ones((4, 4))

        assert mask_falloff(10, 0, 10, mask, 0.5) == 0.0
        assert mask_falloff(8, 8, 10, mask, 0.5) == 0.0

    def test_delta_clamped_to_unit(self):
        mask = np.ones((4, 4))
        assert mask_falloff(0, 0, 10, mask, 3.0) == 1.0

    def test_kernel_matches_scalar(self):
        masks = MaskLibrary.default(size=16)
        for mask in masks:
            kernel = mask_kernel(6, mask, 0.7)
            assert kernel.shape == (13, 13)
            for dx, dy in [(0, 0), (2, -3), (-6, 0), (4, 4), (6, 6)]:
                assert kernel[6 + dy, 6 + dx] == pytest.approx(
                    mask_falloff(dx, dy, 6, mask, 0.7)
                )


class TestMaskLibrary:
    """Test the mask provider."""

    def test_default_masks(self):
        masks = MaskLibrary.default(size=16)

        assert len(masks) == 4
        for mask in masks:
            assert mask.shape == (16, 16)
            assert mask.min() >= 0.0
            assert mask.max() <= 1.0

    def test_pick_returns_a_member(self):
        masks = MaskLibrary([np.zeros((2, 2)), np.ones((2, 2))])
        prng = AleaPRNG("pick")

        picked = {float(masks.pick(prng)[0, 0]) for _ in range(50)}
        assert picked == {0.0, 1.0}

    def test_empty_library_is_invalid(self):
        with pytest.raises(ValueError):
            MaskLibrary([])


class TestApplyKernel:
    """Test batched additive stamping."""

    def test_adds_kernel_at_center(self):
        field = HeightField(32, fill=1.0)
        kernel = radial_kernel(3, 2.0)

        assert apply_kernel(field, 10, 12, kernel)

        assert field.get(10, 12) == pytest.approx(3.0)
        assert field.get(13, 12) == pytest.approx(1.0)
        assert field.heights.sum() == pytest.approx(32 * 32 + kernel.sum(), rel=1e-5)

    def test_corner_stamp_stays_in_bounds(self):
        field = HeightField(16)
        kernel = radial_kernel(5, 1.0)

        assert apply_kernel(field, 0, 0, kernel)

        # Only the quarter of the kernel that overlaps the grid lands
        np.testing.assert_allclose(field.heights[0:6, 0:6], kernel[5:11, 5:11], rtol=1e-6)
        assert np.all(field.heights[6:, :] == 0)
        assert np.all(field.heights[:, 6:] == 0)

    def test_stamp_entirely_outside(self):
        field = HeightField(16)

        assert not apply_kernel(field, -20, 40, radial_kernel(5, 1.0))
        assert np.all(field.heights == 0)

    def test_clamp_policy(self):
        field = HeightField(16, fill=0.9)
        kernel = radial_kernel(4, 0.5)

        apply_kernel(field, 8, 8, kernel, clamp_max=1.0)

        assert field.heights.max() == pytest.approx(1.0)
        assert field.heights.min() >= 0.0
