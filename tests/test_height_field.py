"""
Tests for the height field grid store.
"""

import pytest
import numpy as np
from py_sculpt.core.height_field import HeightField
from py_sculpt.core.field_analysis import analyze_field


class TestHeightField:
    """Test bounds-safe access and region batching."""

    @pytest.fixture
    def field(self):
        """Create a small rectangular field with a known pattern."""
        field = HeightField(8, 6)
        field.heights[:, :] = np.arange(48, dtype=np.float32).reshape(6, 8)
        return field

    def test_initialization(self):
        """Square by default, float32, filled."""
        field = HeightField(16, fill=1.5)

        assert field.resolution == (16, 16)
        assert field.heights.shape == (16, 16)
        assert field.heights.dtype == np.float32
        assert np.all(field.heights == 1.5)
        assert field.area == 256

    def test_invalid_resolution_is_fatal(self):
        with pytest.raises(ValueError):
            HeightField(0)
        with pytest.raises(ValueError):
            HeightField(10, -1)

    def test_get_and_set_use_col_row(self, field):
        """(col, row) maps onto heights[row, col]."""
        assert field.get(3, 2) == 2 * 8 + 3

        assert field.set(3, 2, 99.0)
        assert field.heights[2, 3] == 99.0

    def test_out_of_bounds_is_ignored(self, field):
        """Out-of-bounds reads return None and writes are skipped."""
        before = field.heights.copy()

        assert field.get(-1, 0) is None
        assert field.get(8, 0) is None
        assert field.get(0, 6) is None
        assert not field.set(-1, 0, 5.0)
        assert not field.set(0, 6, 5.0)

        np.testing.assert_array_equal(field.heights, before)

    def test_get_region_is_a_clipped_copy(self, field):
        region = field.get_region(6, 4, 4, 4)

        # Only the 2x2 in-bounds corner comes back
        assert region.shape == (2, 2)
        np.testing.assert_array_equal(region, field.heights[4:6, 6:8])

        region[:] = -1
        assert np.all(field.heights[4:6, 6:8] >= 0)

    def test_get_region_fully_outside(self, field):
        assert field.get_region(20, 20, 3, 3).size == 0
        assert field.clip_region(-5, -5, 3, 3) is None

    def test_set_region_clips_to_grid(self, field):
        grid = np.full((3, 3), 7.0)
        field.set_region(-1, -1, grid)

        # Only the 2x2 overlap is written
        np.testing.assert_array_equal(field.heights[0:2, 0:2], np.full((2, 2), 7.0))
        assert field.heights[2, 0] == 16
        assert field.heights[0, 2] == 2

    def test_from_array(self):
        array = np.array([[0, 1, 2], [3, 4, 5]], dtype=np.int64)
        field = HeightField.from_array(array)

        assert field.resolution == (3, 2)
        assert field.get(2, 1) == 5.0
        assert field.heights.dtype == np.float32

        with pytest.raises(ValueError):
            HeightField.from_array(np.zeros(5))

    def test_snapshot_and_fill(self, field):
        snapshot = field.snapshot()
        field.fill(0.0)

        assert np.all(field.heights == 0)
        assert snapshot[5, 7] == 47

    def test_analyze_field(self):
        field = HeightField(10)
        field.heights[0, :5] = 2.0

        stats = analyze_field(field)

        assert stats.min_height == 0.0
        assert stats.max_height == 2.0
        assert stats.mean_height == pytest.approx(0.1)
        assert stats.raised_fraction == pytest.approx(0.05)
        assert set(stats.to_dict()) == {
            "min_height", "max_height", "mean_height", "raised_fraction"
        }
