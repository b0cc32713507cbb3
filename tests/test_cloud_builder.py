"""
Tests for Point Cloud Builder
"""

import pytest
import numpy as np

from surface_detection.cloud.cloud_builder import CloudBuilder


class TestCloudBuilder:
    """Test suite for cloud building."""

    @pytest.fixture
    def builder(self, config_manager):
        """Fixture providing a cloud builder instance."""
        return CloudBuilder(config_manager)

    def test_build_skips_invalid_pixels(self, builder, flat_plane_grid):
        """Test that sentinel and non-finite pixels are dropped."""
        cloud = builder.build(flat_plane_grid)

        assert len(cloud) == 30 * 30 - 4
        assert cloud.points.shape == (896, 3)
        assert cloud.pixel_indices.shape == (896, 2)
        assert np.all(np.isfinite(cloud.points))

        pixels = set(map(tuple, cloud.pixel_indices.tolist()))
        for invalid in [(0, 0), (3, 7), (29, 29), (12, 20)]:
            assert invalid not in pixels

    def test_build_preserves_row_major_order(self, builder, flat_plane_grid):
        """Test that points follow the row-major pixel scan."""
        cloud = builder.build(flat_plane_grid)

        flat = cloud.pixel_indices[:, 0] * 30 + cloud.pixel_indices[:, 1]
        assert np.all(np.diff(flat) > 0)

        rows, cols = cloud.pixel_indices[:, 0], cloud.pixel_indices[:, 1]
        np.testing.assert_array_equal(cloud.points, flat_plane_grid[rows, cols])

    def test_all_invalid_grid_gives_empty_cloud(self, builder):
        """Test that an all-invalid grid yields an empty cloud, not an error."""
        cloud = builder.build(np.zeros((12, 16, 3)))

        assert len(cloud) == 0
        assert cloud.points.shape == (0, 3)
        assert cloud.pixel_indices.shape == (0, 2)

    def test_partial_zero_coordinates_are_valid(self, builder):
        """Test that only an all-zero triple is treated as the sentinel."""
        xyz = np.zeros((2, 2, 3))
        xyz[0, 1] = [0.0, 0.0, 1.5]
        xyz[1, 0] = [0.2, 0.0, 0.0]

        cloud = builder.build(xyz)

        np.testing.assert_array_equal(cloud.pixel_indices, [[0, 1], [1, 0]])

    def test_custom_sentinel(self, config_manager):
        """Test a configured sentinel value other than zero."""
        config_manager.set('cloud.invalid_value', -1.0)
        builder = CloudBuilder(config_manager)

        xyz = np.ones((3, 3, 3))
        xyz[1, 1] = -1.0

        assert len(builder.build(xyz)) == 8

    def test_invalid_shape(self, builder):
        """Test error handling for grids without three coordinates per pixel."""
        with pytest.raises(ValueError, match="shape"):
            builder.build(np.zeros((10, 10)))
