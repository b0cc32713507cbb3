"""
Tests for Voxel Grid Downsampler
"""

import pytest
import numpy as np
from hypothesis import given, settings, strategies as st

from surface_detection.cloud.cloud_builder import CloudBuilder
from surface_detection.cloud.voxel_downsampler import VoxelDownsampler
from surface_detection.data_models import PointCloud
from surface_detection.utils.config_manager import ConfigManager

from frame_factory import make_plane_grid


def _random_cloud(seed: int, n_points: int) -> PointCloud:
    rng = np.random.default_rng(seed)
    points = rng.uniform(-1.0, 1.0, (n_points, 3))
    pixel_indices = np.column_stack([np.arange(n_points) // 100, np.arange(n_points) % 100])
    return PointCloud(points=points, pixel_indices=pixel_indices.astype(np.int64))


class TestVoxelDownsampler:
    """Test suite for voxel downsampling."""

    @pytest.fixture
    def downsampler(self, config_manager):
        """Fixture providing a voxel downsampler instance."""
        return VoxelDownsampler(config_manager)

    @pytest.fixture
    def large_cloud(self, config_manager):
        """Fixture providing a 2500 point planar cloud."""
        return CloudBuilder(config_manager).build(make_plane_grid(rows=50, cols=50, spacing=0.013))

    def test_small_cloud_bypassed(self, downsampler, flat_plane_grid, config_manager):
        """Test that clouds at or below the threshold flow through unchanged."""
        cloud = CloudBuilder(config_manager).build(flat_plane_grid)

        assert not downsampler.needs_downsampling(cloud)
        assert downsampler.downsample(cloud) is cloud
        assert downsampler.last_leaf_size is None

    def test_large_cloud_reduced_below_threshold(self, downsampler, large_cloud):
        """Test that the adaptive leaf brings the cloud under the ceiling."""
        result = downsampler.downsample(large_cloud)

        assert downsampler.needs_downsampling(large_cloud)
        assert len(result) <= downsampler.cloud_size_threshold
        assert len(result) < len(large_cloud)
        assert downsampler.last_leaf_size > downsampler.leaf_size

    def test_centroids_stay_on_plane(self, downsampler, large_cloud):
        """Test that voxel centroids of a plane lie on the plane."""
        result = downsampler.downsample(large_cloud)

        np.testing.assert_allclose(result.points[:, 2], 5.0)

    def test_fixed_leaf_without_adaptation(self, config_manager, large_cloud):
        """Test that a fixed leaf is used as-is when adaptation is off."""
        config_manager.set('downsampling.adaptive_leaf', False)
        config_manager.set('downsampling.leaf_size', 0.001)
        downsampler = VoxelDownsampler(config_manager)

        result = downsampler.downsample(large_cloud)

        # Leaf smaller than the lattice spacing keeps every point
        assert len(result) == len(large_cloud)
        assert downsampler.last_leaf_size == pytest.approx(0.001)

    def test_voxelize_centroid_and_representative(self, downsampler):
        """Test centroid and back-reference of a single voxel."""
        cloud = PointCloud(
            points=np.array([[0.0, 0.0, 0.0], [0.004, 0.002, 0.0], [0.5, 0.5, 0.5]]),
            pixel_indices=np.array([[0, 0], [0, 1], [4, 2]], dtype=np.int64)
        )

        result = downsampler.voxelize(cloud, 0.01)

        assert len(result) == 2
        np.testing.assert_allclose(result.points[0], [0.002, 0.001, 0.0])
        np.testing.assert_array_equal(result.pixel_indices, [[0, 0], [4, 2]])

    def test_voxelize_empty_cloud(self, downsampler):
        """Test voxelizing an empty cloud."""
        assert len(downsampler.voxelize(PointCloud.empty(), 0.01)) == 0

    def test_threshold_override(self, config_manager):
        """Test explicit threshold override and its validation."""
        assert VoxelDownsampler(config_manager, cloud_size_threshold=10).cloud_size_threshold == 10

        with pytest.raises(ValueError, match="cloud_size_threshold"):
            VoxelDownsampler(config_manager, cloud_size_threshold=0)

    @pytest.mark.property
    @settings(max_examples=20, deadline=None)
    @given(
        seed=st.integers(min_value=0, max_value=2 ** 16),
        n_points=st.integers(min_value=1001, max_value=3000)
    )
    def test_property_downsampling_is_deterministic(self, seed, n_points):
        """
        Property test: downsampling never grows the cloud and repeated runs
        on the same cloud give identical output.
        """
        downsampler = VoxelDownsampler(ConfigManager())
        cloud = _random_cloud(seed, n_points)

        first = downsampler.downsample(cloud)
        second = downsampler.downsample(cloud)

        assert len(first) <= len(cloud)
        np.testing.assert_array_equal(first.points, second.points)
        np.testing.assert_array_equal(first.pixel_indices, second.pixel_indices)
