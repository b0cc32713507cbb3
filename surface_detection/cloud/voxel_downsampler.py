"""
Voxel Grid Downsampler

Bounds the size of the cloud handed to normal estimation and region growing
by replacing every occupied voxel with the centroid of its points.
"""

import numpy as np
from typing import Optional, Tuple
import logging

from ..data_models import PointCloud
from ..utils.config_manager import ConfigManager


class VoxelDownsampler:
    """Deterministic voxel-grid downsampler with an optional adaptive leaf size."""

    def __init__(self,
                 config_manager: Optional[ConfigManager] = None,
                 cloud_size_threshold: Optional[int] = None):
        """
        Initialize voxel downsampler.

        Args:
            config_manager: Configuration manager instance
            cloud_size_threshold: Overrides the configured point-count ceiling
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        ds_config = self.config.get_downsampling_params()

        if cloud_size_threshold is None:
            cloud_size_threshold = ds_config.get('cloud_size_threshold', 1000)
        self.cloud_size_threshold = int(cloud_size_threshold)
        if self.cloud_size_threshold <= 0:
            raise ValueError("cloud_size_threshold must be positive")

        self.leaf_size = float(ds_config.get('leaf_size', 0.01))
        self.adaptive_leaf = bool(ds_config.get('adaptive_leaf', True))
        self.leaf_growth_factor = float(ds_config.get('leaf_growth_factor', 2.0))
        self.max_leaf_iterations = int(ds_config.get('max_leaf_iterations', 8))

        # Leaf size used by the most recent downsample() call
        self.last_leaf_size: Optional[float] = None

        self.logger.info(f"Voxel downsampler initialized: threshold={self.cloud_size_threshold} points, "
                         f"leaf_size={self.leaf_size}")

    def needs_downsampling(self, cloud: PointCloud) -> bool:
        """Whether the cloud exceeds the configured point-count ceiling."""
        return len(cloud) > self.cloud_size_threshold

    def downsample(self, cloud: PointCloud) -> PointCloud:
        """
        Downsample a cloud when it exceeds the size threshold.

        Clouds at or below the threshold are returned unchanged. Larger clouds
        are voxelized at the configured leaf size; with adaptive_leaf enabled
        the leaf grows until the result fits under the threshold or the
        iteration limit is reached.

        Args:
            cloud: Input point cloud

        Returns:
            Downsampled point cloud (or the input cloud when bypassed)
        """
        if not self.needs_downsampling(cloud):
            self.last_leaf_size = None
            return cloud

        leaf_size = self.leaf_size
        result = self.voxelize(cloud, leaf_size)

        iterations = 0
        while (self.adaptive_leaf and len(result) > self.cloud_size_threshold
               and iterations < self.max_leaf_iterations):
            leaf_size *= self.leaf_growth_factor
            result = self.voxelize(cloud, leaf_size)
            iterations += 1

        self.last_leaf_size = leaf_size

        self.logger.debug(f"Downsampled cloud {len(cloud)} -> {len(result)} points "
                          f"(leaf_size={leaf_size:.4f})")

        return result

    def voxelize(self, cloud: PointCloud, leaf_size: float) -> PointCloud:
        """
        Replace every occupied voxel with the centroid of its points.

        Output voxels are ordered lexicographically by integer voxel key, and
        each carries the pixel index of its lowest-index member.

        Args:
            cloud: Input point cloud
            leaf_size: Voxel edge length

        Returns:
            Voxelized point cloud
        """
        if leaf_size <= 0:
            raise ValueError("leaf_size must be positive")
        if len(cloud) == 0:
            return PointCloud.empty()

        keys, inverse = self._voxel_keys(cloud.points, leaf_size)
        num_voxels = keys.shape[0]

        counts = np.bincount(inverse, minlength=num_voxels).astype(np.float64)
        centroids = np.zeros((num_voxels, 3), dtype=np.float64)
        for axis in range(3):
            centroids[:, axis] = np.bincount(inverse, weights=cloud.points[:, axis],
                                             minlength=num_voxels) / counts

        # First member of each voxel in cloud order
        first_member = np.full(num_voxels, len(cloud), dtype=np.int64)
        np.minimum.at(first_member, inverse, np.arange(len(cloud), dtype=np.int64))

        return PointCloud(points=centroids, pixel_indices=cloud.pixel_indices[first_member].copy())

    @staticmethod
    def _voxel_keys(points: np.ndarray, leaf_size: float) -> Tuple[np.ndarray, np.ndarray]:
        """Integer voxel coordinates and the voxel each point falls in."""
        origin = points.min(axis=0)
        voxel_coords = np.floor((points - origin) / leaf_size).astype(np.int64)
        keys, inverse = np.unique(voxel_coords, axis=0, return_inverse=True)
        return keys, inverse.reshape(-1)
