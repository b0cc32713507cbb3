"""
Point Cloud Builder

Converts an organized depth-sensor xyz map into an ordered point cloud.
"""

import numpy as np
from typing import Optional
import logging

from ..data_models import PointCloud
from ..utils.config_manager import ConfigManager


class CloudBuilder:
    """Builds a PointCloud from the valid pixels of an (H, W, 3) xyz map."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize cloud builder.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        cloud_config = self.config.get_cloud_params()

        # Coordinate value the sensor writes into pixels without a measurement
        self.invalid_value = float(cloud_config.get('invalid_value', 0.0))

    def valid_mask(self, xyz_map: np.ndarray) -> np.ndarray:
        """
        Compute per-pixel validity of an xyz map.

        A pixel is invalid when all three coordinates equal the sentinel value
        or when any coordinate is not finite.

        Args:
            xyz_map: Organized point map of shape (H, W, 3)

        Returns:
            Boolean mask of shape (H, W)
        """
        if xyz_map.ndim != 3 or xyz_map.shape[2] != 3:
            raise ValueError(f"xyz map must have shape (H, W, 3), got {xyz_map.shape}")

        finite = np.all(np.isfinite(xyz_map), axis=2)
        sentinel = np.all(xyz_map == self.invalid_value, axis=2)

        return finite & ~sentinel

    def build(self, xyz_map: np.ndarray) -> PointCloud:
        """
        Build the point cloud in row-major pixel order.

        Args:
            xyz_map: Organized point map of shape (H, W, 3)

        Returns:
            PointCloud with (row, col) back-references; empty if no pixel is valid
        """
        mask = self.valid_mask(xyz_map)

        # np.nonzero walks the mask in C (row-major) order
        rows, cols = np.nonzero(mask)
        points = xyz_map[rows, cols].astype(np.float64)
        pixel_indices = np.column_stack([rows, cols]).astype(np.int64)

        self.logger.debug(f"Built cloud with {len(points)}/{mask.size} valid pixels")

        return PointCloud(points=points.reshape(-1, 3), pixel_indices=pixel_indices.reshape(-1, 2))
