"""
Inlier Index Projector

Projects a fitted surface back onto the depth frame and collects the pixels
whose measured point lies within the squared distance tolerance.
"""

import numpy as np
from typing import Optional, Union
import logging

from ..cloud.cloud_builder import CloudBuilder
from ..data_models import PlaneEquation, SphereEquation
from ..utils.config_manager import ConfigManager


class IndexProjector:
    """Collects row-major (row, col) inliers of a plane or sphere equation."""

    def __init__(self,
                 config_manager: Optional[ConfigManager] = None,
                 r_squared_distance_threshold: Optional[float] = None):
        """
        Initialize index projector.

        Args:
            config_manager: Configuration manager instance
            r_squared_distance_threshold: Overrides the configured inlier tolerance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        if r_squared_distance_threshold is None:
            r_squared_distance_threshold = self.config.get_projection_params().get(
                'r_squared_distance_threshold', 0.0005)
        self.r_squared_distance_threshold = float(r_squared_distance_threshold)
        if self.r_squared_distance_threshold <= 0:
            raise ValueError("r_squared_distance_threshold must be positive")

        self.cloud_builder = CloudBuilder(self.config)

    def project_mask(self,
                     xyz_map: np.ndarray,
                     equation: Optional[Union[PlaneEquation, SphereEquation]]) -> np.ndarray:
        """
        Per-pixel inlier mask of a fitted equation.

        Args:
            xyz_map: Organized point map of shape (H, W, 3)
            equation: Fitted plane or sphere, or None after a failed fit

        Returns:
            Boolean mask of shape (H, W); all False when equation is None
        """
        valid = self.cloud_builder.valid_mask(xyz_map)
        mask = np.zeros(valid.shape, dtype=bool)
        if equation is None:
            return mask

        points = xyz_map[valid].astype(np.float64)
        mask[valid] = equation.squared_distance(points) < self.r_squared_distance_threshold

        return mask

    def project(self,
                xyz_map: np.ndarray,
                equation: Optional[Union[PlaneEquation, SphereEquation]]) -> np.ndarray:
        """
        Row-major (row, col) coordinates of the inlier pixels.

        Args:
            xyz_map: Organized point map of shape (H, W, 3)
            equation: Fitted plane or sphere, or None after a failed fit

        Returns:
            Kx2 int64 array of (row, col) pairs
        """
        indices = self.mask_to_indices(self.project_mask(xyz_map, equation))

        self.logger.debug(f"Projected {type(equation).__name__}: {len(indices)} inlier pixels")

        return indices

    @staticmethod
    def mask_to_indices(mask: np.ndarray) -> np.ndarray:
        """Row-major (row, col) pairs of the set pixels of a mask."""
        rows, cols = np.nonzero(mask)
        return np.column_stack([rows, cols]).astype(np.int64).reshape(-1, 2)
