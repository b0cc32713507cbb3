"""
Surface Normal Estimator

Estimates per-point surface normals and curvature from k-nearest-neighbour
PCA, fanning the work out over a bounded thread pool.
"""

import os
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from scipy.spatial import cKDTree
from typing import Optional, List, Tuple
import logging

from ..data_models import NormalField
from ..utils.config_manager import ConfigManager


class NormalEstimator:
    """PCA normal estimator over a shared read-only k-d tree."""

    def __init__(self,
                 config_manager: Optional[ConfigManager] = None,
                 num_workers: Optional[int] = None):
        """
        Initialize normal estimator.

        Args:
            config_manager: Configuration manager instance
            num_workers: Worker threads; defaults to the configured value or the host core count
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        normal_config = self.config.get_normal_params()

        self.k_neighbors = int(normal_config.get('k_neighbors', 20))
        radius = normal_config.get('search_radius')
        self.search_radius = float(radius) if radius is not None else None
        self.viewpoint = np.asarray(normal_config.get('viewpoint', [0.0, 0.0, 0.0]), dtype=np.float64)

        if num_workers is None:
            num_workers = self.config.get('processing.num_workers')
        self.num_workers = int(num_workers) if num_workers is not None else (os.cpu_count() or 1)
        if self.num_workers < 1:
            raise ValueError("num_workers must be at least 1")

        self.logger.info(f"Normal estimator initialized: k={self.k_neighbors}, workers={self.num_workers}")

    @staticmethod
    def build_index(points: np.ndarray) -> cKDTree:
        """Build the spatial index shared by normal estimation and segmentation."""
        return cKDTree(points)

    def estimate(self, points: np.ndarray, tree: Optional[cKDTree] = None) -> NormalField:
        """
        Estimate normals and curvature for every point.

        Args:
            points: Nx3 point array
            tree: Prebuilt k-d tree over the same points

        Returns:
            NormalField co-indexed with points
        """
        num_points = len(points)
        normals = np.zeros((num_points, 3), dtype=np.float64)
        curvatures = np.zeros(num_points, dtype=np.float64)

        if num_points == 0:
            return NormalField(normals=normals, curvatures=curvatures)

        if tree is None:
            tree = self.build_index(points)

        k = min(self.k_neighbors, num_points)
        ranges = self._partition(num_points, self.num_workers)

        if len(ranges) == 1:
            self._estimate_range(points, tree, k, ranges[0], normals, curvatures)
        else:
            with ThreadPoolExecutor(max_workers=len(ranges)) as executor:
                futures = [
                    executor.submit(self._estimate_range, points, tree, k, span, normals, curvatures)
                    for span in ranges
                ]
                for future in futures:
                    future.result()

        self.logger.debug(f"Estimated normals for {num_points} points over {len(ranges)} ranges")

        return NormalField(normals=normals, curvatures=curvatures)

    @staticmethod
    def _partition(num_points: int, num_workers: int) -> List[Tuple[int, int]]:
        """Split [0, num_points) into contiguous, non-empty ranges."""
        num_ranges = max(1, min(num_workers, num_points))
        bounds = np.linspace(0, num_points, num_ranges + 1).astype(int)
        return [(int(bounds[i]), int(bounds[i + 1])) for i in range(num_ranges)
                if bounds[i + 1] > bounds[i]]

    def _estimate_range(self,
                        points: np.ndarray,
                        tree: cKDTree,
                        k: int,
                        span: Tuple[int, int],
                        normals: np.ndarray,
                        curvatures: np.ndarray) -> None:
        """Fill normals[start:end] and curvatures[start:end]."""
        start, end = span
        queries = points[start:end]

        if self.search_radius is None:
            _, neighbor_idx = tree.query(queries, k=k)
        else:
            _, neighbor_idx = tree.query(queries, k=k, distance_upper_bound=self.search_radius)
        neighbor_idx = np.asarray(neighbor_idx).reshape(len(queries), k)

        # Missing neighbours come back as index len(points)
        valid = neighbor_idx < len(points)
        padded = np.vstack([points, np.zeros((1, 3))])
        neighborhoods = padded[neighbor_idx]

        weights = valid.astype(np.float64)[:, :, None]
        counts = np.maximum(weights.sum(axis=1), 1.0)
        centroids = (neighborhoods * weights).sum(axis=1) / counts
        centered = (neighborhoods - centroids[:, None, :]) * weights
        covariances = np.einsum('nki,nkj->nij', centered, centered) / counts[:, :, None]

        eigenvalues, eigenvectors = np.linalg.eigh(covariances)
        minor = eigenvectors[:, :, 0]

        # Orient toward the sensor viewpoint
        to_viewpoint = self.viewpoint - queries
        flip = np.einsum('ni,ni->n', minor, to_viewpoint) < 0
        minor[flip] *= -1.0

        total = eigenvalues.sum(axis=1)
        surface_variation = np.divide(eigenvalues[:, 0], total,
                                      out=np.zeros_like(total), where=total > 0)

        normals[start:end] = minor
        curvatures[start:end] = np.clip(surface_variation, 0.0, None)
