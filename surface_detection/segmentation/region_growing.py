"""
Region Growing Segmenter

Partitions a point cloud into smooth surface patches by growing regions over
k-nearest-neighbour adjacency, admitting neighbours whose normals stay within
an angular threshold.
"""

import numpy as np
from collections import deque
from scipy.spatial import cKDTree
from typing import Optional, List
import logging

from ..data_models import NormalField
from ..utils.config_manager import ConfigManager


class RegionGrowingSegmenter:
    """Smoothness-constrained region growing with curvature-ordered seeds."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize region growing segmenter.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        seg_config = self.config.get_segmentation_params()

        self.k_neighbors = int(seg_config.get('k_neighbors', 30))
        radius = seg_config.get('search_radius')
        self.search_radius = float(radius) if radius is not None else None

        # Admission test compares |cos| of the normal angle against this
        self.smoothness_threshold_deg = float(seg_config.get('smoothness_threshold_deg', 15.0))
        self.cos_threshold = float(np.cos(np.radians(self.smoothness_threshold_deg)))

        self.curvature_threshold = float(seg_config.get('curvature_threshold', 1.0))
        self.smooth_mode = bool(seg_config.get('smooth_mode', True))

        self.min_cluster_size = int(seg_config.get('min_cluster_size', 30))
        max_size = seg_config.get('max_cluster_size')
        self.max_cluster_size = int(max_size) if max_size is not None else None

        self.logger.info(f"Region growing initialized: k={self.k_neighbors}, "
                         f"smoothness={self.smoothness_threshold_deg} deg, "
                         f"min_cluster_size={self.min_cluster_size}")

    def segment(self,
                points: np.ndarray,
                normal_field: NormalField,
                tree: Optional[cKDTree] = None) -> List[np.ndarray]:
        """
        Segment the cloud into clusters of coherent normal direction.

        Args:
            points: Nx3 point array
            normal_field: Normals and curvatures co-indexed with points
            tree: k-d tree over points, shared with normal estimation

        Returns:
            List of cluster index arrays, largest first
        """
        num_points = len(points)
        if len(normal_field) != num_points:
            raise ValueError("Normal field must be co-indexed with the point cloud")
        if num_points == 0:
            return []

        if tree is None:
            tree = cKDTree(points)

        k = min(self.k_neighbors + 1, num_points)
        visited = np.zeros(num_points, dtype=bool)

        # Flattest points first; stable sort breaks ties by index
        seed_order = np.argsort(normal_field.curvatures, kind='stable')

        clusters = []
        rejected = 0
        for seed in seed_order:
            if visited[seed]:
                continue

            region = self._grow(int(seed), points, normal_field, tree, k, visited)

            if len(region) < self.min_cluster_size or (
                    self.max_cluster_size is not None and len(region) > self.max_cluster_size):
                rejected += 1
                continue

            clusters.append(np.asarray(region, dtype=np.int64))

        # Python's sort is stable, so equal sizes keep seed order
        clusters.sort(key=len, reverse=True)

        self.logger.debug(f"Region growing: {len(clusters)} clusters kept, {rejected} rejected "
                          f"from {num_points} points")

        return clusters

    def _neighbors(self, tree: cKDTree, point: np.ndarray, k: int, num_points: int) -> np.ndarray:
        """Query the k nearest neighbours of a single point."""
        if self.search_radius is None:
            _, idx = tree.query(point, k=k)
        else:
            _, idx = tree.query(point, k=k, distance_upper_bound=self.search_radius)
        idx = np.atleast_1d(idx)
        return idx[idx < num_points]

    def _grow(self,
              seed: int,
              points: np.ndarray,
              normal_field: NormalField,
              tree: cKDTree,
              k: int,
              visited: np.ndarray) -> List[int]:
        """Breadth-first growth of a single region from a seed point."""
        normals = normal_field.normals
        curvatures = normal_field.curvatures
        num_points = len(points)

        visited[seed] = True
        region = [seed]
        front = deque([seed])

        while front:
            current = front.popleft()
            reference = normals[current] if self.smooth_mode else normals[seed]

            for neighbor in self._neighbors(tree, points[current], k, num_points):
                if visited[neighbor]:
                    continue
                if abs(float(np.dot(reference, normals[neighbor]))) < self.cos_threshold:
                    continue

                visited[neighbor] = True
                region.append(int(neighbor))

                # High-curvature points join the region but do not extend it
                if curvatures[neighbor] < self.curvature_threshold:
                    front.append(int(neighbor))

        return region
