"""
Surface Detector

Runs the full per-frame pipeline: cloud building, conditional voxel
downsampling, normal estimation, region growing, plane and sphere fitting,
and inlier projection back onto the depth frame.
"""

import time
import numpy as np
from typing import Optional, List
import logging

from .cloud.cloud_builder import CloudBuilder
from .cloud.voxel_downsampler import VoxelDownsampler
from .features.normal_estimator import NormalEstimator
from .segmentation.region_growing import RegionGrowingSegmenter
from .fitting.surface_fitter import SurfaceFitter, MIN_PLANE_POINTS, MIN_SPHERE_POINTS
from .fitting.cluster_selector import ClusterSelector
from .fitting.index_projector import IndexProjector
from .data_models import (
    PointCloud, NormalField, PlaneEquation, SphereEquation,
    DetectionResult, DetectionStatus
)
from .utils.config_manager import ConfigManager


# Maximum cloud size (points) processed without downsampling
CLOUD_SIZE_THRESHOLD = 1000

# Maximum squared distance between a measured point and a fitted surface
R_SQUARED_DISTANCE_THRESHOLD = 0.0005


class SurfaceDetector:
    """Extracts the dominant plane and a best-fit sphere from one depth frame."""

    def __init__(self,
                 config_manager: Optional[ConfigManager] = None,
                 cloud_size_threshold: Optional[int] = None,
                 r_squared_distance_threshold: Optional[float] = None,
                 num_workers: Optional[int] = None):
        """
        Initialize surface detector.

        Args:
            config_manager: Configuration manager instance
            cloud_size_threshold: Point count above which the cloud is downsampled
            r_squared_distance_threshold: Squared distance tolerance for inlier pixels
            num_workers: Threads used for normal estimation (defaults to the core count)
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        if cloud_size_threshold is None:
            cloud_size_threshold = self.config.get('downsampling.cloud_size_threshold', CLOUD_SIZE_THRESHOLD)
        if r_squared_distance_threshold is None:
            r_squared_distance_threshold = self.config.get('projection.r_squared_distance_threshold',
                                                           R_SQUARED_DISTANCE_THRESHOLD)

        self.cloud_builder = CloudBuilder(self.config)
        self.downsampler = VoxelDownsampler(self.config, cloud_size_threshold=cloud_size_threshold)
        self.normal_estimator = NormalEstimator(self.config, num_workers=num_workers)
        self.segmenter = RegionGrowingSegmenter(self.config)
        self.fitter = SurfaceFitter(self.config)
        self.projector = IndexProjector(self.config, r_squared_distance_threshold=r_squared_distance_threshold)

        fit_config = self.config.get_fitting_params()
        self.plane_selector = ClusterSelector(fit_config.get('plane_cluster_policy', 'largest'))
        self.sphere_selector = ClusterSelector(fit_config.get('sphere_cluster_policy', 'most_curved'))

        self._reset()

        self.logger.info(f"Surface detector initialized: cloud_size_threshold={self.cloud_size_threshold}, "
                         f"r_squared_distance_threshold={self.r_squared_distance_threshold}, "
                         f"workers={self.num_workers}")

    @property
    def cloud_size_threshold(self) -> int:
        return self.downsampler.cloud_size_threshold

    @property
    def r_squared_distance_threshold(self) -> float:
        return self.projector.r_squared_distance_threshold

    @property
    def num_workers(self) -> int:
        return self.normal_estimator.num_workers

    def _reset(self) -> None:
        """Drop every derived entity of the previous frame."""
        self._cloud = PointCloud.empty()
        self._down_cloud = PointCloud.empty()
        self._normals = NormalField(normals=np.zeros((0, 3)), curvatures=np.zeros(0))
        self._clusters: List[np.ndarray] = []
        self._plane_equation: Optional[PlaneEquation] = None
        self._sphere_equation: Optional[SphereEquation] = None
        self._plane_mask = np.zeros((0, 0), dtype=bool)
        self._sphere_mask = np.zeros((0, 0), dtype=bool)
        self._plane_indices = np.zeros((0, 2), dtype=np.int64)
        self._sphere_indices = np.zeros((0, 2), dtype=np.int64)
        self._status = DetectionStatus.NO_SURFACE_FOUND

    def detect(self, xyz_map: np.ndarray) -> DetectionResult:
        """
        Run surface detection on one depth frame.

        Absence of a detectable surface is reported through the result status
        and the per-surface flags, never raised.

        Args:
            xyz_map: Organized point map of shape (H, W, 3)

        Returns:
            DetectionResult for this frame
        """
        start_time = time.time()
        xyz_map = np.asarray(xyz_map)
        self._reset()

        self._cloud = self.cloud_builder.build(xyz_map)
        self._down_cloud = self.downsampler.downsample(self._cloud)

        points = self._down_cloud.points
        tree = self.normal_estimator.build_index(points) if len(points) else None
        self._normals = self.normal_estimator.estimate(points, tree)
        self._clusters = self.segmenter.segment(points, self._normals, tree)

        plane_cluster = self.plane_selector.select(self._clusters, self._normals, MIN_PLANE_POINTS)
        if plane_cluster is not None:
            self._plane_equation = self.fitter.fit_plane(points[plane_cluster])

        sphere_cluster = self.sphere_selector.select(self._clusters, self._normals, MIN_SPHERE_POINTS)
        if sphere_cluster is not None:
            self._sphere_equation = self.fitter.fit_sphere(points[sphere_cluster])

        self._plane_mask = self.projector.project_mask(xyz_map, self._plane_equation)
        self._sphere_mask = self.projector.project_mask(xyz_map, self._sphere_equation)
        self._plane_indices = self.projector.mask_to_indices(self._plane_mask)
        self._sphere_indices = self.projector.mask_to_indices(self._sphere_mask)

        if self._plane_equation is not None or self._sphere_equation is not None:
            self._status = DetectionStatus.SUCCESS

        self._log_frame(plane_cluster, sphere_cluster)

        return DetectionResult(
            status=self._status,
            plane_equation=self._plane_equation,
            sphere_equation=self._sphere_equation,
            plane_indices=self._plane_indices.copy(),
            sphere_indices=self._sphere_indices.copy(),
            cloud_size=len(self._cloud),
            down_cloud_size=len(self._down_cloud),
            cluster_sizes=[len(cluster) for cluster in self._clusters],
            processing_time=time.time() - start_time
        )

    def _log_frame(self, plane_cluster: Optional[np.ndarray], sphere_cluster: Optional[np.ndarray]) -> None:
        points = self._down_cloud.points

        if self._plane_equation is None:
            self.logger.warning("No plane found in frame")
        else:
            rms = self.fitter.fit_residuals(self._plane_equation, points[plane_cluster])
            self.logger.debug(f"Plane {self._plane_equation.as_tuple()} rms={rms:.5f}, "
                              f"{len(self._plane_indices)} inlier pixels")

        if self._sphere_equation is None:
            self.logger.warning("No sphere found in frame")
        else:
            rms = self.fitter.fit_residuals(self._sphere_equation, points[sphere_cluster])
            self.logger.debug(f"Sphere {self._sphere_equation.as_tuple()} rms={rms:.5f}, "
                              f"{len(self._sphere_indices)} inlier pixels")

        self.logger.info(f"Frame processed: cloud={len(self._cloud)}, down_cloud={len(self._down_cloud)}, "
                         f"clusters={len(self._clusters)}, status={self._status.value}")

    def get_status(self) -> DetectionStatus:
        return self._status

    def get_cloud(self) -> PointCloud:
        """Point cloud built from the last frame."""
        return self._cloud.copy()

    def get_down_cloud(self) -> PointCloud:
        """Cloud used for clustering; equals the full cloud when downsampling was bypassed."""
        return self._down_cloud.copy()

    def get_normals(self) -> NormalField:
        return self._normals.copy()

    def get_clusters(self) -> List[np.ndarray]:
        return [cluster.copy() for cluster in self._clusters]

    def get_plane_equation(self) -> Optional[PlaneEquation]:
        return self._plane_equation

    def get_sphere_equation(self) -> Optional[SphereEquation]:
        return self._sphere_equation

    def get_plane_indices(self) -> np.ndarray:
        """Row-major (row, col) pixels lying on the fitted plane."""
        return self._plane_indices.copy()

    def get_sphere_indices(self) -> np.ndarray:
        """Row-major (row, col) pixels lying on the fitted sphere."""
        return self._sphere_indices.copy()

    def get_plane_mask(self) -> np.ndarray:
        return self._plane_mask.copy()

    def get_sphere_mask(self) -> np.ndarray:
        return self._sphere_mask.copy()

    @property
    def num_plane_points(self) -> int:
        return int(len(self._plane_indices))

    @property
    def num_sphere_points(self) -> int:
        return int(len(self._sphere_indices))
