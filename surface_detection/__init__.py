"""
Depth-Frame Surface Detection

Extracts the dominant planar surface and a best-fit spherical surface from a
single depth sensor frame, together with the pixels that agree with each
fitted surface.

This package implements:
- Ordered point cloud construction from organized xyz maps
- Deterministic voxel-grid downsampling for large clouds
- Parallel k-nearest-neighbour PCA normal and curvature estimation
- Smoothness-constrained region growing segmentation
- Closed-form least-squares plane and sphere fitting
- Inlier projection of fitted surfaces back onto the depth frame
"""

__version__ = "1.0.0"
__author__ = "Surface Detection Team"

from .cloud import CloudBuilder, VoxelDownsampler
from .features import NormalEstimator
from .segmentation import RegionGrowingSegmenter
from .fitting import SurfaceFitter, ClusterSelector, IndexProjector
from .surface_detector import SurfaceDetector, CLOUD_SIZE_THRESHOLD, R_SQUARED_DISTANCE_THRESHOLD
from .data_models import (
    PointCloud, NormalField, PlaneEquation, SphereEquation,
    DetectionResult, DetectionStatus
)

__all__ = [
    # Cloud
    'CloudBuilder', 'VoxelDownsampler',
    # Features
    'NormalEstimator',
    # Segmentation
    'RegionGrowingSegmenter',
    # Fitting
    'SurfaceFitter', 'ClusterSelector', 'IndexProjector',
    # Pipeline
    'SurfaceDetector', 'CLOUD_SIZE_THRESHOLD', 'R_SQUARED_DISTANCE_THRESHOLD',
    # Data Models
    'PointCloud', 'NormalField', 'PlaneEquation', 'SphereEquation',
    'DetectionResult', 'DetectionStatus'
]
