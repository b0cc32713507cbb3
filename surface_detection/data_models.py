"""
Data Models for Surface Detection Pipeline

Defines all data structures used throughout the system.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple
import numpy as np


class DetectionStatus(Enum):
    """Outcome of a single-frame detection run."""
    SUCCESS = "success"
    NO_SURFACE_FOUND = "no_surface_found"


@dataclass
class PointCloud:
    """Ordered 3D points paired with the (row, col) pixel each came from."""
    points: np.ndarray  # Nx3 float64 coordinates
    pixel_indices: np.ndarray  # Nx2 int64 (row, col) back-references

    def __len__(self) -> int:
        return int(self.points.shape[0])

    @classmethod
    def empty(cls) -> 'PointCloud':
        return cls(points=np.zeros((0, 3), dtype=np.float64),
                   pixel_indices=np.zeros((0, 2), dtype=np.int64))

    def copy(self) -> 'PointCloud':
        return PointCloud(points=self.points.copy(), pixel_indices=self.pixel_indices.copy())


@dataclass
class NormalField:
    """Per-point unit normals and surface variation, co-indexed with a cloud."""
    normals: np.ndarray  # Nx3 unit vectors
    curvatures: np.ndarray  # N surface variation values in [0, 1/3]

    def __len__(self) -> int:
        return int(self.normals.shape[0])

    def copy(self) -> 'NormalField':
        return NormalField(normals=self.normals.copy(), curvatures=self.curvatures.copy())


@dataclass(frozen=True)
class PlaneEquation:
    """Plane a*x + b*y + c*z = d with (a, b, c) of unit length."""
    a: float
    b: float
    c: float
    d: float

    @property
    def normal(self) -> np.ndarray:
        return np.array([self.a, self.b, self.c], dtype=np.float64)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.a, self.b, self.c, self.d)

    def squared_distance(self, points: np.ndarray) -> np.ndarray:
        """Squared point-to-plane distance for an Nx3 array."""
        residual = points @ self.normal - self.d
        return residual * residual


@dataclass(frozen=True)
class SphereEquation:
    """Sphere with center (cx, cy, cz) and radius r."""
    cx: float
    cy: float
    cz: float
    r: float

    @property
    def center(self) -> np.ndarray:
        return np.array([self.cx, self.cy, self.cz], dtype=np.float64)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.cx, self.cy, self.cz, self.r)

    def squared_distance(self, points: np.ndarray) -> np.ndarray:
        """Squared radial distance (|p - c| - r)^2 for an Nx3 array."""
        residual = np.linalg.norm(points - self.center, axis=1) - self.r
        return residual * residual


@dataclass
class DetectionResult:
    """Results from one frame of surface detection."""
    status: DetectionStatus
    plane_equation: Optional[PlaneEquation]
    sphere_equation: Optional[SphereEquation]
    plane_indices: np.ndarray  # Kx2 (row, col), row-major
    sphere_indices: np.ndarray  # Mx2 (row, col), row-major
    cloud_size: int
    down_cloud_size: int
    cluster_sizes: List[int] = field(default_factory=list)
    processing_time: float = 0.0

    @property
    def plane_found(self) -> bool:
        return self.plane_equation is not None

    @property
    def sphere_found(self) -> bool:
        return self.sphere_equation is not None
