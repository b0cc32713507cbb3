"""
Least-Squares Surface Fitter

Closed-form plane and sphere regression over a cluster of 3D points.
"""

import numpy as np
from typing import Optional, Union
import logging

from ..data_models import PlaneEquation, SphereEquation
from ..utils.config_manager import ConfigManager


MIN_PLANE_POINTS = 3
MIN_SPHERE_POINTS = 4

SIGN_TOLERANCE = 1e-12


class SurfaceFitter:
    """Fits plane and sphere equations; degenerate input yields None."""

    def __init__(self, config_manager: Optional[ConfigManager] = None):
        """
        Initialize surface fitter.

        Args:
            config_manager: Configuration manager instance
        """
        self.config = config_manager or ConfigManager()
        self.logger = logging.getLogger(__name__)

        fit_config = self.config.get_fitting_params()

        # Relative eigenvalue below which a point set counts as collinear
        self.collinearity_tolerance = float(fit_config.get('collinearity_tolerance', 1e-9))
        # Condition number above which the sphere system counts as singular
        self.sphere_condition_limit = float(fit_config.get('sphere_condition_limit', 1e8))

    def fit_plane(self, points: np.ndarray) -> Optional[PlaneEquation]:
        """
        Fit a*x + b*y + c*z = d minimizing squared orthogonal residuals.

        The normal is the eigenvector of the smallest eigenvalue of the
        centered covariance matrix; d follows from the centroid. The sign is
        chosen so that d >= 0.

        Args:
            points: Nx3 point array

        Returns:
            PlaneEquation, or None for fewer than 3 points or collinear points
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(points) < MIN_PLANE_POINTS:
            self.logger.debug(f"Plane fit skipped: {len(points)} points")
            return None

        centroid = points.mean(axis=0)
        centered = points - centroid
        covariance = centered.T @ centered / len(points)
        eigenvalues, eigenvectors = np.linalg.eigh(covariance)

        # Coincident points, or all spread along a single direction
        if eigenvalues[2] <= 0 or eigenvalues[1] <= self.collinearity_tolerance * eigenvalues[2]:
            self.logger.debug("Plane fit failed: degenerate point set")
            return None

        normal = eigenvectors[:, 0]
        normal = normal / np.linalg.norm(normal)
        d = float(normal @ centroid)

        # Planes through the origin: leading non-zero component positive
        if abs(d) <= SIGN_TOLERANCE * max(1.0, float(np.linalg.norm(centroid))):
            d = 0.0
            flip = normal[np.flatnonzero(np.abs(normal) > SIGN_TOLERANCE)[0]] < 0
        else:
            flip = d < 0
        if flip:
            normal = -normal
            d = -d

        return PlaneEquation(a=float(normal[0]), b=float(normal[1]), c=float(normal[2]), d=d)

    def fit_sphere(self, points: np.ndarray) -> Optional[SphereEquation]:
        """
        Fit a sphere through the linearized algebraic model.

        Solves x^2 + y^2 + z^2 = 2*cx*x + 2*cy*y + 2*cz*z + k in the least
        squares sense, with k = r^2 - |c|^2. Coordinates are shifted to their
        centroid first to keep the system well conditioned.

        Args:
            points: Nx3 point array

        Returns:
            SphereEquation, or None for fewer than 4 points or a near-singular system
        """
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(points) < MIN_SPHERE_POINTS:
            self.logger.debug(f"Sphere fit skipped: {len(points)} points")
            return None

        centroid = points.mean(axis=0)
        shifted = points - centroid

        A = np.column_stack([2.0 * shifted, np.ones(len(shifted))])
        b = np.einsum('ni,ni->n', shifted, shifted)

        solution, _, rank, singular_values = np.linalg.lstsq(A, b, rcond=None)

        if rank < 4 or singular_values[-1] <= 0:
            self.logger.debug("Sphere fit failed: rank deficient system")
            return None
        condition = singular_values[0] / singular_values[-1]
        if condition > self.sphere_condition_limit:
            self.logger.debug(f"Sphere fit failed: condition number {condition:.3e}")
            return None

        offset = solution[:3]
        radius_squared = solution[3] + offset @ offset
        if not np.isfinite(radius_squared) or radius_squared < 0:
            self.logger.debug("Sphere fit failed: negative squared radius")
            return None

        center = offset + centroid
        return SphereEquation(cx=float(center[0]), cy=float(center[1]), cz=float(center[2]),
                              r=float(np.sqrt(radius_squared)))

    @staticmethod
    def fit_residuals(equation: Union[PlaneEquation, SphereEquation], points: np.ndarray) -> float:
        """RMS geometric residual of points against a fitted equation."""
        points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(points) == 0:
            return 0.0
        return float(np.sqrt(np.mean(equation.squared_distance(points))))
