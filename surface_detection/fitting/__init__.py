"""
Surface Fitting Module

Implements least-squares plane and sphere fitting and inlier projection onto the depth frame.
"""

from .surface_fitter import SurfaceFitter, MIN_PLANE_POINTS, MIN_SPHERE_POINTS
from .cluster_selector import ClusterSelector
from .index_projector import IndexProjector

__all__ = ['SurfaceFitter', 'ClusterSelector', 'IndexProjector', 'MIN_PLANE_POINTS', 'MIN_SPHERE_POINTS']
