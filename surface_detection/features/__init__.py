"""
Surface Feature Module

Implements k-nearest-neighbour normal and curvature estimation.
"""

from .normal_estimator import NormalEstimator

__all__ = ['NormalEstimator']
