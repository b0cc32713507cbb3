"""
Segmentation Module

Implements normal-based region growing to extract surface patch candidates.
"""

from .region_growing import RegionGrowingSegmenter

__all__ = ['RegionGrowingSegmenter']
