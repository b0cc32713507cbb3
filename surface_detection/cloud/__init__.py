"""
Point Cloud Module

Builds ordered point clouds from depth frames and bounds their size with voxel downsampling.
"""

from .cloud_builder import CloudBuilder
from .voxel_downsampler import VoxelDownsampler

__all__ = ['CloudBuilder', 'VoxelDownsampler']
