"""
Pytest configuration and fixtures for surface detection tests.
"""

import pytest
import numpy as np
from surface_detection.utils.config_manager import ConfigManager

from frame_factory import make_plane_grid, make_sphere_grid, make_ball_on_table_grid


@pytest.fixture
def config_manager():
    """Fixture providing a configuration manager instance."""
    return ConfigManager()


@pytest.fixture
def single_thread_config():
    """Fixture providing a configuration pinned to one worker thread."""
    config = ConfigManager()
    config.set('processing.num_workers', 1)
    return config


@pytest.fixture
def flat_plane_grid():
    """Fixture providing a z = 5.0 plane with a few invalid pixels."""
    xyz = make_plane_grid()
    xyz[0, 0] = 0.0
    xyz[3, 7] = 0.0
    xyz[29, 29] = 0.0
    xyz[12, 20] = np.nan
    return xyz


@pytest.fixture
def sphere_grid():
    """Fixture providing points on a radius 10 sphere centered at (0, 0, 50)."""
    return make_sphere_grid()


@pytest.fixture
def mixed_grid():
    """Fixture providing a z = 5.0 background with a hand-like block at z = 3.0."""
    xyz = make_plane_grid()
    xyz[5:11, 5:11, 2] = 3.0
    return xyz


@pytest.fixture
def hand_pixels():
    """Fixture providing the (row, col) pixels of the block in mixed_grid."""
    rows, cols = np.mgrid[5:11, 5:11]
    return set(zip(rows.ravel().tolist(), cols.ravel().tolist()))


@pytest.fixture
def noisy_plane_points():
    """Fixture providing noisy samples of the plane 0.1x + 0.05y - z = -10."""
    rng = np.random.default_rng(42)
    n_points = 500

    x = rng.uniform(-5, 5, n_points)
    y = rng.uniform(-2, 2, n_points)
    z = 0.1 * x + 0.05 * y + 10
    z += rng.normal(0, 0.002, n_points)

    return np.column_stack([x, y, z])


@pytest.fixture
def ball_on_table():
    """Fixture providing a r = 0.15 ball at depth 0.8 in front of a table at z = 1.0, and its pixel mask."""
    return make_ball_on_table_grid()
