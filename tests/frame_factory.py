"""
Synthetic depth frames for surface detection tests.
"""

import numpy as np


def make_plane_grid(rows: int = 30, cols: int = 30, spacing: float = 0.05, z: float = 5.0) -> np.ndarray:
    """Organized xyz map of a fronto-parallel plane at depth z."""
    row_idx, col_idx = np.mgrid[0:rows, 0:cols]
    xyz = np.zeros((rows, cols, 3), dtype=np.float64)
    xyz[:, :, 0] = (col_idx - cols / 2.0) * spacing
    xyz[:, :, 1] = (row_idx - rows / 2.0) * spacing
    xyz[:, :, 2] = z
    return xyz


def make_sphere_grid(rows: int = 30, cols: int = 30,
                     center=(0.0, 0.0, 50.0), radius: float = 10.0, extent: float = 0.5) -> np.ndarray:
    """Organized xyz map of the sensor-facing cap of a sphere."""
    row_idx, col_idx = np.mgrid[0:rows, 0:cols]
    ux = (col_idx - (cols - 1) / 2.0) / ((cols - 1) / 2.0) * extent
    uy = (row_idx - (rows - 1) / 2.0) / ((rows - 1) / 2.0) * extent
    uz = -np.sqrt(1.0 - ux ** 2 - uy ** 2)

    xyz = np.zeros((rows, cols, 3), dtype=np.float64)
    xyz[:, :, 0] = center[0] + radius * ux
    xyz[:, :, 1] = center[1] + radius * uy
    xyz[:, :, 2] = center[2] + radius * uz
    return xyz


def make_corner_points(spacing: float = 0.05):
    """Floor at z = 5 (x > 0) meeting a wall at x = 0 (z > 5).

    Returns the stacked points and the number of floor points, which come first.
    """
    ys = np.arange(30) * spacing
    xs = (np.arange(30) + 1) * spacing
    zs = 5.0 + (np.arange(20) + 1) * spacing

    fx, fy = np.meshgrid(xs, ys)
    floor = np.column_stack([fx.ravel(), fy.ravel(), np.full(fx.size, 5.0)])

    wy, wz = np.meshgrid(ys, zs)
    wall = np.column_stack([np.zeros(wy.size), wy.ravel(), wz.ravel()])

    return np.vstack([floor, wall]), len(floor)


def make_ball_on_table_grid(rows: int = 120, cols: int = 160, focal: float = 150.0,
                            table_z: float = 1.0, center=(0.0, 0.0, 0.8), radius: float = 0.15):
    """Pinhole frame of a ball held in front of a fronto-parallel table.

    Each pixel ray is cast against the ball first, then the table plane.
    Returns the xyz map and the (rows, cols) mask of pixels that hit the ball.
    """
    row_idx, col_idx = np.mgrid[0:rows, 0:cols]
    rays = np.stack([(col_idx - (cols - 1) / 2.0) / focal,
                     (row_idx - (rows - 1) / 2.0) / focal,
                     np.ones((rows, cols))], axis=-1)

    c = np.asarray(center, dtype=np.float64)
    a = np.einsum('hwi,hwi->hw', rays, rays)
    b = -2.0 * rays @ c
    discriminant = b ** 2 - 4.0 * a * (c @ c - radius ** 2)
    ball = discriminant >= 0

    t = np.full((rows, cols), table_z)
    t[ball] = (-b[ball] - np.sqrt(discriminant[ball])) / (2.0 * a[ball])

    return rays * t[:, :, None], ball
