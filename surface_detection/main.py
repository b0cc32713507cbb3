"""
Main entry point for depth-frame surface detection

Runs plane and sphere detection on a single xyz map stored as a .npy file.
"""

import argparse
import logging
import sys
from pathlib import Path

import numpy as np

from surface_detection.surface_detector import SurfaceDetector
from surface_detection.utils.config_manager import ConfigManager


def main(argv=None):
    """Main entry point for surface detection."""
    parser = argparse.ArgumentParser(
        description="Detect the dominant plane and a best-fit sphere in a depth frame"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration file"
    )

    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="Path to an (H, W, 3) xyz map saved with numpy.save"
    )

    parser.add_argument(
        "--workers",
        type=int,
        help="Worker threads for normal estimation (defaults to the core count)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(name)s %(levelname)s: %(message)s")

    # Load configuration
    try:
        config = ConfigManager(args.config)
        print(f"Loaded configuration from: {config.config_path}")
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading configuration: {e}")
        return 1

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Input file does not exist: {args.input}")
        return 1

    xyz_map = np.load(input_path)
    if xyz_map.ndim != 3 or xyz_map.shape[2] != 3:
        print(f"Input must have shape (H, W, 3), got {xyz_map.shape}")
        return 1

    try:
        detector = SurfaceDetector(config, num_workers=args.workers)
    except ValueError as e:
        print(f"Invalid configuration: {e}")
        return 1

    result = detector.detect(xyz_map)

    print("Surface Detection")
    print("=" * 50)
    print(f"Status: {result.status.value}")
    print(f"Cloud size: {result.cloud_size} (clustered on {result.down_cloud_size})")
    print(f"Clusters: {result.cluster_sizes}")

    if result.plane_found:
        a, b, c, d = result.plane_equation.as_tuple()
        print(f"Plane: {a:.5f}x + {b:.5f}y + {c:.5f}z = {d:.5f} ({len(result.plane_indices)} pixels)")
    else:
        print("Plane: not found")

    if result.sphere_found:
        cx, cy, cz, r = result.sphere_equation.as_tuple()
        print(f"Sphere: center=({cx:.5f}, {cy:.5f}, {cz:.5f}) r={r:.5f} "
              f"({len(result.sphere_indices)} pixels)")
    else:
        print("Sphere: not found")

    print(f"Processing time: {result.processing_time:.3f}s")

    return 0


if __name__ == "__main__":
    sys.exit(main())
