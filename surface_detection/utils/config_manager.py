"""
Configuration Management System

Handles loading, validation, and management of surface detection parameters.
"""

import yaml
from typing import Dict, Any, Optional
from pathlib import Path


VALID_CLUSTER_POLICIES = ('largest', 'second_largest', 'most_curved')


class ConfigManager:
    """Manages configuration parameters for the surface detection pipeline."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file. If None, uses default config.
        """
        self.config_path = config_path or self._get_default_config_path()
        self.config = self._load_config()
        self._validate_config()

    def _get_default_config_path(self) -> str:
        """Get path to default configuration file."""
        package_dir = Path(__file__).parent.parent
        return str(package_dir / "config" / "default_config.yaml")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as file:
                config = yaml.safe_load(file)
            return config or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing configuration file: {e}")

    def _validate_config(self) -> None:
        """Validate configuration parameters for consistency and feasibility."""
        # Validate downsampling parameters
        ds = self.config.get('downsampling') or {}
        if int(ds.get('cloud_size_threshold', 1000)) <= 0:
            raise ValueError("cloud_size_threshold must be positive")
        if float(ds.get('leaf_size', 0.01)) <= 0:
            raise ValueError("leaf_size must be positive")
        if float(ds.get('leaf_growth_factor', 2.0)) <= 1.0:
            raise ValueError("leaf_growth_factor must be greater than 1")

        # Validate neighbourhood sizes
        for section in ('normals', 'segmentation'):
            params = self.config.get(section) or {}
            if int(params.get('k_neighbors', 20)) < 3:
                raise ValueError(f"{section}.k_neighbors must be at least 3")
            radius = params.get('search_radius')
            if radius is not None and float(radius) <= 0:
                raise ValueError(f"{section}.search_radius must be positive")

        # Validate region growing thresholds
        seg = self.config.get('segmentation') or {}
        smoothness = float(seg.get('smoothness_threshold_deg', 15.0))
        if not 0 < smoothness <= 90:
            raise ValueError("smoothness_threshold_deg must be in (0, 90]")
        if float(seg.get('curvature_threshold', 1.0)) <= 0:
            raise ValueError("curvature_threshold must be positive")
        min_size = int(seg.get('min_cluster_size', 30))
        max_size = seg.get('max_cluster_size')
        if min_size < 1:
            raise ValueError("min_cluster_size must be at least 1")
        if max_size is not None and int(max_size) < min_size:
            raise ValueError("max_cluster_size must not be less than min_cluster_size")

        # Validate cluster selection policies
        fit = self.config.get('fitting') or {}
        for key in ('plane_cluster_policy', 'sphere_cluster_policy'):
            policy = fit.get(key, 'largest')
            if policy not in VALID_CLUSTER_POLICIES:
                raise ValueError(f"Unknown {key} '{policy}', expected one of {VALID_CLUSTER_POLICIES}")

        # Validate inlier tolerance
        proj = self.config.get('projection') or {}
        if float(proj.get('r_squared_distance_threshold', 0.0005)) <= 0:
            raise ValueError("r_squared_distance_threshold must be positive")

        # Validate worker pool size
        workers = (self.config.get('processing') or {}).get('num_workers')
        if workers is not None and int(workers) < 1:
            raise ValueError("num_workers must be at least 1")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'normals.k_neighbors')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'normals.k_neighbors')
            value: Value to set
        """
        keys = key.split('.')
        config_ref = self.config

        for k in keys[:-1]:
            if not isinstance(config_ref.get(k), dict):
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value
        self._validate_config()

    def save(self, output_path: Optional[str] = None) -> None:
        """
        Save current configuration to file.

        Args:
            output_path: Path to save configuration. If None, overwrites current file.
        """
        save_path = output_path or self.config_path

        with open(save_path, 'w') as file:
            yaml.dump(self.config, file, default_flow_style=False, indent=2)

    def get_cloud_params(self) -> Dict[str, Any]:
        """Get cloud building parameters as a dictionary."""
        return self.config.get('cloud') or {}

    def get_downsampling_params(self) -> Dict[str, Any]:
        """Get voxel downsampling parameters as a dictionary."""
        return self.config.get('downsampling') or {}

    def get_normal_params(self) -> Dict[str, Any]:
        """Get normal estimation parameters as a dictionary."""
        return self.config.get('normals') or {}

    def get_segmentation_params(self) -> Dict[str, Any]:
        """Get region growing parameters as a dictionary."""
        return self.config.get('segmentation') or {}

    def get_fitting_params(self) -> Dict[str, Any]:
        """Get surface fitting parameters as a dictionary."""
        return self.config.get('fitting') or {}

    def get_projection_params(self) -> Dict[str, Any]:
        """Get inlier projection parameters as a dictionary."""
        return self.config.get('projection') or {}

    def get_processing_params(self) -> Dict[str, Any]:
        """Get worker pool parameters as a dictionary."""
        return self.config.get('processing') or {}
