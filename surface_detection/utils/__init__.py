"""
Utility Functions and Helpers

Common utilities for the surface detection pipeline.
"""

from .config_manager import ConfigManager

__all__ = ['ConfigManager']
