"""Utility helpers"""

from .config_manager import ConfigManager, app_data_dir

__all__ = ['ConfigManager', 'app_data_dir']
