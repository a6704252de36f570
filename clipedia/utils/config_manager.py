"""Configuration management module"""

import copy
import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from loguru import logger

APP_NAME = 'Clipedia'


def app_data_dir() -> Path:
    """
    Get (and create) the per-user application data directory

    Returns:
        %APPDATA%/Clipedia on Windows, ~/.clipedia elsewhere
    """
    if 'APPDATA' in os.environ:
        path = Path(os.environ['APPDATA']) / APP_NAME
    else:
        path = Path.home() / f'.{APP_NAME.lower()}'
    path.mkdir(parents=True, exist_ok=True)
    return path


class ConfigManager:
    """Manages application configuration"""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager

        Args:
            config_path: Path to configuration file
        """
        if config_path is None:
            config_path = str(app_data_dir() / 'settings.yaml')

        self.config_path = config_path
        self.config: Dict[str, Any] = {}
        self._load_defaults()
        self._load_config()

    def _load_defaults(self):
        """Load default configuration"""
        default_path = Path(__file__).parent.parent.parent / 'config' / 'default_settings.yaml'

        try:
            if default_path.exists():
                with open(default_path, 'r', encoding='utf-8') as f:
                    self.config = yaml.safe_load(f) or {}
                logger.info("Loaded default configuration")
            else:
                logger.warning(f"Default config not found: {default_path}")
                self._create_default_config()

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load defaults: {e}")
            self._create_default_config()

    def _create_default_config(self):
        """Create default configuration in memory"""
        self.config = {
            'clipboard': {
                'check_interval': 500,
                'monitoring_enabled': True,
                'max_history_size': 1000
            },
            'storage': {
                'database_path': None,
                'retention_days': 0
            },
            'cleanup': {
                'enabled': True,
                'cleanup_interval': 3600
            },
            'logging': {
                'level': 'INFO',
                'file_logging': True,
                'rotation': '1 day',
                'retention': '7 days'
            }
        }

    def _load_config(self):
        """Load user configuration"""
        try:
            if os.path.exists(self.config_path):
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    user_config = yaml.safe_load(f) or {}

                # Merge with defaults
                self._merge_config(self.config, user_config)
                logger.info(f"Loaded user configuration from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load user config: {e}")

    def _merge_config(self, base: Dict, updates: Dict):
        """
        Recursively merge configuration dictionaries

        Args:
            base: Base configuration
            updates: Updates to apply
        """
        for key, value in updates.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def save(self) -> bool:
        """Save current configuration to file"""
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.config_path)), exist_ok=True)

            with open(self.config_path, 'w', encoding='utf-8') as f:
                yaml.safe_dump(self.config, f, default_flow_style=False)

            logger.info(f"Configuration saved to {self.config_path}")
            return True

        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to save configuration: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value

        Args:
            key: Configuration key (dot notation supported)
            default: Default value if not found

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

    def set(self, key: str, value: Any):
        """
        Set configuration value

        Args:
            key: Configuration key (dot notation supported)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        logger.debug(f"Set config: {key} = {value}")

    def get_all(self) -> Dict[str, Any]:
        """Get entire configuration"""
        return copy.deepcopy(self.config)

    def reset(self):
        """Reset to default configuration"""
        self._load_defaults()
        logger.info("Configuration reset to defaults")

    def validate(self) -> bool:
        """
        Validate configuration

        Returns:
            True if valid
        """
        required = [
            'clipboard.check_interval',
            'clipboard.max_history_size',
            'cleanup.cleanup_interval'
        ]

        for key in required:
            if self.get(key) is None:
                logger.error(f"Missing required config: {key}")
                return False

        try:
            if int(self.get('clipboard.check_interval')) < 100:
                logger.error("Check interval too small (min 100ms)")
                return False

            if int(self.get('clipboard.max_history_size')) < 10:
                logger.error("History size too small (min 10)")
                return False

            if int(self.get('storage.retention_days', 0)) < 0:
                logger.error("Retention days must not be negative")
                return False

        except (TypeError, ValueError) as e:
            logger.error(f"Configuration validation failed: {e}")
            return False

        return True
