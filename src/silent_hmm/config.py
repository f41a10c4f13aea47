"""
Configuration management system for silent-hmm.

Provides default settings and configuration override capabilities.
"""

import copy
import os
import json
from typing import Dict, Any, Optional
from pathlib import Path


DEFAULT_CONFIG = {
    'forward': {
        'log_columns': False,
        'validate_symbols': True
    },
    'io': {
        'symbol_delimiter': None,
        'comment_prefix': '#',
        'encoding': 'utf-8'
    },
    'persistence': {
        'models_dir': 'models',
        'compress': 3
    },
    'logging': {
        'level': 'INFO',
        'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        'file_logging': False,
        'log_file': 'silent_hmm.log'
    }
}


def _parse_bool(value: str) -> bool:
    if value.strip().lower() in ('1', 'true', 'yes', 'on'):
        return True
    if value.strip().lower() in ('0', 'false', 'no', 'off'):
        return False
    raise ValueError(f"Not a boolean value: {value!r}")


class ConfigManager:
    """Manages configuration settings with override capabilities."""

    def __init__(self):
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        self._load_environment_overrides()

    def _load_environment_overrides(self):
        """Load configuration overrides from environment variables."""
        config_file = os.getenv('SILENT_HMM_CONFIG')
        if config_file and Path(config_file).exists():
            self.load_from_file(config_file)

        env_overrides = {
            'SILENT_HMM_LOG_LEVEL': ('logging', 'level', str),
            'SILENT_HMM_LOG_COLUMNS': ('forward', 'log_columns', _parse_bool),
            'SILENT_HMM_MODELS_DIR': ('persistence', 'models_dir', str)
        }

        for env_var, (section, key, type_func) in env_overrides.items():
            value = os.getenv(env_var)
            if value is not None:
                try:
                    self._config[section][key] = type_func(value)
                except (ValueError, KeyError):
                    pass  # Ignore invalid environment values

    def get(self, section: str, key: Optional[str] = None) -> Any:
        """Get configuration value(s)."""
        if key is None:
            return self._config.get(section, {})
        return self._config.get(section, {}).get(key)

    def set(self, section: str, key: str, value: Any) -> None:
        """Set configuration value."""
        if section not in self._config:
            self._config[section] = {}
        self._config[section][key] = value

    def update(self, config_dict: Dict[str, Any]) -> None:
        """Update configuration with dictionary."""
        for section, values in config_dict.items():
            if section not in self._config:
                self._config[section] = {}
            if isinstance(values, dict):
                self._config[section].update(values)
            else:
                self._config[section] = values

    def load_from_file(self, config_path: str) -> None:
        """Load configuration from JSON file."""
        try:
            with open(config_path, 'r') as f:
                file_config = json.load(f)
            self.update(file_config)
        except (FileNotFoundError, json.JSONDecodeError) as e:
            raise ValueError(f"Failed to load config from {config_path}: {e}")

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        self._load_environment_overrides()


# Global configuration manager instance
_config_manager = ConfigManager()


def get_config(section: str, key: Optional[str] = None) -> Any:
    """Get configuration value(s) from global config manager."""
    return _config_manager.get(section, key)


def set_config(section: str, key: str, value: Any) -> None:
    """Set configuration value in global config manager."""
    _config_manager.set(section, key, value)


def update_config(config_dict: Dict[str, Any]) -> None:
    """Update global configuration with dictionary."""
    _config_manager.update(config_dict)


def load_config_file(config_path: str) -> None:
    """Load configuration from file into global config manager."""
    _config_manager.load_from_file(config_path)


def reset_config() -> None:
    """Reset global configuration to defaults."""
    _config_manager.reset_to_defaults()
