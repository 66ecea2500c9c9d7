"""
Configuration Management Module

Loads settings from a YAML file on top of built-in defaults, with
environment variable overrides.
"""

import copy
import os
import socket
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import InvalidInput
from .logging_setup import get_logger

DEFAULT_CONFIG: Dict[str, Any] = {
    'activitywatch': {
        'server_url': 'http://localhost:5600',
        'afk_prefix': 'aw-watcher-afk_',
        'window_prefix': 'aw-watcher-window_',
        'timeout_seconds': None,
    },
    'device': {
        'name': None,
    },
    'ledger': {
        'project_root': '.',
        'data_dir': 'src/data',
    },
    'logging': {
        'level': 'INFO',
        'log_file': 'logs/worktime.log',
        'max_log_size_mb': 10,
        'backup_count': 3,
    },
}

ENV_OVERRIDES = {
    'ACTIVITYWATCH_URL': 'activitywatch.server_url',
    'WORKTIME_DEVICE': 'device.name',
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigManager:
    """Manages application configuration settings."""

    def __init__(self, config_path: str = "config.yaml", environ: Optional[Dict[str, str]] = None):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file; a missing file means defaults
            environ: Environment mapping (defaults to ``os.environ``)
        """
        self.logger = get_logger(__name__)
        self.config_path = Path(config_path)
        self.environ = os.environ if environ is None else environ
        self.config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        file_config: Dict[str, Any] = {}
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r', encoding='utf-8') as file:
                    file_config = yaml.safe_load(file) or {}
            except yaml.YAMLError as e:
                raise InvalidInput(f"Invalid configuration file {self.config_path}: {e}") from e

            if not isinstance(file_config, dict):
                raise InvalidInput(f"Configuration file {self.config_path} must contain a mapping")
        else:
            self.logger.debug(f"Configuration file not found, using defaults: {self.config_path}")

        self.config = _deep_merge(DEFAULT_CONFIG, file_config)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Environment overrides win over the file for the keys they cover.

        Args:
            key: Configuration key (e.g., 'activitywatch.server_url')
            default: Default value if key not found

        Returns:
            Configuration value
        """
        for env_name, env_key in ENV_OVERRIDES.items():
            if env_key == key and self.environ.get(env_name):
                return self.environ[env_name]

        keys = key.split('.')
        value = self.config

        try:
            for k in keys:
                value = value[k]
        except (KeyError, TypeError):
            return default
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key (e.g., 'device.name')
            value: Value to set
        """
        keys = key.split('.')
        config_ref = self.config

        for k in keys[:-1]:
            if not isinstance(config_ref.get(k), dict):
                config_ref[k] = {}
            config_ref = config_ref[k]

        config_ref[keys[-1]] = value

    def save_config(self) -> None:
        """Save current configuration to file."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w', encoding='utf-8') as file:
            yaml.safe_dump(self.config, file, default_flow_style=False, indent=2, sort_keys=False)

    def get_or_default(self, key: str) -> Any:
        """Like get(), but a null value falls back to the built-in default."""
        return self.get(key, self.get_default(key))

    @staticmethod
    def get_default(key: str) -> Any:
        value = DEFAULT_CONFIG
        try:
            for k in key.split('.'):
                value = value[k]
        except (KeyError, TypeError):
            return None
        return value

    def get_server_url(self, override: Optional[str] = None) -> str:
        return str(override or self.get_or_default('activitywatch.server_url')).rstrip('/')

    def get_afk_prefix(self) -> str:
        return str(self.get_or_default('activitywatch.afk_prefix'))

    def get_window_prefix(self) -> str:
        return str(self.get_or_default('activitywatch.window_prefix'))

    def get_timeout(self) -> Optional[float]:
        timeout = self.get('activitywatch.timeout_seconds')
        return float(timeout) if timeout is not None else None

    def get_device_name(self, override: Optional[str] = None) -> str:
        """Raw device name: CLI flag, then env/config, then the hostname."""
        return override or self.get('device.name') or socket.gethostname()

    def get_project_root(self) -> Path:
        return Path(self.get('ledger.project_root', '.'))

    def get_data_dir(self) -> str:
        return self.get('ledger.data_dir', 'src/data')

    def get_log_file_path(self) -> Optional[Path]:
        log_file = self.get('logging.log_file')
        return Path(log_file) if log_file else None
