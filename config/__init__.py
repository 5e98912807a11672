"""
Configuration Module for the Invoice Field Extraction Engine.

Anchor vocabularies, denylists, tolerances and the known-template override
live in settings.yaml so they can be tuned without touching the parsers.

A custom file (``--config`` or the INVOICE_FIELDS_CONFIG environment
variable) is layered over the bundled defaults, so it only needs the keys it
changes.
"""

import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_PATH = Path(__file__).parent / "settings.yaml"
CONFIG_ENV_VAR = "INVOICE_FIELDS_CONFIG"


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay ``override`` on ``base``; lists are replaced."""
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")
    return data


class ConfigurationManager:
    """
    Process-wide settings for the extraction engine.

    Components read their settings once, at construction; extraction calls
    never touch the configuration.

    Attributes:
        config_path (Optional[Path]): Custom file layered over the defaults.

    Example:
        >>> ConfigurationManager().get("extraction.sentinel")
        'Not found'
    """

    _instance: Optional['ConfigurationManager'] = None

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        # Singleton: the first construction wins until reset()
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Args:
            config_path: Custom settings file. Defaults to the
                INVOICE_FIELDS_CONFIG environment variable, if set.
        """
        if self._initialized:
            return

        config_path = config_path or os.environ.get(CONFIG_ENV_VAR)
        self.config_path = Path(config_path) if config_path else None
        self._config: Dict[str, Any] = {}

        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """
        Raises:
            FileNotFoundError: If a configuration file doesn't exist.
            ValueError: If a file does not hold a mapping.
            yaml.YAMLError: If a file is not valid YAML.
        """
        config = _read_yaml(DEFAULT_CONFIG_PATH)
        if self.config_path is not None:
            config = _merge(config, _read_yaml(self.config_path))

        self._config = config
        self._resolve_log_path()

    def _resolve_log_path(self) -> None:
        project_root = Path(__file__).parent.parent

        log_file = self._config.get('logging', {}).get('file', {})
        path = log_file.get('path')
        if path and not Path(path).is_absolute():
            log_file['path'] = str(project_root / path)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a value by dotted key.

        Example:
            >>> config.get("postprocessing.amount.decimal_places")
            2
            >>> config.get("extraction.unknown", [])
            []
        """
        value: Any = self._config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def get_all(self) -> Dict[str, Any]:
        """Return a deep copy of the merged configuration."""
        return deepcopy(self._config)

    def reload(self) -> None:
        """Re-read the defaults and the custom file."""
        self._load_config()

    @classmethod
    def reset(cls) -> None:
        """Drop the singleton so the next construction reloads (used by tests and the CLI)."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ``ConfigurationManager().get(key, default)``."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config']
