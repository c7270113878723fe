"""
Configuration loading and saving utilities.

A configuration is read from an optional YAML or JSON document, then
``HOOKWIRE_*`` environment variables are layered on top, and the merged
mapping is turned into a validated ``ApplicationConfig``.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import yaml

from .models import ApplicationConfig


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('true', '1', 'yes', 'on', 'enabled')


# (variable suffix, dotted config path, converter)
ENV_OVERRIDES: List[Tuple[str, str, Callable[[str], Any]]] = [
    ("DEBUG", "debug", _parse_bool),
    ("ENVIRONMENT", "environment", str),
    ("HOST", "server.host", str),
    ("PORT", "server.port", int),
    ("START_TIMEOUT", "lifecycle.start_timeout", float),
    ("STOP_TIMEOUT", "lifecycle.stop_timeout", float),
    ("LOG_LEVEL", "logging.level", str),
    ("LOG_JSON", "logging.json", _parse_bool),
    ("LOG_DIR", "logging.log_directory", str),
    ("LOG_FILE", "logging.file_enabled", _parse_bool),
]

_FORMATS = {
    '.yaml': 'yaml',
    '.yml': 'yaml',
    '.json': 'json',
}


class ConfigLoader:
    """Configuration loader supporting YAML/JSON files and environment overrides."""

    def __init__(self, env_prefix: str = "HOOKWIRE_") -> None:
        self._env_prefix = env_prefix

    def load_config(self, config_file: Optional[str] = None) -> ApplicationConfig:
        """
        Load configuration from file and environment variables.

        Args:
            config_file: Path to a ``.yaml``/``.yml``/``.json`` file (optional)

        Returns:
            Validated configuration

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file or an override is invalid
        """
        data = self._read_file(Path(config_file)) if config_file else {}
        data = self._merge_configs(data, self._environment_overrides())
        return ApplicationConfig.from_dict(data)

    def save_config(self, config: ApplicationConfig, file_path: str, format: str = "yaml") -> None:
        """
        Write a configuration as YAML or JSON.

        Raises:
            ValueError: If the format is unknown or the file cannot be written
        """
        fmt = format.lower()
        if fmt == "yaml":
            text = yaml.safe_dump(config.to_dict(), default_flow_style=False,
                                  indent=2, sort_keys=False)
        elif fmt == "json":
            text = json.dumps(config.to_dict(), indent=2) + "\n"
        else:
            raise ValueError(f"Unsupported format: {format}")

        try:
            Path(file_path).write_text(text, encoding='utf-8')
        except OSError as e:
            raise ValueError(f"Error writing {file_path}: {e}") from e

    def _read_file(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        fmt = _FORMATS.get(path.suffix.lower())
        if fmt is None:
            raise ValueError(f"Unsupported configuration file format: {path.suffix}")

        try:
            text = path.read_text(encoding='utf-8')
        except OSError as e:
            raise ValueError(f"Error reading {path}: {e}") from e

        try:
            data = yaml.safe_load(text) if fmt == 'yaml' else json.loads(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Configuration in {path} must be a mapping")
        return data

    def _environment_overrides(self) -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        for suffix, config_path, converter in ENV_OVERRIDES:
            env_var = f"{self._env_prefix}{suffix}"
            raw = os.environ.get(env_var)
            if raw is None:
                continue
            try:
                value = converter(raw)
            except ValueError as e:
                raise ValueError(f"Invalid value for {env_var}: {raw} ({e})") from e

            *parents, leaf = config_path.split('.')
            section = overrides
            for name in parents:
                section = section.setdefault(name, {})
            section[leaf] = value
        return overrides

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Return ``base`` with ``override`` merged in; nested sections merge key by key."""
        merged = dict(base)
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = self._merge_configs(current, value)
            else:
                merged[key] = value
        return merged
