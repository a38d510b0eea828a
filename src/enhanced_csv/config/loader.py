"""
Configuration loading utilities.

Supports environment variable interpolation. A config file is either a flat
mapping of ReaderConfig fields or holds them under a top-level ``reader`` key.
"""

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from enhanced_csv.config.settings import ReaderConfig


def _interpolate_env_vars(value: str) -> str:
    """
    Interpolate environment variables in string values.

    Supports ${VAR} and ${VAR:default} syntax.
    """
    pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        default = match.group(2)
        return os.environ.get(var_name, default if default is not None else "")

    return re.sub(pattern, replacer, value)


def _process_config_values(obj: Any) -> Any:
    """Recursively process config values for env var interpolation."""
    if isinstance(obj, str):
        return _interpolate_env_vars(obj)
    if isinstance(obj, dict):
        return {k: _process_config_values(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_process_config_values(item) for item in obj]
    return obj


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and process environment variables."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Config file must contain a mapping, got {type(data).__name__}"
        raise ValueError(msg)
    return _process_config_values(data)


def load_config(config_path: Path | None = None) -> ReaderConfig:
    """
    Load reader configuration from a YAML file.

    Args:
        config_path: Path to the configuration file. None gives the defaults.

    Returns:
        Validated ReaderConfig instance.

    Raises:
        ValueError: If the file content does not describe a valid config.
    """
    if config_path is None:
        return ReaderConfig()

    data = load_yaml(config_path)
    section = data.get("reader", data)
    if not isinstance(section, dict):
        msg = "Config section 'reader' must be a mapping"
        raise ValueError(msg)

    # Env interpolation yields strings; pydantic coerces "4" to 4 for max_workers
    try:
        return ReaderConfig(**section)
    except ValidationError as e:
        msg = f"Invalid reader config in {config_path}: {e}"
        raise ValueError(msg) from e
