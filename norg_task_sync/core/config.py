"""
Configuration management for norg-task-sync.

Settings are layered: the JSON config file, then ``NORG_TASK_SYNC_<FIELD>``
environment variables, then keys still missing are taken from
``config-fallback.json``, then the built-in defaults.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from ..utils.io import safe_read_json
from .exceptions import ConfigurationError
from .models import SyncConfig
from .paths import get_path_manager

ENV_PREFIX = "NORG_TASK_SYNC_"
LIST_FIELDS = ("ignore_filenames",)

logger = logging.getLogger(__name__)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return get_path_manager().config_path


def _read_layer(path: Path) -> Dict[str, Any]:
    try:
        data = safe_read_json(str(path), default={})
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"invalid config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a JSON object")
    return data


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect config fields set through the environment."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for name in SyncConfig.FIELDS:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is None:
            continue
        if name in LIST_FIELDS:
            overrides[name] = [item.strip() for item in raw.split(",") if item.strip()]
        else:
            overrides[name] = raw
    return overrides


def load_config(config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> SyncConfig:
    """
    Load configuration from file, environment and fallback file.

    Args:
        config_path: Optional path to config file. Uses default if not provided.
        environ: Environment mapping, ``os.environ`` by default

    Returns:
        SyncConfig object

    Raises:
        ConfigurationError: If a config file is not valid JSON or a value
            has the wrong type
    """
    manager = get_path_manager()
    path = Path(os.path.expanduser(config_path)) if config_path else manager.config_path
    logger.debug(f"Loading config from {path}")

    data = _read_layer(path)
    data.update(env_overrides(environ))

    for key, value in _read_layer(manager.config_fallback_path).items():
        data.setdefault(key, value)

    try:
        return SyncConfig.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"invalid config value: {exc}") from exc


def save_config(config: SyncConfig, config_path: Optional[str] = None):
    """
    Save configuration to file.

    Args:
        config: SyncConfig object to save
        config_path: Optional path to save to. Uses default if not provided.
    """
    if config_path is None:
        manager = get_path_manager()
        manager.ensure_directories()
        config_path = str(manager.config_path)

    config.save_to_file(config_path)
