"""
Centralized path management for norg-task-sync.

Resolves the configuration and cache directories and the files kept in them.
"""

import os
import logging
from pathlib import Path
from typing import Optional


class PathManager:
    """Manages norg-task-sync file paths."""

    # Directory names
    APP_DIR_NAME = "norg-task-sync"

    # File names
    CONFIG_FILE = "config.json"
    CONFIG_FALLBACK_FILE = "config-fallback.json"
    TOKEN_CACHE_FILE = "tokencache.json"

    # Environment overrides
    HOME_ENV = "NORG_TASK_SYNC_HOME"

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize path manager."""
        self.logger = logger or logging.getLogger(__name__)
        self._config_dir: Optional[Path] = None

    @property
    def config_dir(self) -> Path:
        """
        Get the configuration directory.

        Priority order:
        1. NORG_TASK_SYNC_HOME environment variable (explicit override)
        2. $XDG_CONFIG_HOME/norg-task-sync
        3. ~/.config/norg-task-sync
        """
        if self._config_dir is not None:
            return self._config_dir

        env_override = os.environ.get(self.HOME_ENV)
        if env_override:
            self._config_dir = Path(env_override).expanduser().resolve()
            self.logger.debug(f"Using {self.HOME_ENV} override: {self._config_dir}")
            return self._config_dir

        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg).expanduser() if xdg else Path.home() / ".config"
        self._config_dir = base / self.APP_DIR_NAME
        return self._config_dir

    @property
    def cache_dir(self) -> Path:
        """Get the cache directory holding the token cache."""
        if os.environ.get(self.HOME_ENV):
            return self.config_dir / "cache"

        xdg = os.environ.get("XDG_CACHE_HOME")
        base = Path(xdg).expanduser() if xdg else Path.home() / ".cache"
        return base / self.APP_DIR_NAME

    def ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in (self.config_dir, self.cache_dir):
            directory.mkdir(parents=True, exist_ok=True)
            self.logger.debug(f"Ensured directory exists: {directory}")

    # File path properties
    @property
    def config_path(self) -> Path:
        """Get the configuration file path."""
        return self.config_dir / self.CONFIG_FILE

    @property
    def config_fallback_path(self) -> Path:
        """Get the fallback configuration file path."""
        return self.config_dir / self.CONFIG_FALLBACK_FILE

    @property
    def token_cache_path(self) -> Path:
        """Get the OAuth token cache path."""
        return self.cache_dir / self.TOKEN_CACHE_FILE


# Global instance for convenience
_path_manager = None


def get_path_manager() -> PathManager:
    """Get or create the global PathManager instance."""
    global _path_manager
    if _path_manager is None:
        _path_manager = PathManager()
    return _path_manager


def reset_path_manager() -> None:
    """Drop the cached instance so environment changes are picked up."""
    global _path_manager
    _path_manager = None
