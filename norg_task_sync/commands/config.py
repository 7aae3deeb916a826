"""Config command - show settings and choose the task list."""

import json
import logging
from typing import Optional

from ..core.config import save_config
from ..core.exceptions import ConfigurationError
from ..core.models import SyncConfig
from ..tasks.tasks import TasksManager, create_manager


class ConfigCommand:
    """Command for inspecting and editing the configuration."""

    def __init__(
        self,
        config: SyncConfig,
        config_path: Optional[str] = None,
        manager: Optional[TasksManager] = None,
    ):
        self.config = config
        self.config_path = config_path
        self.manager = manager
        self.logger = logging.getLogger(__name__)

    def show(self) -> bool:
        print(json.dumps(self.config.to_dict(), indent=2, ensure_ascii=False))
        return True

    def tasklist(self, operation: str, value: Optional[str] = None) -> bool:
        """Get, set or list the task list used for syncing."""
        if operation == "get":
            print(self.config.tasklist or "(not set)")
            return True

        if operation == "set":
            if not value:
                raise ConfigurationError("missing value for 'config tasklist set'")
            self.config.tasklist = value
            save_config(self.config, self.config_path)
            self.logger.info(f"Set tasklist to {value}")
            return True

        if operation == "list":
            manager = self.manager or create_manager(self.config, require_tasklist=False, logger=self.logger)
            try:
                tasklists = manager.list_tasklists()
            finally:
                if manager is not self.manager:
                    manager.close()
            width = max((len(tl.id) for tl in tasklists), default=0)
            for tl in tasklists:
                marker = "*" if tl.id == self.config.tasklist else " "
                print(f"{marker} {tl.id:<{width}} {tl.title}")
            return True

        raise ConfigurationError(f"unknown tasklist operation: {operation}")
