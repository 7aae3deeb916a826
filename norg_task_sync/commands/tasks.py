"""Tasks command - show the remote tasks of the configured list."""

import json
import logging
from typing import Optional

from ..core.models import SyncConfig
from ..tasks.tasks import TasksManager, create_manager


class TasksCommand:
    """Command listing the tasks held remotely."""

    def __init__(self, config: SyncConfig, manager: Optional[TasksManager] = None):
        self.config = config
        self.manager = manager
        self.logger = logging.getLogger(__name__)

    def run(self, as_json: bool = False) -> bool:
        manager = self.manager or create_manager(self.config, logger=self.logger)
        try:
            tasks = manager.list_tasks()
        finally:
            if manager is not self.manager:
                manager.close()

        if as_json:
            print(json.dumps([task.to_dict() for task in tasks], indent=2, ensure_ascii=False))
            return True

        if not tasks:
            print("No tasks found.")
            return True

        for task in tasks:
            mark = "x" if task.completed else " "
            due = f" (due {task.due_at.isoformat()})" if task.due_at else ""
            print(f"[{mark}] {task.title}{due}  {task.id}")
        return True
