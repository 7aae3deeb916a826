"""
Command implementations for norg-task-sync.
"""

from .sync import SyncCommand
from .tasks import TasksCommand
from .parse import ParseCommand
from .config import ConfigCommand

__all__ = [
    'SyncCommand',
    'TasksCommand',
    'ParseCommand',
    'ConfigCommand',
]
