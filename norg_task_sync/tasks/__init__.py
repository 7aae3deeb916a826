"""
Google Tasks side: session, HTTP gateway and task manager.
"""

from .auth import Session, load_session
from .gateway import TasksGateway
from .tasks import TasksManager, create_manager, task_from_wire, todo_to_wire

__all__ = [
    'Session', 'load_session', 'TasksGateway', 'TasksManager',
    'create_manager', 'task_from_wire', 'todo_to_wire',
]
