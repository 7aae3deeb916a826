"""Task manager for Google Tasks operations."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Protocol, Tuple
import logging

from ..core.exceptions import ConfigurationError, NotFoundError, TodoWithoutIdError, during
from ..core.models import SyncConfig, Task, TaskList, Todo
from ..utils.date import parse_date, parse_rfc3339
from .auth import Session, load_session
from .gateway import TasksGateway

STATUS_COMPLETED = "completed"


class TasksBackend(Protocol):
    """Calls ``TasksManager`` needs from a gateway."""

    def list_tasklists(self) -> List[Dict[str, Any]]: ...

    def list_tasks(self, tasklist: str) -> List[Dict[str, Any]]: ...

    def get_task(self, tasklist: str, task_id: str) -> Dict[str, Any]: ...

    def insert_task(self, tasklist: str, body: Dict[str, Any]) -> Dict[str, Any]: ...

    def update_task(self, tasklist: str, task_id: str, body: Dict[str, Any]) -> Dict[str, Any]: ...

    def delete_task(self, tasklist: str, task_id: str) -> None: ...

    def close(self) -> None: ...


def task_from_wire(data: Dict[str, Any]) -> Task:
    """
    Project a Google Tasks resource onto a Task.

    Raises:
        NotFoundError: If ``id``, ``title`` or ``updated`` is missing
        ValueError: If a timestamp is not RFC 3339
    """
    for key in ("id", "title", "updated"):
        if data.get(key) is None:
            raise NotFoundError(f"task {key}")

    due = data.get("due")
    return Task(
        id=data["id"],
        title=data["title"],
        completed=data.get("status") == STATUS_COMPLETED or data.get("completed") is not None,
        modified_at=parse_rfc3339(data["updated"]),
        due_at=parse_date(due) if due else None,
    )


def tasklist_from_wire(data: Dict[str, Any]) -> TaskList:
    for key in ("id", "title"):
        if data.get(key) is None:
            raise NotFoundError(f"{key} for tasklist")
    return TaskList(id=data["id"], title=data["title"])


def todo_to_wire(todo: Todo) -> Dict[str, Any]:
    """Request body carrying a todo's title and due date."""
    body: Dict[str, Any] = {"title": todo.content}
    due = todo.due_at_fmt()
    if due is not None:
        body["due"] = due
    return body


class TasksManager:
    """Manages CRUD operations on one Google Tasks list."""

    def __init__(
        self,
        gateway: TasksBackend,
        tasklist: str,
        logger: Optional[logging.Logger] = None,
    ):
        self.gateway = gateway
        self.tasklist = tasklist
        self.logger = logger or logging.getLogger(__name__)

    def close(self) -> None:
        """Release the gateway's connections."""
        self.gateway.close()

    def __enter__(self) -> "TasksManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def list_tasklists(self) -> List[TaskList]:
        with during("getting task lists"):
            return [tasklist_from_wire(item) for item in self.gateway.list_tasklists()]

    def list_tasks(self) -> List[Task]:
        """Fetch every task of the configured list."""
        with during("getting tasks"):
            items = self.gateway.list_tasks(self.tasklist)
            tasks = [task_from_wire(item) for item in items]
        self.logger.debug(f"Fetched {len(tasks)} tasks from list {self.tasklist}")
        return tasks

    def complete_task(self, task_id: str) -> Task:
        """Mark a remote task completed and return its updated state."""
        with during("setting task done"):
            body = self.gateway.get_task(self.tasklist, task_id)
            if body.get("status") == STATUS_COMPLETED or body.get("completed") is not None:
                self.logger.warning(f"Task already completed: {body.get('title') or task_id}")
            body["status"] = STATUS_COMPLETED
            return task_from_wire(self.gateway.update_task(self.tasklist, task_id, body))

    def create_task(self, todo: Todo) -> Task:
        with during(f"creating task: {todo.content}"):
            created = self.gateway.insert_task(self.tasklist, todo_to_wire(todo))
            task = task_from_wire(created)
        self.logger.info(f"Created task {task.id}: {task.title}")
        return task

    def update_task(self, todo: Todo) -> Task:
        """
        Push a todo's title and due date onto its remote task.

        Raises:
            TodoWithoutIdError: If the todo carries no task id
        """
        if todo.id is None:
            raise TodoWithoutIdError(todo.content)

        with during(f"updating task: [{todo.id}] {todo.content}"):
            body = self.gateway.get_task(self.tasklist, todo.id)
            body.pop("due", None)
            body.update(todo_to_wire(todo))
            return task_from_wire(self.gateway.update_task(self.tasklist, todo.id, body))

    def clear_completed(
        self,
        tasks: List[Task],
        older_than: timedelta,
        now: Optional[datetime] = None,
    ) -> Tuple[List[Task], int]:
        """
        Delete completed tasks last modified before ``now - older_than``.

        Returns:
            Tuple of (kept tasks, number of deleted tasks)
        """
        cutoff = (now or datetime.now(timezone.utc)) - older_than
        keep: List[Task] = []
        delete: List[Task] = []
        for task in tasks:
            (delete if task.completed and task.modified_at < cutoff else keep).append(task)

        if delete:
            self.logger.info(f"Clearing {len(delete)} completed tasks older than {older_than.days} days")
        with during("clearing completed tasks"):
            for task in delete:
                self.logger.debug(f"Deleting task {task.id}: {task.title}")
                self.gateway.delete_task(self.tasklist, task.id)
        return keep, len(delete)


def create_manager(
    config: SyncConfig,
    session: Optional[Session] = None,
    require_tasklist: bool = True,
    logger: Optional[logging.Logger] = None,
) -> TasksManager:
    """
    Build a manager talking to Google Tasks for the configured list.

    Raises:
        ConfigurationError: If ``require_tasklist`` is set and no list is configured
        AuthenticationError: If no access token is available
    """
    if require_tasklist and not config.tasklist:
        raise ConfigurationError(
            "no tasklist configured; pick one with 'norg-task-sync config tasklist list' "
            "and set it with 'norg-task-sync config tasklist set <ID>'"
        )
    gateway = TasksGateway(session or load_session(), logger=logger)
    return TasksManager(gateway, config.tasklist, logger=logger)
