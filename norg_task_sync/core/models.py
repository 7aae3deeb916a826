"""
Domain models for norg-task-sync.

This module contains the core data structures shared by the document model,
the remote task client and the sync engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar
import os

from ..utils.date import format_date, format_due_rfc3339
from ..utils.io import safe_write_json

# Sentinel for "heading not found" in LineNumbers.
NOT_FOUND = -1

TASK_ID_TAG = "#taskid"


def _normalize_path(path: str) -> str:
    """Expand user and convert to absolute path."""
    return os.path.abspath(os.path.expanduser(path))


class TodoState(Enum):
    """Completion state of a local todo, keyed by its marker character."""

    UNDONE = " "
    PENDING = "-"
    DONE = "x"

    @classmethod
    def from_marker(cls, marker: str) -> TodoState:
        return cls(marker)


@dataclass(frozen=True)
class ByteRange:
    """Absolute offsets into a document buffer, valid until the next mutation."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class InLineRange:
    """Column offsets within a single line, valid while that line is untouched."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


R = TypeVar("R", ByteRange, InLineRange)


@dataclass(frozen=True)
class TodoRanges(Generic[R]):
    """Spans of the three parts of a todo line in one coordinate system."""

    content: R
    id_comment: Optional[R]
    state: R


@dataclass
class Todo:
    """A todo list item extracted from a Norg document."""

    content: str
    id: Optional[str]
    line: int
    state: TodoState
    byte_ranges: TodoRanges[ByteRange]
    in_line: TodoRanges[InLineRange]
    due_at: Optional[date] = None

    @property
    def is_tagged(self) -> bool:
        return self.id is not None

    def due_at_fmt(self) -> Optional[str]:
        return format_due_rfc3339(self.due_at)


def format_tag(task_id: str) -> str:
    """Format the trailing identifier comment, including its separator."""
    return f" %{TASK_ID_TAG} {task_id}%"


def single_line(title: str) -> str:
    """Join a multi-line remote title into one line of todo content."""
    return " ".join(title.splitlines())


@dataclass
class LineNumbers:
    """Line of the todo section heading and of the heading following it."""

    todo_section: int = NOT_FOUND
    section_after_todo: int = NOT_FOUND

    @property
    def has_todo_section(self) -> bool:
        return self.todo_section != NOT_FOUND

    def in_todo_region(self, line: int) -> bool:
        if not self.has_todo_section:
            return False
        if line <= self.todo_section:
            return False
        return self.section_after_todo == NOT_FOUND or line < self.section_after_todo


@dataclass
class Task:
    """A task as held by the remote task service."""

    id: str
    title: str
    completed: bool
    modified_at: datetime
    due_at: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "completed": self.completed,
            "modified_at": self.modified_at.isoformat(),
            "due_at": format_date(self.due_at),
        }


@dataclass
class TaskList:
    """A remote task list."""

    id: str
    title: str


@dataclass
class SyncOptions:
    """Per-run switches of the sync command."""

    files_or_folders: List[Path] = field(default_factory=list)
    fix_missing: bool = False
    pull_to_first: bool = False
    without_sort: bool = False
    without_local: bool = False
    without_remote: bool = False
    without_push: bool = False
    without_pull: bool = False


@dataclass
class SyncConfig:
    """Configuration for sync operations."""

    tasklist: str = ""
    section_todos: str = "TODOs"
    section_todos_till_end_of_day: Optional[str] = None
    ignore_filenames: List[str] = field(default_factory=list)
    clear_completed_tasks_older_than_days: Optional[int] = None

    FIELDS = (
        "tasklist",
        "section_todos",
        "section_todos_till_end_of_day",
        "ignore_filenames",
        "clear_completed_tasks_older_than_days",
    )

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SyncConfig:
        ignore = data.get("ignore_filenames") or []
        if isinstance(ignore, str):
            ignore = [ignore]

        days = data.get("clear_completed_tasks_older_than_days")
        if days is not None:
            days = int(days)

        return cls(
            tasklist=data.get("tasklist", "") or "",
            section_todos=data.get("section_todos", "TODOs") or "TODOs",
            section_todos_till_end_of_day=data.get("section_todos_till_end_of_day"),
            ignore_filenames=list(ignore),
            clear_completed_tasks_older_than_days=days,
        )

    # ------------------------------------------------------------------
    # Persistence helpers
    # ------------------------------------------------------------------
    def save_to_file(self, config_path: str) -> None:
        config_path = _normalize_path(config_path)
        safe_write_json(config_path, self.to_dict())
