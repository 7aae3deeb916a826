"""Field-level comparison of tagged todos against their remote tasks."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from ..core.models import Task, Todo, TodoState, single_line
from ..norg.document import NorgDocument
from ..utils.date import dates_equal


@dataclass
class Diff:
    """Which side holds the newer title or due date for each linked pair."""

    newer_local: Dict[str, Todo] = field(default_factory=dict)
    newer_remote: Dict[str, Task] = field(default_factory=dict)
    missing_remote: List[Todo] = field(default_factory=list)

    @classmethod
    def compute(cls, document: NorgDocument, tasks: Iterable[Task]) -> "Diff":
        """
        Compare every tagged todo of a document with its remote task.

        A title mismatch goes to whichever side was modified last, with ties
        going to the remote. A due date mismatch is only ever pushed, and only
        when the document is strictly newer. Tagged todos without a remote task
        are collected in ``missing_remote`` unless they are done.
        """
        by_id = {task.id: task for task in tasks}
        diff = cls()

        for todo in document.todos:
            if todo.id is None:
                continue

            task = by_id.get(todo.id)
            if task is None:
                # Completed tasks may be cleared remotely
                if todo.state != TodoState.DONE:
                    diff.missing_remote.append(todo)
                continue

            local_newer = task.modified_at < document.modified_at

            if single_line(task.title).strip() != todo.content.strip():
                if local_newer:
                    diff.newer_local[todo.id] = todo
                else:
                    diff.newer_remote[todo.id] = task
                continue

            if not dates_equal(task.due_at, todo.due_at) and local_newer:
                diff.newer_local[todo.id] = todo

        return diff

    def is_empty(self) -> bool:
        return not self.newer_local and not self.newer_remote
