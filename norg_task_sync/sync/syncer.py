"""Single-file sync between a Norg document and a snapshot of remote tasks."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
import logging

from ..core.models import SyncConfig, SyncOptions, Task, Todo, TodoState, format_tag, single_line
from ..norg.document import NorgDocument
from ..tasks.tasks import TasksManager
from .diff import Diff
from .stats import SyncStats


@dataclass
class SyncResult:
    """Outcome of syncing one file."""

    tasks_after: List[Task]
    todos_present: List[Todo]
    stats: SyncStats
    missing_remote: List[Todo] = field(default_factory=list)


def pulled_todo_line(task: Task) -> bytes:
    return f"  - ( ) {single_line(task.title)}{format_tag(task.id)}".encode("utf-8")


def _replace_task(tasks: List[Task], task: Task) -> None:
    for idx, existing in enumerate(tasks):
        if existing.id == task.id:
            tasks[idx] = task
            return
    tasks.append(task)


class Syncer:
    """Runs the sync phases for one document.

    Phases run in a fixed order: pull completed, pull new, push completed,
    missing-remote handling, push new, then title and due date reconciliation.
    The file is only written when its buffer changed.
    """

    def __init__(
        self,
        manager: TasksManager,
        config: SyncConfig,
        pull_completed: bool = True,
        push_completed: bool = True,
        pull_new: bool = True,
        push_new: bool = True,
        fix_missing: bool = False,
        backup_dir: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.manager = manager
        self.config = config
        self.pull_completed = pull_completed
        self.push_completed = push_completed
        self.pull_new = pull_new
        self.push_new = push_new
        self.fix_missing = fix_missing
        self.backup_dir = backup_dir
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_options(
        cls,
        options: SyncOptions,
        manager: TasksManager,
        config: SyncConfig,
        backup_dir: Optional[Path] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "Syncer":
        return cls(
            manager,
            config,
            pull_completed=not options.without_local,
            push_completed=not options.without_remote,
            pull_new=not options.without_local and not options.without_pull,
            push_new=not options.without_remote and not options.without_push,
            fix_missing=options.fix_missing,
            backup_dir=backup_dir,
            logger=logger,
        )

    def perform(self, path: Path, tasks: Iterable[Task]) -> SyncResult:
        """Open a file, sync it against ``tasks`` and write it back if changed."""
        document = NorgDocument.open(path, self.config, logger=self.logger)
        return self.sync_document(document, tasks)

    def sync_document(self, document: NorgDocument, tasks: Iterable[Task]) -> SyncResult:
        tasks = list(tasks)
        tasks_after = list(tasks)
        stats = SyncStats(file=document.path or Path(document.name))

        if self.pull_completed:
            stats.pull_completed = self._pull_completed(document, tasks)

        if self.pull_new:
            stats.pull_new = self._pull_new(document, tasks)

        if self.push_completed:
            stats.push_completed = self._push_completed(document, tasks, tasks_after)

        cleared = self._handle_missing_remote(document, tasks_after)

        if self.push_new:
            created = self._push_new(document)
            stats.push_new = len(created)
            tasks_after.extend(created)

        diff = Diff.compute(document, tasks_after)
        stats.newer_local = len(diff.newer_local)
        stats.newer_remote = len(diff.newer_remote)

        for todo in diff.newer_local.values():
            self.logger.info(f"Updating remote task '{todo.content}'")
            _replace_task(tasks_after, self.manager.update_task(todo))

        if diff.newer_remote:
            updates = [
                (document.idx_by_todo_id(task_id), task.title)
                for task_id, task in diff.newer_remote.items()
            ]
            document.update_task_titles(updates)

        if stats.modified_file() or cleared:
            document.backup(self.backup_dir)
            document.write()
            self.logger.debug(f"Wrote {document.name}")

        return SyncResult(
            tasks_after=tasks_after,
            todos_present=list(document.todos),
            stats=stats,
            missing_remote=diff.missing_remote,
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------
    def _pull_completed(self, document: NorgDocument, tasks: List[Task]) -> int:
        """Mark todos done whose remote task is completed."""
        remote_done = {task.id for task in tasks if task.completed}
        indices = [
            idx for idx, todo in enumerate(document.todos)
            if todo.state != TodoState.DONE and todo.id in remote_done
        ]
        for idx in indices:
            self.logger.info(f"Marking todo '{document.todos[idx].content}' as done.")
            document.mark_completed(idx)
        return len(indices)

    def _pull_new(self, document: NorgDocument, tasks: List[Task]) -> int:
        """Insert uncompleted remote tasks that no todo carries yet."""
        local_ids = {todo.id for todo in document.todos if todo.id is not None}
        to_insert = [task for task in tasks if not task.completed and task.id not in local_ids]
        if not to_insert:
            return 0

        lines = document.lines()
        for i, task in enumerate(to_insert):
            at = self._insertion_line(document, i)
            if at is None:
                # Keep a trailing newline last
                at = len(lines) - 1 if lines and not lines[-1] else len(lines)
            self.logger.info(f"Pulling new task '{task.title}'")
            lines.insert(at, bytearray(pulled_todo_line(task)))

        document.set_lines(lines)
        return len(to_insert)

    @staticmethod
    def _insertion_line(document: NorgDocument, index: int) -> Optional[int]:
        """Line the ``index``-th pulled task goes to; None means end of file."""
        todos = document.todos
        numbers = document.line_numbers

        if not numbers.has_todo_section:
            if todos:
                return todos[-1].line + 1 + index
            return None

        in_region = [todo.line for todo in todos if numbers.in_todo_region(todo.line)]
        anchor = in_region[-1] if in_region else numbers.todo_section
        return anchor + 1 + index

    def _push_completed(self, document: NorgDocument, tasks: List[Task], tasks_after: List[Task]) -> int:
        """Complete remote tasks whose todo is done locally."""
        local_done = {
            todo.id for todo in document.todos
            if todo.id is not None and todo.state == TodoState.DONE
        }
        count = 0
        for task in tasks:
            if task.completed or task.id not in local_done:
                continue
            self.logger.info(f"Marking '{task.title}' as done.")
            _replace_task(tasks_after, self.manager.complete_task(task.id))
            count += 1
        return count

    def _handle_missing_remote(self, document: NorgDocument, tasks_after: List[Task]) -> int:
        """Warn about, or untag, undone todos whose remote task is gone.

        Returns the number of cleared tags.
        """
        remote_ids = {task.id for task in tasks_after}
        missing = [
            idx for idx, todo in enumerate(document.todos)
            if todo.state == TodoState.UNDONE and todo.id is not None and todo.id not in remote_ids
        ]
        if not missing:
            return 0

        if not self.fix_missing:
            for idx in missing:
                self.logger.warning(
                    f"{document.name}: task '{document.todos[idx].content}' unexpectedly deleted "
                    f"from Google Tasks. Sync with --fix-missing to re-create."
                )
            return 0

        self.logger.info(f"Clearing {len(missing)} tasks that are not present remote to re-create them.")
        document.clear_tags(missing)
        return len(missing)

    def _push_new(self, document: NorgDocument) -> List[Task]:
        """Create remote tasks for undone untagged todos and tag them."""
        pending: List[Tuple[int, Todo]] = [
            (idx, todo) for idx, todo in enumerate(document.todos)
            if todo.state == TodoState.UNDONE and todo.id is None
        ]
        if not pending:
            return []

        created: List[Task] = []
        ids: List[Tuple[int, str]] = []
        for idx, todo in pending:
            task = self.manager.create_task(todo)
            created.append(task)
            ids.append((idx, task.id))

        document.append_ids(ids)
        return created
