"""Multi-file sync run over one snapshot of the remote task list."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, List, Optional
import logging

from ..core.exceptions import NotFoundError, during
from ..core.models import SyncConfig, SyncOptions, Task
from ..norg.files import get_files_from_folders
from ..tasks.tasks import TasksManager
from .stats import SyncStats
from .syncer import Syncer


@dataclass
class SyncReport:
    """Everything a sync run did, for display."""

    stats: List[SyncStats] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    num_deleted: int = 0
    clear_after_days: Optional[int] = None

    @property
    def changed(self) -> List[SyncStats]:
        return [s for s in self.stats if s.any_change()]


def resolve_files(options: SyncOptions, config: SyncConfig) -> List[Path]:
    """
    Files a sync run covers, in processing order.

    Raises:
        NotFoundError: If no file is left after expanding folders
    """
    files = get_files_from_folders(options.files_or_folders, config.ignore_filenames)
    if not options.without_sort:
        files.sort()
    if not files:
        raise NotFoundError("norg files to sync")
    return files


def _merge_tasks(snapshot: List[Task], updates: List[Task]) -> List[Task]:
    merged: Dict[str, Task] = {task.id: task for task in snapshot}
    for task in updates:
        merged[task.id] = task
    return list(merged.values())


def perform_sync(
    manager: TasksManager,
    config: SyncConfig,
    options: SyncOptions,
    backup_dir: Optional[Path] = None,
    now: Optional[datetime] = None,
    logger: Optional[logging.Logger] = None,
) -> SyncReport:
    """
    Sync a set of Norg files against the configured task list.

    The remote list is fetched once. Every file except the pull target is
    synced with pulling of new tasks switched off, each seeing the snapshot as
    left by the files before it. The pull target (the first file with
    ``pull_to_first``, else the last) then runs with all phases against the
    tasks no todo has claimed so far, so a remote task is never pulled twice.
    """
    logger = logger or logging.getLogger(__name__)
    files = resolve_files(options, config)
    target_idx = 0 if options.pull_to_first else len(files) - 1

    snapshot = manager.list_tasks()
    logger.info(f"Syncing {len(files)} files against {len(snapshot)} remote tasks")

    stats: List[SyncStats] = []
    seen_ids = set()

    for idx, path in enumerate(files):
        if idx == target_idx:
            continue

        syncer = Syncer.from_options(options, manager, config, backup_dir=backup_dir, logger=logger)
        syncer.pull_new = False

        with during(f"syncing {path}"):
            result = syncer.perform(path, snapshot)
        snapshot = result.tasks_after
        seen_ids.update(todo.id for todo in result.todos_present if todo.id is not None)
        stats.append(result.stats)

    unclaimed = [task for task in snapshot if task.id not in seen_ids]
    target = files[target_idx]
    logger.debug(f"Pulling to {target}, {len(unclaimed)} unclaimed remote tasks")

    syncer = Syncer.from_options(options, manager, config, backup_dir=backup_dir, logger=logger)
    with during(f"syncing {target}"):
        result = syncer.perform(target, unclaimed)
    snapshot = _merge_tasks(snapshot, result.tasks_after)

    if options.pull_to_first:
        stats.insert(0, result.stats)
    else:
        stats.append(result.stats)

    report = SyncReport(stats=stats, tasks=snapshot)

    days = config.clear_completed_tasks_older_than_days
    if days is not None:
        report.tasks, report.num_deleted = manager.clear_completed(snapshot, timedelta(days=days), now=now)
        report.clear_after_days = days
        logger.info(f"Number of tasks not completed/old enough yet: {len(report.tasks)}")
    else:
        logger.info("Not clearing old completed tasks.")

    return report
