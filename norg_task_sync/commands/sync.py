"""Sync command - reconcile Norg todos with Google Tasks."""

import logging
from typing import Optional

from ..core.models import SyncConfig, SyncOptions
from ..sync.orchestrator import SyncReport, perform_sync
from ..tasks.tasks import TasksManager, create_manager


class SyncCommand:
    """Command for synchronizing Norg files with the configured task list."""

    def __init__(
        self,
        config: SyncConfig,
        manager: Optional[TasksManager] = None,
        verbose: bool = False,
    ):
        self.config = config
        self.manager = manager
        self.verbose = verbose
        self.logger = logging.getLogger(__name__)

    def run(self, options: SyncOptions) -> bool:
        """Run the sync and print a line per changed file."""
        manager = self.manager or create_manager(self.config, logger=self.logger)
        try:
            report = perform_sync(manager, self.config, options, logger=self.logger)
        finally:
            if manager is not self.manager:
                manager.close()
        self._print_report(report)
        return True

    def _print_report(self, report: SyncReport) -> None:
        for stats in report.changed:
            print(stats)

        if report.num_deleted > 0:
            print(
                f"Cleared {report.num_deleted} completed tasks older than "
                f"{report.clear_after_days} days…"
            )

        if self.verbose and not report.changed:
            print("Nothing to sync.")
