"""
Sync engine: diff, single-file syncer and multi-file orchestration.
"""

from .diff import Diff
from .orchestrator import SyncReport, perform_sync, resolve_files
from .stats import SyncStats
from .syncer import Syncer, SyncResult

__all__ = ['Diff', 'SyncReport', 'perform_sync', 'resolve_files', 'SyncStats', 'Syncer', 'SyncResult']
