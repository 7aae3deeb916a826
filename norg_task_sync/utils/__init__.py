"""
Utility functions for norg-task-sync.
"""

from .io import safe_read_json, safe_write_json, atomic_write, backup_file, backup_path_for
from .date import (
    parse_date, format_date, dates_equal,
    parse_rfc3339, format_due_rfc3339, parse_filename_day
)
from .http import RetryPolicy, is_retryable_error, with_retry

__all__ = [
    # I/O utilities
    'safe_read_json',
    'safe_write_json',
    'atomic_write',
    'backup_file',
    'backup_path_for',
    # Date utilities
    'parse_date',
    'format_date',
    'dates_equal',
    'parse_rfc3339',
    'format_due_rfc3339',
    'parse_filename_day',
    # HTTP utilities
    'RetryPolicy',
    'is_retryable_error',
    'with_retry',
]
