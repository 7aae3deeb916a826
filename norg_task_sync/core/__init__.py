"""
Core module for norg-task-sync - contains domain models, configuration, and exceptions.
"""

from .models import (
    NOT_FOUND,
    TodoState,
    ByteRange,
    InLineRange,
    TodoRanges,
    Todo,
    LineNumbers,
    Task,
    TaskList,
    SyncOptions,
    SyncConfig,
    format_tag,
    single_line,
)

from .exceptions import (
    NorgTaskSyncError,
    ConfigurationError,
    AuthenticationError,
    NotFoundError,
    ParseError,
    MalformedDocumentError,
    InvalidFileExtensionError,
    TasksApiError,
    TodoWithoutIdError,
    ContextError,
    during,
)

__all__ = [
    # Models
    'NOT_FOUND',
    'TodoState',
    'ByteRange',
    'InLineRange',
    'TodoRanges',
    'Todo',
    'LineNumbers',
    'Task',
    'TaskList',
    'SyncOptions',
    'SyncConfig',
    'format_tag',
    'single_line',
    # Exceptions
    'NorgTaskSyncError',
    'ConfigurationError',
    'AuthenticationError',
    'NotFoundError',
    'ParseError',
    'MalformedDocumentError',
    'InvalidFileExtensionError',
    'TasksApiError',
    'TodoWithoutIdError',
    'ContextError',
    'during',
]
