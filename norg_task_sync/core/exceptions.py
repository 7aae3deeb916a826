"""
Exception classes for norg-task-sync.
"""

import contextlib
from typing import Iterator, Optional

import httpx


class NorgTaskSyncError(Exception):
    """Base exception for all norg-task-sync errors."""
    pass


class ConfigurationError(NorgTaskSyncError):
    """Raised when configuration is invalid or missing."""
    pass


class AuthenticationError(NorgTaskSyncError):
    """Raised when no usable access token is available."""
    pass


class NotFoundError(NorgTaskSyncError):
    """Raised when an expected field, section, file or identifier is absent."""

    def __init__(self, what: str):
        super().__init__(f"not found: {what}")
        self.what = what


class ParseError(NorgTaskSyncError):
    """Raised when a document cannot be parsed."""
    pass


class MalformedDocumentError(ParseError):
    """Raised when a matched construct cannot be turned into a record."""

    def __init__(self, message: str, line: Optional[int] = None):
        if line is not None:
            message = f"line {line + 1}: {message}"
        super().__init__(message)
        self.line = line


class InvalidFileExtensionError(NorgTaskSyncError):
    """Raised when a file does not carry the .norg extension."""

    def __init__(self, ext: str):
        super().__init__(f"invalid file extension: {ext}")
        self.ext = ext


class TasksApiError(NorgTaskSyncError):
    """Raised when the remote task service rejects a request."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"tasks api: {status_code} {message}")
        self.status_code = status_code
        self.message = message


class TodoWithoutIdError(NorgTaskSyncError):
    """Raised when a remote update is requested for an untagged todo."""

    def __init__(self, content: str):
        super().__init__(f"todo has no task id: {content}")
        self.content = content


class ContextError(NorgTaskSyncError):
    """An error annotated with what was being done when it happened."""

    def __init__(self, context: str, cause: BaseException):
        super().__init__(f"while {context}: {cause}")
        self.context = context
        self.cause = cause


WRAPPED_EXCEPTIONS = (NorgTaskSyncError, OSError, ValueError, httpx.HTTPError)


@contextlib.contextmanager
def during(context: str) -> Iterator[None]:
    """Wrap errors raised in the block with a ``while <context>`` message.

    The original exception stays available as ``__cause__`` and ``cause``.
    """
    try:
        yield
    except WRAPPED_EXCEPTIONS as exc:
        raise ContextError(context, exc) from exc
