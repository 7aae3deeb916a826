"""
Safe I/O operations with atomic writes, cooperative file locking and backups.
"""

import contextlib
import errno
import json
import os
import shutil
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

try:  # fcntl is only available on POSIX platforms
    import fcntl  # type: ignore
except ImportError:  # pragma: no cover - Windows fallback
    fcntl = None  # type: ignore


DEFAULT_LOCK_TIMEOUT = 8.0  # seconds
LOCK_SLEEP_INTERVAL = 0.05  # seconds
BACKUP_PREFIX = "norg_task_sync_"


def _lock_file_path(path: Path) -> Path:
    """Return the companion lock file path for the target file."""
    lock_name = f".{path.name}.lock"
    return path.parent / lock_name


@contextlib.contextmanager
def _file_lock(target_path: Path, exclusive: bool, timeout: float = DEFAULT_LOCK_TIMEOUT) -> Iterator[None]:
    """Acquire a cooperative file lock around the target path.

    Uses POSIX advisory locking via fcntl when available; otherwise acts as a no-op.
    The lock file is removed again once an exclusive lock is released.
    """
    if fcntl is None:
        yield
        return

    lock_path = _lock_file_path(target_path)
    lock_path.parent.mkdir(parents=True, exist_ok=True)

    lock_type = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
    deadline = time.monotonic() + timeout if timeout is not None else None

    with open(lock_path, "a") as lock_file:
        while True:
            try:
                flags = lock_type | fcntl.LOCK_NB if deadline is not None else lock_type
                fcntl.flock(lock_file.fileno(), flags)
                break
            except OSError as exc:  # pragma: no cover - depends on timing
                if exc.errno not in (errno.EACCES, errno.EAGAIN):
                    raise
                if deadline is not None and time.monotonic() >= deadline:
                    raise TimeoutError(f"Timed out waiting for lock on {target_path}") from exc
                time.sleep(LOCK_SLEEP_INTERVAL)

        try:
            yield
        finally:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)
            if exclusive:
                with contextlib.suppress(OSError):
                    lock_path.unlink()


def safe_read_json(file_path: str, default: Optional[Dict] = None, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> Dict[str, Any]:
    """
    Read JSON from file, falling back to a default.

    Args:
        file_path: Path to JSON file
        default: Value to return if the file doesn't exist

    Returns:
        Parsed JSON data or default value

    Raises:
        json.JSONDecodeError: If the file exists but is not valid JSON
    """
    if default is None:
        default = {}

    path_obj = Path(os.path.expanduser(file_path))

    if not path_obj.exists():
        return default

    with _file_lock(path_obj, exclusive=False, timeout=lock_timeout):
        with path_obj.open('r', encoding='utf-8') as handle:
            return json.load(handle)


def safe_write_json(file_path: str, data: Dict[str, Any], indent: int = 2, *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
    """Atomically write JSON to file."""
    content = json.dumps(data, indent=indent, ensure_ascii=False, sort_keys=True)
    atomic_write(file_path, content, lock_timeout=lock_timeout)


def atomic_write(file_path: Union[str, Path], content: Union[str, bytes], *, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
    """
    Atomically write content to file.

    The content goes to a temporary file in the same directory first, which
    then replaces the target, so readers never see a half-written file.

    Args:
        file_path: Path to write to
        content: Text (written as UTF-8) or raw bytes
    """
    path_obj = Path(os.path.expanduser(str(file_path)))

    # Ensure directory exists
    path_obj.parent.mkdir(parents=True, exist_ok=True)

    data = content.encode('utf-8') if isinstance(content, str) else bytes(content)

    tmp_path = None
    try:
        with _file_lock(path_obj, exclusive=True, timeout=lock_timeout):
            with tempfile.NamedTemporaryFile(
                mode='wb',
                dir=str(path_obj.parent),
                prefix='.tmp_',
                delete=False,
            ) as tmp_file:
                tmp_file.write(data)
                tmp_path = Path(tmp_file.name)

            if path_obj.exists():
                shutil.copymode(str(path_obj), str(tmp_path))
            os.replace(str(tmp_path), str(path_obj))
            tmp_path = None
    finally:
        if tmp_path and tmp_path.exists():
            with contextlib.suppress(OSError):
                tmp_path.unlink()


def backup_path_for(file_path: Union[str, Path], backup_dir: Optional[Union[str, Path]] = None) -> Path:
    """Backup location for a file, keyed by its canonical path."""
    canonical = str(Path(file_path).resolve(strict=True))
    key = canonical.replace(os.sep, '%')
    directory = Path(backup_dir) if backup_dir is not None else Path(tempfile.gettempdir())
    return directory / f"{BACKUP_PREFIX}{key}"


def backup_file(file_path: Union[str, Path], backup_dir: Optional[Union[str, Path]] = None) -> Path:
    """
    Copy a file's current on-disk content to its backup location.

    Args:
        file_path: File to back up; must exist
        backup_dir: Directory for backups, the system temp dir by default

    Returns:
        Path of the backup copy
    """
    target = backup_path_for(file_path, backup_dir)
    target.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(str(file_path), str(target))
    return target
