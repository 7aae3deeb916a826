#!/usr/bin/env python3
"""
Global pytest configuration and fixtures.

This module provides:
- Isolation of config, cache and backup directories per test
- A fake Google Tasks gateway and a manager bound to it
- Helpers for writing Norg files with a chosen modification time
"""

import os
import sys
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from norg_task_sync.core.models import SyncConfig
from norg_task_sync.core.paths import reset_path_manager
from norg_task_sync.tasks.tasks import TasksManager
from tests.e2e.fake_tasks_gateway import FakeTasksGateway

TASKLIST = "list-1"

ENV_VARS = (
    "NORG_TASK_SYNC_TASKLIST",
    "NORG_TASK_SYNC_SECTION_TODOS",
    "NORG_TASK_SYNC_SECTION_TODOS_TILL_END_OF_DAY",
    "NORG_TASK_SYNC_IGNORE_FILENAMES",
    "NORG_TASK_SYNC_CLEAR_COMPLETED_TASKS_OLDER_THAN_DAYS",
    "NORG_TASK_SYNC_ACCESS_TOKEN",
    "XDG_CONFIG_HOME",
    "XDG_CACHE_HOME",
)


def pytest_configure(config):
    """Configure pytest environment."""
    config.addinivalue_line("markers", "e2e: end-to-end sync runs against the fake gateway")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, tmp_path_factory, monkeypatch):
    """Point config, cache and backups at a per-test directory."""
    home = tmp_path / "app-home"
    backups = tmp_path_factory.mktemp("system-tmp")

    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NORG_TASK_SYNC_HOME", str(home))
    monkeypatch.setattr(tempfile, "tempdir", str(backups))

    reset_path_manager()
    yield home
    reset_path_manager()


@pytest.fixture
def config() -> SyncConfig:
    return SyncConfig(tasklist=TASKLIST)


@pytest.fixture
def fake_gateway() -> FakeTasksGateway:
    gateway = FakeTasksGateway()
    gateway.add_tasklist(TASKLIST, "My Tasks")
    return gateway


@pytest.fixture
def manager(fake_gateway) -> TasksManager:
    return TasksManager(fake_gateway, TASKLIST)


@pytest.fixture
def write_norg(tmp_path) -> Callable[..., Path]:
    """Write a Norg file, optionally backdating its modification time."""

    def _write(name: str, content: str, modified_at: Optional[datetime] = None) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content.encode("utf-8"))
        if modified_at is not None:
            stamp = modified_at.timestamp()
            os.utime(path, (stamp, stamp))
        return path

    return _write
