#!/usr/bin/env python3
"""Tests for TasksManager and the wire projections."""

import logging
from datetime import date, datetime, timedelta, timezone

import pytest

from norg_task_sync.core.exceptions import (
    ConfigurationError,
    ContextError,
    NotFoundError,
    TodoWithoutIdError,
)
from norg_task_sync.core.models import SyncConfig, Task
from norg_task_sync.norg.document import NorgDocument
from norg_task_sync.tasks.auth import Session
from norg_task_sync.tasks.gateway import TasksGateway
from norg_task_sync.tasks.tasks import (
    TasksManager,
    create_manager,
    task_from_wire,
    todo_to_wire,
)
from tests.conftest import TASKLIST


class TestWire:
    """Projection between REST resources and models."""

    def test_task_from_wire(self):
        task = task_from_wire({
            "id": "t1",
            "title": "Buy milk",
            "status": "needsAction",
            "updated": "2024-03-05T10:11:12.000Z",
            "due": "2024-03-07T00:00:00.000Z",
        })

        assert task == Task(
            id="t1",
            title="Buy milk",
            completed=False,
            modified_at=datetime(2024, 3, 5, 10, 11, 12, tzinfo=timezone.utc),
            due_at=date(2024, 3, 7),
        )

    @pytest.mark.parametrize("extra", [
        {"status": "completed"},
        {"status": "needsAction", "completed": "2024-03-05T10:11:12.000Z"},
    ])
    def test_completed_from_status_or_timestamp(self, extra):
        data = {"id": "t1", "title": "x", "updated": "2024-03-05T10:11:12.000Z"}
        data.update(extra)

        assert task_from_wire(data).completed

    @pytest.mark.parametrize("missing", ["id", "title", "updated"])
    def test_required_fields(self, missing):
        data = {"id": "t1", "title": "x", "updated": "2024-03-05T10:11:12.000Z"}
        del data[missing]

        with pytest.raises(NotFoundError, match=missing):
            task_from_wire(data)

    def test_bad_timestamp(self):
        with pytest.raises(ValueError):
            task_from_wire({"id": "t1", "title": "x", "updated": "yesterday"})

    def test_todo_to_wire_without_due(self):
        todo = NorgDocument.from_text("  - ( ) Buy milk\n", SyncConfig()).todos[0]

        assert todo_to_wire(todo) == {"title": "Buy milk"}

    def test_todo_to_wire_with_due(self):
        doc = NorgDocument.from_text(
            "* Today\n  - ( ) Buy milk\n",
            SyncConfig(section_todos_till_end_of_day="Today"),
            path="2024-03-05.norg",
        )

        assert todo_to_wire(doc.todos[0]) == {"title": "Buy milk", "due": "2024-03-05T00:00:00.000Z"}


class TestTasksManager:
    """Calls against the fake gateway."""

    def test_list_tasks(self, manager, fake_gateway):
        fake_gateway.add_task(TASKLIST, "A", task_id="a")
        fake_gateway.add_task(TASKLIST, "B", task_id="b", completed=True)

        tasks = manager.list_tasks()

        assert [(t.id, t.completed) for t in tasks] == [("a", False), ("b", True)]

    def test_list_tasklists(self, manager, fake_gateway):
        fake_gateway.add_tasklist("list-2", "Work")

        assert [(tl.id, tl.title) for tl in manager.list_tasklists()] == [
            (TASKLIST, "My Tasks"),
            ("list-2", "Work"),
        ]

    def test_complete_task(self, manager, fake_gateway):
        fake_gateway.add_task(TASKLIST, "A", task_id="a")

        task = manager.complete_task("a")

        assert task.completed
        assert fake_gateway.task(TASKLIST, "a")["status"] == "completed"

    def test_complete_task_twice_warns(self, manager, fake_gateway, caplog):
        fake_gateway.add_task(TASKLIST, "A", task_id="a", completed=True)

        with caplog.at_level(logging.WARNING):
            manager.complete_task("a")

        assert "Task already completed: A" in caplog.text

    def test_complete_missing_task(self, manager):
        with pytest.raises(ContextError, match="setting task done"):
            manager.complete_task("nope")

    def test_create_task(self, manager, fake_gateway):
        todo = NorgDocument.from_text("  - ( ) New one\n", SyncConfig()).todos[0]

        task = manager.create_task(todo)

        assert task.id == "task-1"
        assert task.title == "New one"
        assert not task.completed

    def test_update_task_replaces_title_and_drops_stale_due(self, manager, fake_gateway):
        fake_gateway.add_task(TASKLIST, "Old", task_id="a", due=date(2024, 1, 1))
        todo = NorgDocument.from_text("  - ( ) New %#taskid a%\n", SyncConfig()).todos[0]

        task = manager.update_task(todo)

        assert task.title == "New"
        assert task.due_at is None
        assert "due" not in fake_gateway.task(TASKLIST, "a")

    def test_update_untagged_todo_fails(self, manager):
        todo = NorgDocument.from_text("  - ( ) New\n", SyncConfig()).todos[0]

        with pytest.raises(TodoWithoutIdError):
            manager.update_task(todo)

    def test_clear_completed(self, manager, fake_gateway):
        now = datetime(2024, 6, 1, tzinfo=timezone.utc)
        fake_gateway.add_task(TASKLIST, "old", task_id="old", completed=True,
                              updated=now - timedelta(days=30))
        fake_gateway.add_task(TASKLIST, "new", task_id="new", completed=True,
                              updated=now - timedelta(days=1))
        fake_gateway.add_task(TASKLIST, "open", task_id="open",
                              updated=now - timedelta(days=300))

        keep, deleted = manager.clear_completed(manager.list_tasks(), timedelta(days=7), now=now)

        assert deleted == 1
        assert [t.id for t in keep] == ["new", "open"]
        assert ("delete_task", TASKLIST, "old") in fake_gateway.calls

    def test_context_manager_closes_gateway(self, manager, fake_gateway):
        with manager as entered:
            assert entered is manager

        assert fake_gateway.closed


class TestCreateManager:
    """Building a manager from configuration."""

    def test_requires_tasklist(self):
        with pytest.raises(ConfigurationError, match="no tasklist configured"):
            create_manager(SyncConfig(), session=Session("token"))

    def test_without_tasklist_for_listing(self):
        with create_manager(SyncConfig(), session=Session("token"), require_tasklist=False) as manager:
            assert isinstance(manager.gateway, TasksGateway)

        assert manager.gateway.client.is_closed

    def test_uses_environment_token(self, monkeypatch):
        monkeypatch.setenv("NORG_TASK_SYNC_ACCESS_TOKEN", "env-token")

        manager = create_manager(SyncConfig(tasklist="L1"))

        assert manager.tasklist == "L1"
        assert manager.gateway.client.headers["Authorization"] == "Bearer env-token"
        manager.gateway.close()
