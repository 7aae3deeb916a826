#!/usr/bin/env python3
"""Tests for configuration layering, paths and token lookup."""

import json
from pathlib import Path

import pytest

from norg_task_sync.core.config import env_overrides, load_config, save_config
from norg_task_sync.core.exceptions import AuthenticationError, ConfigurationError
from norg_task_sync.core.models import SyncConfig
from norg_task_sync.core.paths import PathManager, get_path_manager
from norg_task_sync.tasks.auth import load_session


def _write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


class TestLoadConfig:
    """Config file, environment and fallback layers."""

    def test_defaults_without_files(self):
        config = load_config()

        assert config == SyncConfig()
        assert config.section_todos == "TODOs"
        assert config.clear_completed_tasks_older_than_days is None

    def test_values_from_file(self, tmp_path):
        path = _write_json(tmp_path / "cfg.json", {
            "tasklist": "L1",
            "section_todos": "Tasks",
            "section_todos_till_end_of_day": "Today",
            "ignore_filenames": ["index.norg"],
            "clear_completed_tasks_older_than_days": 14,
        })

        config = load_config(str(path))

        assert config.tasklist == "L1"
        assert config.section_todos == "Tasks"
        assert config.section_todos_till_end_of_day == "Today"
        assert config.ignore_filenames == ["index.norg"]
        assert config.clear_completed_tasks_older_than_days == 14

    def test_environment_overrides_file(self, tmp_path):
        path = _write_json(tmp_path / "cfg.json", {"tasklist": "from-file"})
        environ = {
            "NORG_TASK_SYNC_TASKLIST": "from-env",
            "NORG_TASK_SYNC_IGNORE_FILENAMES": "a.norg, b.norg,",
            "NORG_TASK_SYNC_CLEAR_COMPLETED_TASKS_OLDER_THAN_DAYS": "3",
        }

        config = load_config(str(path), environ=environ)

        assert config.tasklist == "from-env"
        assert config.ignore_filenames == ["a.norg", "b.norg"]
        assert config.clear_completed_tasks_older_than_days == 3

    def test_fallback_fills_missing_keys(self, tmp_path):
        _write_json(get_path_manager().config_fallback_path, {"tasklist": "fallback", "section_todos": "Later"})
        path = _write_json(tmp_path / "cfg.json", {"tasklist": "primary"})

        config = load_config(str(path))

        assert config.tasklist == "primary"
        assert config.section_todos == "Later"

    def test_default_path_in_app_home(self, isolated_environment):
        _write_json(isolated_environment / "config.json", {"tasklist": "home"})

        assert load_config().tasklist == "home"

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "cfg.json"
        path.write_text("{not json")

        with pytest.raises(ConfigurationError, match="invalid config file"):
            load_config(str(path))

    def test_non_object(self, tmp_path):
        path = _write_json(tmp_path / "cfg.json", ["tasklist"])

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_config(str(path))

    def test_invalid_days(self, tmp_path):
        path = _write_json(tmp_path / "cfg.json", {"clear_completed_tasks_older_than_days": "soon"})

        with pytest.raises(ConfigurationError, match="invalid config value"):
            load_config(str(path))

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "cfg.json"
        config = SyncConfig(tasklist="L9", ignore_filenames=["x.norg"])

        save_config(config, str(path))

        assert load_config(str(path)) == config

    def test_save_to_default_location(self, isolated_environment):
        save_config(SyncConfig(tasklist="L2"))

        assert json.loads((isolated_environment / "config.json").read_text())["tasklist"] == "L2"

    def test_env_overrides_ignores_unrelated(self):
        assert env_overrides({"HOME": "/root", "NORG_TASK_SYNC_SECTION_TODOS": "Jobs"}) == {
            "section_todos": "Jobs",
        }


class TestPathManager:
    """Directory resolution."""

    def test_home_override(self, isolated_environment):
        manager = PathManager()

        assert manager.config_dir == isolated_environment.resolve()
        assert manager.token_cache_path == isolated_environment.resolve() / "cache" / "tokencache.json"

    def test_xdg_directories(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NORG_TASK_SYNC_HOME")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
        monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "xdg-cache"))

        manager = PathManager()

        assert manager.config_path == tmp_path / "xdg-config" / "norg-task-sync" / "config.json"
        assert manager.token_cache_path == tmp_path / "xdg-cache" / "norg-task-sync" / "tokencache.json"

    def test_home_fallback(self, tmp_path, monkeypatch):
        monkeypatch.delenv("NORG_TASK_SYNC_HOME")
        monkeypatch.setenv("HOME", str(tmp_path))

        manager = PathManager()

        assert manager.config_dir == tmp_path / ".config" / "norg-task-sync"
        assert manager.cache_dir == tmp_path / ".cache" / "norg-task-sync"


class TestLoadSession:
    """Access token lookup."""

    def test_token_from_environment(self):
        session = load_session(environ={"NORG_TASK_SYNC_ACCESS_TOKEN": "abc"})

        assert session.access_token == "abc"
        assert session.auth_headers() == {"Authorization": "Bearer abc"}
        assert "abc" not in repr(session)

    def test_flat_token_cache(self, tmp_path):
        cache = _write_json(tmp_path / "tokens.json", {"access_token": "flat"})

        assert load_session(token_cache=cache, environ={}).access_token == "flat"

    def test_scoped_token_cache(self, tmp_path):
        cache = _write_json(tmp_path / "tokens.json", [
            {"scopes": ["other"], "token": {}},
            {"scopes": ["https://www.googleapis.com/auth/tasks"], "token": {"access_token": "scoped"}},
        ])

        assert load_session(token_cache=cache, environ={}).access_token == "scoped"

    def test_default_cache_location(self, isolated_environment):
        _write_json(isolated_environment / "cache" / "tokencache.json", {"access_token": "cached"})

        assert load_session(environ={}).access_token == "cached"

    def test_missing_token(self, tmp_path):
        with pytest.raises(AuthenticationError, match="no access token found"):
            load_session(token_cache=tmp_path / "absent.json", environ={})

    def test_unreadable_cache(self, tmp_path):
        cache = tmp_path / "tokens.json"
        cache.write_text("{broken")

        with pytest.raises(AuthenticationError, match="could not read token cache"):
            load_session(token_cache=cache, environ={})
