#!/usr/bin/env python3
"""Tests for expanding folders into Norg files."""

from pathlib import Path

from norg_task_sync.norg.files import get_files_from_folders, is_norg_file


def test_folder_lists_norg_files_sorted(tmp_path):
    for name in ("b.norg", "a.norg", "notes.txt"):
        (tmp_path / name).write_text("")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "c.norg").write_text("")

    files = get_files_from_folders([tmp_path])

    assert [f.name for f in files] == ["a.norg", "b.norg"]


def test_ignored_names_only_apply_to_folders(tmp_path):
    (tmp_path / "index.norg").write_text("")
    (tmp_path / "day.norg").write_text("")

    from_folder = get_files_from_folders([tmp_path], ["index.norg"])
    explicit = get_files_from_folders([tmp_path / "index.norg"], ["index.norg"])

    assert [f.name for f in from_folder] == ["day.norg"]
    assert explicit == [tmp_path / "index.norg"]


def test_explicit_files_keep_order_and_extension(tmp_path):
    files = get_files_from_folders([tmp_path / "z.txt", "a.norg"])

    assert files == [tmp_path / "z.txt", Path("a.norg")]


def test_is_norg_file():
    assert is_norg_file(Path("journal/2024-03-05.norg"))
    assert not is_norg_file(Path("journal/2024-03-05.md"))
    assert not is_norg_file(Path("norg"))
