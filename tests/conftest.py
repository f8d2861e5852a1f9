"""Shared test fixtures and utilities."""

import os
from pathlib import Path
import pytest

from diskmon.models import ScanOptions, SnapshotStore


@pytest.fixture
def store():
    """A cold snapshot store."""
    return SnapshotStore()


@pytest.fixture
def test_opts():
    """Options matching the files created by ``make_files``."""
    return ScanOptions(name_filter="test")


@pytest.fixture
def make_files(tmp_path):
    """Factory fixture creating ``<name>.txt`` files in a directory."""
    def _make(names, directory: Path = None, extra: str = ""):
        directory = directory or tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        created = []
        for name in names:
            path = directory / f"{name}.txt"
            path.write_text(f"File: {name}.txt{extra}", encoding="utf-8")
            created.append(path)
        return created
    return _make


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture to write files relative to tmp_path."""
    def _write(path: str, content: str = "test content"):
        file_path = tmp_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path
    return _write


@pytest.fixture
def fail_listing(monkeypatch):
    """Make ``os.listdir`` raise for the given directories."""
    real_listdir = os.listdir

    def _fail(*paths):
        blocked = {os.fspath(p) for p in paths}

        def fake_listdir(path="."):
            if os.fspath(path) in blocked:
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_listdir(path)

        monkeypatch.setattr(os, "listdir", fake_listdir)
    return _fail


@pytest.fixture
def fail_stat(monkeypatch):
    """Make ``os.lstat`` raise for the given paths."""
    real_lstat = os.lstat

    def _fail(*paths):
        blocked = {os.fspath(p) for p in paths}

        def fake_lstat(path, *args, **kwargs):
            if os.fspath(path) in blocked:
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_lstat(path, *args, **kwargs)

        monkeypatch.setattr(os, "lstat", fake_lstat)
    return _fail
