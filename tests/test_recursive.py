"""Tests for recursive scans, directory records and aggregated statistics."""

import shutil
import pytest

from diskmon.models import DirEntry, ScanOptions
from diskmon.query import filter_by_age, get_changed
from diskmon.scanner import scan

from tests.fixtures.clock import T0
from tests.fixtures.sample_tree import SAMPLE_FILES, create_sample_tree


@pytest.fixture
def tree(tmp_path):
    """Create the sample tree in tmp_path."""
    return create_sample_tree(tmp_path)


@pytest.fixture
def recursive():
    return ScanOptions(recursive=True)


class TestRecursiveLayout:
    """Shape of the store after a recursive scan."""

    def test_path_filter_reports_relative_paths(self, tmp_path, tree, store):
        """A path filter matches the full path and rpath joins the levels."""
        scan(tmp_path, store, ScanOptions(path_filter="dir1", recursive=True))

        files = filter_by_age(store, 0)
        assert len(files) == 3
        for entry in files:
            assert entry.is_file
            assert entry.rpath == f"dir1/{entry.name}"
            assert entry.path == str(tree[entry.rpath])

        assert "dir2" not in store
        assert "top.txt" not in store

    def test_tree_structure(self, tmp_path, tree, store, recursive):
        """Directories own their children, in listing order."""
        assert scan(tmp_path, store, recursive) == 0

        assert list(store.entries) == ["dir1", "dir2", "top.txt"]
        dir2 = store["dir2"]
        assert isinstance(dir2, DirEntry)
        assert dir2.is_dir and not dir2.is_file
        assert list(dir2.entries) == ["nested", "test1.txt", "test2.txt", "test3.txt"]
        assert dir2.existed

        deep = store.find("dir2/nested/deep.log")
        assert deep is not None
        assert deep.rpath == "dir2/nested/deep.log"
        assert store.find("dir2/missing.txt") is None
        assert store.find("top.txt/child") is None

    def test_dir_stats(self, tmp_path, tree, store, recursive):
        """Directory records aggregate their descendants."""
        scan(tmp_path, store, recursive)

        dir1 = store["dir1"]
        assert dir1.stats.num_files == 3
        assert dir1.stats.num_dirs == 0
        assert dir1.stats.size == sum(len(SAMPLE_FILES[f"dir1/test{i}.txt"]) for i in (1, 2, 3))

        mtimes = [e.mtime for e in dir1.entries.values()]
        ctimes = [e.ctime for e in dir1.entries.values()]
        assert dir1.stats.min_mtime == min(mtimes)
        assert dir1.stats.max_mtime == max(mtimes)
        assert dir1.stats.min_ctime == min(ctimes)
        assert dir1.stats.max_ctime == max(ctimes)

        dir2 = store["dir2"]
        assert dir2.stats.num_files == 4
        assert dir2.stats.num_dirs == 1
        assert dir2.stats.size == sum(
            len(content) for rel, content in SAMPLE_FILES.items() if rel.startswith("dir2/")
        )

    def test_dir_age_follows_youngest_file(self, tmp_path, tree, store, recursive):
        """A directory's age is that of its most recently changed file."""
        scan(tmp_path, store, recursive, timestamp=T0)
        scan(tmp_path, store, recursive, timestamp=T0 + 4)
        assert store["dir1"].age == 4
        assert store["dir1"].stats.min_age == 4

        tree["dir1/test2.txt"].write_text("rewritten with more bytes")
        scan(tmp_path, store, recursive, timestamp=T0 + 6)

        dir1 = store["dir1"]
        assert dir1.age == 0
        assert dir1.last_change == T0 + 6
        assert dir1.stats.min_age == 0
        assert dir1.stats.min_last_change == T0

    def test_non_recursive_ignores_tree(self, tmp_path, tree, store):
        scan(tmp_path, store)
        assert list(store.entries) == ["top.txt"]


class TestRecursiveTransitions:
    """Changes below the root."""

    def test_new_subdirectory(self, tmp_path, tree, store, recursive):
        """Files in a new directory count; the directory itself does not."""
        scan(tmp_path, store, recursive)

        (tmp_path / "dir3").mkdir()
        (tmp_path / "dir3" / "new.txt").write_text("new")
        assert scan(tmp_path, store, recursive) == 1

        assert store["dir3"].created
        changed = get_changed(store)
        assert [e.rpath for e in changed] == ["dir3/new.txt"]
        assert changed[0].created

    def test_empty_subdirectory_not_recorded(self, tmp_path, tree, store, recursive):
        scan(tmp_path, store, recursive)
        (tmp_path / "empty").mkdir()

        assert scan(tmp_path, store, recursive) == 0
        assert "empty" not in store

    def test_removed_directory_reports_files(self, tmp_path, tree, store, recursive):
        """Removing a directory marks it and everything below it deleted."""
        scan(tmp_path, store, recursive)

        shutil.rmtree(tmp_path / "dir1")
        assert scan(tmp_path, store, recursive) == 4
        assert store["dir1"].deleted

        changed = get_changed(store)
        assert sorted(e.rpath for e in changed) == ["dir1/test1.txt", "dir1/test2.txt", "dir1/test3.txt"]
        assert all(e.deleted for e in changed)
        assert "dir1" not in store

        assert scan(tmp_path, store, recursive) == 0

    def test_removed_directory_honours_min_age(self, tmp_path, tree, store, recursive):
        """Files under a vanished directory keep ageing until they are old enough."""
        scan(tmp_path, store, recursive, timestamp=T0)

        shutil.rmtree(tmp_path / "dir1")
        assert scan(tmp_path, store, recursive, timestamp=T0 + 1) == 4
        assert get_changed(store, min_age=5) == []

        assert scan(tmp_path, store, recursive, timestamp=T0 + 10) == 0
        assert store.find("dir1/test1.txt").age == 9

        changed = get_changed(store, min_age=5)
        assert sorted(e.rpath for e in changed) == ["dir1/test1.txt", "dir1/test2.txt", "dir1/test3.txt"]
        assert "dir1" not in store

    def test_emptied_directory_is_dropped(self, tmp_path, tree, store, recursive):
        """A directory whose tracked files are all gone is forgotten quietly."""
        scan(tmp_path, store, recursive)

        for i in (1, 2, 3):
            tree[f"dir1/test{i}.txt"].unlink()
        assert scan(tmp_path, store, recursive) == 3
        assert not store["dir1"].deleted

        assert len(get_changed(store)) == 3
        assert store["dir1"].entries == {}

        assert scan(tmp_path, store, recursive) == 0
        assert "dir1" not in store

    def test_min_age_applies_below_root(self, tmp_path, tree, store, recursive):
        """Notifications in subdirectories honour min_age."""
        scan(tmp_path, store, recursive, timestamp=T0)

        (tmp_path / "dir1" / "test4.txt").write_text("late arrival")
        scan(tmp_path, store, recursive, timestamp=T0 + 1)
        scan(tmp_path, store, recursive, timestamp=T0 + 2)
        assert get_changed(store, min_age=5) == []

        scan(tmp_path, store, recursive, timestamp=T0 + 7)
        changed = get_changed(store, min_age=5)
        assert [e.rpath for e in changed] == ["dir1/test4.txt"]

    def test_ignore_deleted_purges_directory(self, tmp_path, tree, store):
        opts = ScanOptions(recursive=True, ignore_deleted=True)
        scan(tmp_path, store, opts)

        shutil.rmtree(tmp_path / "dir2")
        assert scan(tmp_path, store, opts) == 0
        assert "dir2" not in store
        assert get_changed(store) == []

    def test_file_replaced_by_directory(self, tmp_path, store, recursive):
        """A name that changes kind is retired before the new kind is recorded."""
        (tmp_path / "thing").write_text("file")
        scan(tmp_path, store, recursive)

        (tmp_path / "thing").unlink()
        (tmp_path / "thing").mkdir()
        (tmp_path / "thing" / "a.txt").write_text("a")

        assert scan(tmp_path, store, recursive) == 1
        changed = get_changed(store)
        assert [(e.rpath, e.deleted) for e in changed] == [("thing", True)]

        assert scan(tmp_path, store, recursive) == 1
        assert store["thing"].is_dir
        assert store.find("thing/a.txt").created


class TestRecursiveFailures:
    """Unreadable subdirectories."""

    def test_unreadable_subdirectory(self, tmp_path, tree, store, recursive, fail_listing, monkeypatch):
        """A subdirectory that cannot be listed reads as removed until readable."""
        scan(tmp_path, store, recursive)

        fail_listing(tmp_path / "dir1")
        assert scan(tmp_path, store, recursive) == 4
        assert store["dir1"].deleted
        assert all(e.deleted for e in store["dir1"].entries.values())

        monkeypatch.undo()
        assert scan(tmp_path, store, recursive) == 3
        dir1 = store["dir1"]
        assert not dir1.deleted
        assert dir1.created
        assert all(e.created and not e.deleted for e in dir1.entries.values())


class TestIgnorePatterns:
    """Gitignore-style pruning during recursive scans."""

    def test_ignored_directory_not_traversed(self, tmp_path, tree, store):
        scan(tmp_path, store, ScanOptions(recursive=True, ignore=["dir2/"]))

        assert "dir2" not in store
        assert "dir1" in store

    def test_ignored_files(self, tmp_path, tree, store):
        scan(tmp_path, store, ScanOptions(recursive=True, ignore=["*.log"]))

        assert "nested" not in store["dir2"].entries
        assert store.find("dir1/test1.txt") is not None

    def test_ignore_change_resets_store(self, tmp_path, tree, store, recursive):
        scan(tmp_path, store, recursive)
        scan(tmp_path, store, recursive)

        scan(tmp_path, store, ScanOptions(recursive=True, ignore=["*.log"]))
        assert store.generation == 1
