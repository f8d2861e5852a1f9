"""Queries over a snapshot store.

Every traversal is depth-first, pre-order and follows the store's insertion
order. Only ``get_changed`` mutates the store: it marks what it returns as
notified and forgets deleted entries once they have been reported.

Do not run these while a scan of the same store is in progress.
"""

from typing import Callable, Dict, Iterator, List, Optional, Union

from .models import AnyEntry, DirEntry, FileEntry, SnapshotStore


Predicate = Callable[[AnyEntry], bool]
Source = Union[SnapshotStore, DirEntry]


def _entries_of(source: Source) -> Dict[str, AnyEntry]:
    return source.entries


def iter_entries(source: Source) -> Iterator[AnyEntry]:
    """Yield files and directories, each directory before its children."""
    yield from _iter(_entries_of(source))


def _iter(entries: Dict[str, AnyEntry]) -> Iterator[AnyEntry]:
    for entry in list(entries.values()):
        yield entry
        if isinstance(entry, DirEntry):
            yield from _iter(entry.entries)


def iter_files(source: Source) -> Iterator[FileEntry]:
    for entry in iter_entries(source):
        if isinstance(entry, FileEntry):
            yield entry


def get_changed(source: Source, min_age: float = 0) -> List[FileEntry]:
    """Drain pending change notifications.

    Returns every file not yet notified whose last change is at least
    ``min_age`` seconds old, and marks it notified. Returned entries that are
    deleted are removed from the store, so calling this twice without a scan
    in between returns each entry at most once.
    """
    ret: List[FileEntry] = []
    _drain(_entries_of(source), min_age, ret)
    return ret


def _drain(entries: Dict[str, AnyEntry], min_age: float, ret: List[FileEntry]) -> None:
    for name in list(entries):
        entry = entries[name]
        if isinstance(entry, DirEntry):
            _drain(entry.entries, min_age, ret)
            # A vanished directory goes once nothing below it is pending
            if entry.deleted and not entry.entries:
                del entries[name]
        elif not entry.notified and entry.age >= min_age:
            entry.notified = True
            ret.append(entry)
            if entry.deleted:
                del entries[name]


def filter_by_age(source: Source, min_age: float) -> List[FileEntry]:
    """Return files that have not changed for at least ``min_age`` seconds.

    Notification state is left alone and nothing is removed.
    """
    return [f for f in iter_files(source) if f.age >= min_age]


def filter_files(source: Source, predicate: Optional[Predicate] = None) -> List[FileEntry]:
    """Return files, optionally only those matching ``predicate``."""
    return [f for f in iter_files(source) if predicate is None or predicate(f)]


def count_files(source: Source, predicate: Optional[Predicate] = None) -> int:
    return sum(1 for f in iter_files(source) if predicate is None or predicate(f))


def filter_entries(source: Source, predicate: Optional[Predicate] = None) -> List[AnyEntry]:
    """Return files and directories, optionally only those matching ``predicate``."""
    return [e for e in iter_entries(source) if predicate is None or predicate(e)]


def count_entries(source: Source, predicate: Optional[Predicate] = None) -> int:
    return sum(1 for e in iter_entries(source) if predicate is None or predicate(e))
