"""Scan-and-diff engine.

``scan`` lists a directory, compares every file's fingerprint with the record
held in the store, updates the store in place and returns how many transitions
it detected. Filesystem failures are transient: an unreadable directory or
entry is skipped for the pass and never raised.
"""

import logging
import os
import stat
from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .filters import ScanFilter
from .models import (
    AnyEntry,
    DirEntry,
    DirStats,
    FileEntry,
    Fingerprint,
    FilterSignature,
    ScanInfo,
    ScanOptions,
    SnapshotStore,
)
from .utils import get_timestamp


logger = logging.getLogger(__name__)


@dataclass
class _ScanContext:
    """State shared by every level of one scan call."""
    options: ScanOptions
    filter: ScanFilter
    generation: int
    timestamp: float
    first_scan: bool

    @property
    def bootstrap(self) -> bool:
        """New entries are recorded silently."""
        return self.first_scan and not self.options.notify_existing


@dataclass
class _LevelResult:
    """Changes and aggregates collected below one directory."""
    changes: int = 0
    stats: DirStats = field(default_factory=DirStats)


def scan(
    directory: Union[str, os.PathLike],
    store: SnapshotStore,
    options: Optional[ScanOptions] = None,
    rpath: str = "",
    timestamp: Optional[float] = None,
) -> int:
    """Scan a directory for changes.

    Args:
        directory: Directory to scan.
        store: Snapshot of previous scans. Pass the same store every time.
        options: Filters and policies, see ``ScanOptions``.
        rpath: Prefix for the root-relative paths recorded on entries.
        timestamp: Scan time in epoch seconds, defaults to now.

    Returns:
        Number of changes detected. The first scan of a cold store returns 0
        unless ``options.notify_existing`` is set.

    Raises:
        InvalidFilterError: If a name or path filter is not a valid regex.
    """
    options = options or ScanOptions()
    scan_filter = ScanFilter(options)
    if timestamp is None:
        timestamp = get_timestamp()

    info = _begin_scan(store, scan_filter.signature, timestamp)
    ctx = _ScanContext(
        options=options,
        filter=scan_filter,
        generation=info.scan,
        timestamp=timestamp,
        first_scan=info.scan == 1,
    )

    result = _scan_level(os.fspath(directory), rpath.strip("/"), store.entries, ctx)
    if result is None:
        # Root unreadable or gone: an empty listing, so everything tracked is swept
        result = _LevelResult(changes=_sweep(store.entries, ctx))

    logger.debug(
        "Scanned %s: %d changes, %d files (generation %d)",
        directory, result.changes, result.stats.num_files, info.scan,
    )
    return result.changes


def _begin_scan(store: SnapshotStore, signature: FilterSignature, timestamp: float) -> ScanInfo:
    """Refresh the scan-control record and advance the generation."""
    if store.scan_info is not None and store.scan_info.filter_signature != signature:
        logger.debug("Filter changed, discarding %d tracked entries", len(store))
        store.reset()

    if store.scan_info is None:
        store.scan_info = ScanInfo(
            start=timestamp,
            last=timestamp,
            scan=1,
            filter_signature=signature,
        )
    else:
        store.scan_info.last = timestamp
        store.scan_info.scan += 1
    return store.scan_info


def _list_dir(directory: str) -> Optional[list]:
    try:
        return sorted(os.listdir(directory))
    except OSError as e:
        logger.debug("Cannot list %s: %s", directory, e)
        return None


def _scan_level(
    directory: str,
    rpath: str,
    entries: Dict[str, AnyEntry],
    ctx: _ScanContext,
) -> Optional[_LevelResult]:
    """Scan one directory level; None if it could not be listed."""
    names = _list_dir(directory)
    if names is None:
        return None

    result = _LevelResult()
    for name in names:
        full = os.path.join(directory, name)
        child_rpath = f"{rpath}/{name}" if rpath else name

        try:
            st = os.lstat(full)
        except OSError as e:
            logger.debug("Cannot stat %s: %s", full, e)
            continue

        if stat.S_ISDIR(st.st_mode):
            if ctx.options.recursive and ctx.filter.accepts_dir(child_rpath):
                _scan_subdir(name, full, child_rpath, entries, ctx, result)
            continue

        if not ctx.filter.accepts_file(name, full, child_rpath):
            continue

        fp = Fingerprint(size=st.st_size, ctime=st.st_ctime, mtime=st.st_mtime)
        entry = _update_file(name, full, child_rpath, fp, entries, ctx, result)
        if entry is not None:
            result.stats.add_file(entry)

    result.changes += _sweep(entries, ctx)
    return result


def _update_file(
    name: str,
    full: str,
    rpath: str,
    fp: Fingerprint,
    entries: Dict[str, AnyEntry],
    ctx: _ScanContext,
    result: _LevelResult,
) -> Optional[FileEntry]:
    """Diff one observed file against its record."""
    ts = ctx.timestamp
    entry = entries.get(name)

    if entry is None:
        entry = FileEntry(
            name=name,
            path=full,
            rpath=rpath,
            size=fp.size,
            ctime=fp.ctime,
            mtime=fp.mtime,
            last_change=ts,
            age=0.0,
            scan=ctx.generation,
            created=not ctx.first_scan,
            existed=ctx.first_scan,
            notified=ctx.bootstrap,
        )
        entries[name] = entry
        if not ctx.bootstrap:
            result.changes += 1
        return entry

    if not isinstance(entry, FileEntry):
        # A directory record still holds this name; the sweep retires it first
        return None

    if entry.deleted:
        result.changes += 1
        entry.prev = None
        entry.set_fingerprint(fp)
        entry.created = True
        entry.deleted = False
        entry.changed = False
        entry.notified = False
        entry.last_change = ts

    elif entry.fingerprint != fp:
        result.changes += 1
        entry.prev = entry.fingerprint
        entry.set_fingerprint(fp)
        entry.changed = True
        entry.created = False
        entry.notified = False
        entry.last_change = ts

    entry.age = ts - entry.last_change
    entry.scan = ctx.generation
    return entry


def _scan_subdir(
    name: str,
    full: str,
    rpath: str,
    entries: Dict[str, AnyEntry],
    ctx: _ScanContext,
    result: _LevelResult,
) -> None:
    """Recurse into a subdirectory and upsert its record."""
    existing = entries.get(name)
    if existing is not None and not isinstance(existing, DirEntry):
        # A file record still holds this name; the sweep retires it first
        return

    sub = existing.entries if existing is not None else {}
    child = _scan_level(full, rpath, sub, ctx)
    if child is None:
        # Not stamped, so the sweep below marks it deleted
        return

    result.changes += child.changes
    result.stats.merge(child.stats)

    if not sub:
        if existing is not None:
            logger.debug("Dropping empty directory record %s", rpath)
            del entries[name]
        return

    ts = ctx.timestamp
    if existing is None:
        existing = DirEntry(
            name=name,
            path=full,
            rpath=rpath,
            last_change=ts,
            created=not ctx.first_scan,
            existed=ctx.first_scan,
            notified=True,
        )
        existing.entries = sub
        entries[name] = existing
    elif existing.deleted:
        existing.deleted = False
        existing.created = True
        existing.notified = True
        existing.last_change = ts

    existing.stats = child.stats
    existing.scan = ctx.generation
    if child.stats.min_age is not None:
        existing.age = child.stats.min_age
        existing.last_change = ts - child.stats.min_age
    else:
        existing.age = ts - existing.last_change
    result.stats.num_dirs += 1


def _sweep(entries: Dict[str, AnyEntry], ctx: _ScanContext) -> int:
    """Retire every record not stamped by this pass; return transitions."""
    changes = 0
    for name in list(entries):
        entry = entries[name]
        if entry.scan == ctx.generation:
            continue

        if ctx.options.ignore_deleted:
            del entries[name]
            continue

        if entry.deleted:
            entry.age = ctx.timestamp - entry.last_change
            if isinstance(entry, DirEntry):
                # Descendants retired with it keep ageing; nothing is counted again
                _sweep(entry.entries, ctx)
            continue

        changes += 1
        entry.mark_deleted(ctx.timestamp)
        if isinstance(entry, DirEntry):
            # Nothing below a vanished directory was visited
            changes += _sweep(entry.entries, ctx)
    return changes
