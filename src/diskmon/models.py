"""Core data models for diskmon.

Snapshot Store Layout:
----------------------
A ``SnapshotStore`` is an explicit tree of tagged records. Every level maps an
entry name to either a ``FileEntry`` or a ``DirEntry``; a ``DirEntry`` owns the
mapping of its own children. The scan-control record (``ScanInfo``) lives on the
store itself, never inside the entry mapping, so no file name can collide with
it and no traversal ever returns it.

Deletion detection is mark-and-sweep: each scan bumps ``ScanInfo.scan`` and
stamps every entry it observes with that generation. Entries left with an older
stamp after a directory has been listed are missing from disk.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field


# Name regex, path regex, ignore patterns
FilterSignature = Tuple[Optional[str], Optional[str], Tuple[str, ...]]


def _min(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


def _max(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


# ============= Options =============

class ScanOptions(BaseModel):
    """Options for a single scan call."""

    name_filter: Optional[str] = None  # Regex searched in entry names, e.g. r"\.txt$"
    path_filter: Optional[str] = None  # Regex searched in full paths
    ignore: List[str] = Field(default_factory=list)  # Gitignore-style, matched on rpath
    recursive: bool = False
    ignore_deleted: bool = False  # Purge missing entries instead of flagging them
    notify_existing: bool = False  # Report entries found by the first scan


# ============= Scan Control =============

class ScanInfo(BaseModel):
    """Scan-control record, one per store root."""

    start: float  # Session start time
    last: float  # Timestamp of the most recent scan
    scan: int = 1  # Scan generation, bumped once per scan call
    filter_signature: FilterSignature = (None, None, ())


# ============= Entries =============

class EntryKind(str, Enum):
    """Kind of a tracked entry."""

    FILE = "file"
    DIR = "dir"


class Fingerprint(BaseModel):
    """The (size, ctime, mtime) triple used to detect that a file changed."""

    size: int = 0
    ctime: float = 0.0
    mtime: float = 0.0


class Entry(BaseModel):
    """Fields shared by files and directories."""

    kind: EntryKind
    name: str
    path: str  # Absolute path
    rpath: str  # POSIX path relative to the scan root

    last_change: float = 0.0
    age: float = 0.0
    scan: int = 0  # Generation at which the entry was last observed

    created: bool = False
    deleted: bool = False
    changed: bool = False
    existed: bool = False
    notified: bool = False

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIR

    def mark_deleted(self, timestamp: float) -> None:
        """Transition to deleted, dropping every other status flag."""
        self.deleted = True
        self.created = False
        self.changed = False
        self.existed = False
        self.notified = False
        self.last_change = timestamp
        self.age = 0.0


class FileEntry(Entry):
    """A tracked file and its fingerprint."""

    kind: EntryKind = EntryKind.FILE

    size: int = 0
    ctime: float = 0.0
    mtime: float = 0.0

    # Prior fingerprint, only after a ``changed`` transition
    prev: Optional[Fingerprint] = None

    @property
    def fingerprint(self) -> Fingerprint:
        return Fingerprint(size=self.size, ctime=self.ctime, mtime=self.mtime)

    def set_fingerprint(self, fp: Fingerprint) -> None:
        self.size = fp.size
        self.ctime = fp.ctime
        self.mtime = fp.mtime

    def mark_deleted(self, timestamp: float) -> None:
        super().mark_deleted(timestamp)
        self.prev = None


class DirStats(BaseModel):
    """Statistics aggregated from every file observed below a directory."""

    num_files: int = 0
    num_dirs: int = 0
    size: int = 0
    min_ctime: Optional[float] = None
    max_ctime: Optional[float] = None
    min_mtime: Optional[float] = None
    max_mtime: Optional[float] = None
    min_last_change: Optional[float] = None
    min_age: Optional[float] = None

    def add_file(self, entry: FileEntry) -> None:
        """Fold one observed file into the totals."""
        self.num_files += 1
        self.size += entry.size
        self.min_ctime = _min(self.min_ctime, entry.ctime)
        self.max_ctime = _max(self.max_ctime, entry.ctime)
        self.min_mtime = _min(self.min_mtime, entry.mtime)
        self.max_mtime = _max(self.max_mtime, entry.mtime)
        self.min_last_change = _min(self.min_last_change, entry.last_change)
        self.min_age = _min(self.min_age, entry.age)

    def merge(self, other: "DirStats") -> None:
        """Fold a child directory's totals into these."""
        self.num_files += other.num_files
        self.num_dirs += other.num_dirs
        self.size += other.size
        self.min_ctime = _min(self.min_ctime, other.min_ctime)
        self.max_ctime = _max(self.max_ctime, other.max_ctime)
        self.min_mtime = _min(self.min_mtime, other.min_mtime)
        self.max_mtime = _max(self.max_mtime, other.max_mtime)
        self.min_last_change = _min(self.min_last_change, other.min_last_change)
        self.min_age = _min(self.min_age, other.min_age)


class DirEntry(Entry):
    """A tracked directory owning the records of its children."""

    kind: EntryKind = EntryKind.DIR

    entries: Dict[str, Union[FileEntry, "DirEntry"]] = Field(default_factory=dict)
    stats: DirStats = Field(default_factory=DirStats)


DirEntry.model_rebuild()

AnyEntry = Union[FileEntry, DirEntry]


# ============= Store =============

class SnapshotStore(BaseModel):
    """Caller-owned snapshot of one monitored root.

    Pass the same store to every scan of the same directory. The store is not
    thread-safe; keep one per root and per worker.
    """

    scan_info: Optional[ScanInfo] = None
    entries: Dict[str, AnyEntry] = Field(default_factory=dict)

    @property
    def generation(self) -> int:
        """Current scan generation, 0 before the first scan."""
        return self.scan_info.scan if self.scan_info else 0

    @property
    def is_cold(self) -> bool:
        return self.scan_info is None

    def reset(self) -> None:
        """Forget all history, including the scan-control record."""
        self.scan_info = None
        self.entries.clear()

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, name: str) -> bool:
        return name in self.entries

    def __getitem__(self, name: str) -> AnyEntry:
        return self.entries[name]

    def get(self, name: str) -> Optional[AnyEntry]:
        return self.entries.get(name)

    def find(self, rpath: str) -> Optional[AnyEntry]:
        """Look up an entry by its root-relative POSIX path."""
        level = self.entries
        entry: Optional[AnyEntry] = None
        for part in rpath.strip("/").split("/"):
            if level is None:
                return None
            entry = level.get(part)
            if entry is None:
                return None
            level = entry.entries if isinstance(entry, DirEntry) else None
        return entry

