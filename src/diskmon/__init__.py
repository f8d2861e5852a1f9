"""diskmon: stat-based polling file-system change detector."""

from pathlib import Path

from .config import load_project_info
from .constants import PROJECT_INFO_FILE
from .errors import ConfigError, DiskmonError, InvalidFilterError
from .models import (
    DirEntry,
    DirStats,
    EntryKind,
    FileEntry,
    Fingerprint,
    ScanInfo,
    ScanOptions,
    SnapshotStore,
)
from .monitor import DiskMonitor, PollResult
from .query import (
    count_entries,
    count_files,
    filter_by_age,
    filter_entries,
    filter_files,
    get_changed,
)
from .scanner import scan


__info__ = load_project_info(Path(__file__).parent / PROJECT_INFO_FILE)
__version__ = __info__.get("version", "0.0.0")


__all__ = [
    "ConfigError",
    "DirEntry",
    "DirStats",
    "DiskMonitor",
    "DiskmonError",
    "EntryKind",
    "FileEntry",
    "Fingerprint",
    "InvalidFilterError",
    "PollResult",
    "ScanInfo",
    "ScanOptions",
    "SnapshotStore",
    "count_entries",
    "count_files",
    "filter_by_age",
    "filter_entries",
    "filter_files",
    "get_changed",
    "load_project_info",
    "scan",
]
