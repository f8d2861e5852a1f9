"""Polling monitor that pairs one snapshot store with one directory."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Union

from .models import FileEntry, ScanOptions, SnapshotStore
from .query import count_files, get_changed
from .scanner import scan
from .utils import get_timestamp, humanize_size


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PollResult:
    """Outcome of one scan+drain tick."""

    changes: int = 0  # Transitions counted by the scan
    timestamp: float = 0.0

    created: List[FileEntry] = field(default_factory=list)
    changed: List[FileEntry] = field(default_factory=list)
    deleted: List[FileEntry] = field(default_factory=list)
    existing: List[FileEntry] = field(default_factory=list)  # Reported by notify_existing

    @property
    def entries(self) -> List[FileEntry]:
        return self.existing + self.created + self.changed + self.deleted

    @property
    def has_changes(self) -> bool:
        return bool(self.created or self.changed or self.deleted or self.existing)

    def summary(self) -> str:
        """Get human-readable summary."""
        if not self.has_changes:
            return "No changes"
        parts = []
        if self.existing:
            parts.append(f"{len(self.existing)} existing")
        if self.created:
            size = sum(f.size for f in self.created)
            parts.append(f"+ {len(self.created)} created ({humanize_size(size)})")
        if self.changed:
            parts.append(f"~ {len(self.changed)} changed")
        if self.deleted:
            parts.append(f"- {len(self.deleted)} deleted")
        return ", ".join(parts)


class DiskMonitor:
    """
    Watches one directory by polling.

    Keeps the snapshot store across ticks so every ``poll`` reports only what
    happened since the previous one. Not thread-safe: use one monitor per
    thread.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        options: Optional[ScanOptions] = None,
        min_age: float = 0,
    ):
        self.directory = Path(directory)
        self.options = options or ScanOptions()
        self.min_age = min_age
        self.store = SnapshotStore()

    @property
    def tracked_files(self) -> int:
        """Number of files currently present on disk."""
        return count_files(self.store, lambda f: not f.deleted)

    def poll(self, timestamp: Optional[float] = None) -> PollResult:
        """Scan once and drain the notifications that are old enough."""
        if timestamp is None:
            timestamp = get_timestamp()

        result = PollResult(timestamp=timestamp)
        result.changes = scan(self.directory, self.store, self.options, timestamp=timestamp)
        logger.debug("Poll of %s: %d changes", self.directory, result.changes)

        # Entries held back by min_age stay pending until a later tick
        if result.changes == 0 and self.min_age == 0:
            return result

        for entry in get_changed(self.store, self.min_age):
            if entry.deleted:
                result.deleted.append(entry)
            elif entry.changed:
                result.changed.append(entry)
            elif entry.created:
                result.created.append(entry)
            else:
                result.existing.append(entry)
        return result

    def watch(
        self,
        interval: float = 1.0,
        max_ticks: Optional[int] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Iterator[PollResult]:
        """Poll every ``interval`` seconds, yielding ticks that found changes.

        The first poll runs immediately. ``max_ticks`` bounds the number of
        polls; None polls forever.
        """
        ticks = 0
        while max_ticks is None or ticks < max_ticks:
            if ticks:
                sleep(interval)
            ticks += 1
            result = self.poll()
            if result.has_changes:
                yield result
