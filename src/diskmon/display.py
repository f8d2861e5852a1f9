"""Display logic for scan and watch commands."""

from rich.console import Console
from rich.table import Table

from .models import FileEntry, SnapshotStore
from .monitor import PollResult
from .query import count_entries, filter_files
from .utils import format_timestamp, humanize_age, humanize_size


def display_snapshot(store: SnapshotStore, console: Console, title: str = "Tracked Files") -> None:
    """Display every present file in the store as a table.

    Args:
        store: Scanned snapshot store
        console: Rich console for output
        title: Table title
    """
    files = filter_files(store, lambda f: not f.deleted)
    num_dirs = count_entries(store, lambda e: e.is_dir and not e.deleted)

    table = Table(title=f"\n{title} ({len(files)})")
    table.add_column("Path", style="cyan")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Unchanged For")

    for entry in files:
        table.add_row(
            entry.rpath,
            humanize_size(entry.size),
            format_timestamp(entry.mtime),
            humanize_age(entry.age),
        )

    console.print(table)

    total = sum(f.size for f in files)
    console.print(
        f"[dim]{len(files)} files in {num_dirs} directories, {humanize_size(total)}[/dim]"
    )


def _line(tag: str, style: str, entry: FileEntry) -> str:
    return f"[{style}]\\[{tag}][/{style}] {entry.rpath} [dim]{{size={entry.size}}}[/dim]"


def display_poll_result(result: PollResult, console: Console) -> None:
    """Print one line per drained entry."""
    for entry in result.existing:
        console.print(_line("EXISTING", "dim", entry))
    for entry in result.created:
        console.print(_line("CREATED", "green", entry))
    for entry in result.changed:
        console.print(_line("CHANGED", "yellow", entry))
    for entry in result.deleted:
        console.print(_line("DELETED", "red", entry))
