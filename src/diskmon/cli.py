"""CLI for diskmon."""

import logging
import os
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console

from .config import WatchConfig, load_watch_config
from .constants import DEFAULT_INTERVAL, IGNORE_FILE, WATCH_CONFIG_FILE
from .display import display_poll_result, display_snapshot
from .errors import DiskmonError
from .ignore import IgnoreSpec
from .models import ScanOptions, SnapshotStore
from .monitor import DiskMonitor
from .scanner import scan as scan_directory


app = typer.Typer(help="""\
Polling file-system change detector. Scan a directory tree, keep a snapshot
in memory, and report files created, changed or deleted between polls.""")

console = Console()


def _setup_logging(verbose: bool) -> None:
    if verbose or os.environ.get("DEBUG"):
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )


def _require_directory(directory: Optional[str]) -> Path:
    """Return the directory to scan or exit with an error.

    Raises:
        typer.Exit: If no directory was given or it is not a directory
    """
    if not directory:
        console.print("[red]✗[/red] No directory given (pass DIRECTORY or set it in --config)")
        raise typer.Exit(1)
    path = Path(directory)
    if not path.is_dir():
        console.print(f"[red]✗[/red] Not a directory: {directory}")
        raise typer.Exit(1)
    return path


def _build_options(
    directory: Path,
    base: ScanOptions,
    name_filter: Optional[str],
    path_filter: Optional[str],
    ignore: Optional[List[str]],
    recursive: bool,
    notify_existing: bool = False,
    ignore_deleted: bool = False,
) -> ScanOptions:
    """Merge command-line flags over configured options."""
    patterns = list(base.ignore) + list(ignore or [])
    ignore_file = directory / IGNORE_FILE
    if ignore_file.exists():
        patterns = IgnoreSpec.from_file(ignore_file, extra=patterns).patterns

    return ScanOptions(
        name_filter=name_filter if name_filter is not None else base.name_filter,
        path_filter=path_filter if path_filter is not None else base.path_filter,
        ignore=patterns,
        recursive=recursive or base.recursive,
        notify_existing=notify_existing or base.notify_existing,
        ignore_deleted=ignore_deleted or base.ignore_deleted,
    )


@app.command()
def scan(
    directory: str = typer.Argument(..., help="Directory to scan"),
    name_filter: Optional[str] = typer.Option(None, "--filter", "-f", help="Regex searched in file names"),
    path_filter: Optional[str] = typer.Option(None, "--path-filter", "-p", help="Regex searched in full paths"),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", "-i", help="Gitignore-style pattern (repeatable)"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Descend into subdirectories"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Scan a directory once and list the files it holds.

    Examples:
        diskmon scan /var/spool/inbox
        diskmon scan . -r --filter '\\.py$' --ignore '.venv/'
    """
    _setup_logging(verbose)
    root = _require_directory(directory)

    try:
        options = _build_options(root, ScanOptions(), name_filter, path_filter, ignore, recursive)
        store = SnapshotStore()
        scan_directory(root, store, options)
    except DiskmonError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    display_snapshot(store, console, title=f"Files in {root}")


@app.command()
def watch(
    directory: Optional[str] = typer.Argument(None, help="Directory to watch"),
    interval: Optional[float] = typer.Option(None, "--interval", "-n", help=f"Seconds between polls (default: {DEFAULT_INTERVAL})"),
    min_age: Optional[float] = typer.Option(None, "--min-age", help="Only report changes at least this many seconds old"),
    name_filter: Optional[str] = typer.Option(None, "--filter", "-f", help="Regex searched in file names"),
    path_filter: Optional[str] = typer.Option(None, "--path-filter", "-p", help="Regex searched in full paths"),
    ignore: Optional[List[str]] = typer.Option(None, "--ignore", "-i", help="Gitignore-style pattern (repeatable)"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="Descend into subdirectories"),
    notify_existing: bool = typer.Option(False, "--notify-existing", help="Report files found by the first scan"),
    ignore_deleted: bool = typer.Option(False, "--ignore-deleted", help="Forget deleted files without reporting them"),
    max_ticks: Optional[int] = typer.Option(None, "--max-ticks", help="Stop after this many polls"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help=f"YAML watch configuration (default: ./{WATCH_CONFIG_FILE} if present)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Poll a directory and print every created, changed or deleted file.

    Examples:
        diskmon watch /tmp --filter '\\.txt$'
        diskmon watch --config diskmon.yaml
        diskmon watch data -r --min-age 5 --max-ticks 60
    """
    _setup_logging(verbose)

    if config is None and Path(WATCH_CONFIG_FILE).exists():
        config = Path(WATCH_CONFIG_FILE)

    try:
        cfg = load_watch_config(config) if config else WatchConfig()
    except DiskmonError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)

    root = _require_directory(directory or cfg.directory)

    try:
        options = _build_options(
            root, cfg.options, name_filter, path_filter, ignore, recursive,
            notify_existing=notify_existing, ignore_deleted=ignore_deleted,
        )
        monitor = DiskMonitor(
            root,
            options,
            min_age=min_age if min_age is not None else cfg.min_age,
        )
        poll_interval = interval if interval is not None else cfg.interval

        console.print(f"[dim]Watching {root} every {poll_interval:g}s (Ctrl+C to stop)[/dim]")
        for result in monitor.watch(poll_interval, max_ticks=max_ticks):
            display_poll_result(result, console)
    except DiskmonError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped[/dim]")


@app.command()
def info():
    """Show package information."""
    from . import __info__

    if not __info__:
        console.print("[yellow]⚠[/yellow] No project information available")
        return
    for key, value in __info__.items():
        console.print(f"[bold]{key}:[/bold] {value}")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
