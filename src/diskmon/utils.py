"""Utility functions for diskmon."""

import time
from datetime import datetime


def get_timestamp() -> float:
    """Get current timestamp as Unix epoch."""
    return time.time()


def humanize_size(size: float) -> str:
    """Convert bytes to human-readable format."""
    for unit in ["B", "KB", "MB", "GB"]:
        if size < 1024.:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"


def humanize_age(seconds: float) -> str:
    """Convert an age in seconds to a short human-readable string.

    Examples:
        0.4 -> "just now"
        90 -> "1 minute"
        7300 -> "2 hours"
    """
    if seconds < 1:
        return "just now"
    elif seconds < 60:
        secs = int(seconds)
        return f"{secs} second{'s' if secs != 1 else ''}"
    elif seconds < 3600:  # Less than 1 hour
        minutes = int(seconds / 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    elif seconds < 86400:  # Less than 1 day
        hours = int(seconds / 3600)
        return f"{hours} hour{'s' if hours != 1 else ''}"
    else:
        days = int(seconds / 86400)
        return f"{days} day{'s' if days != 1 else ''}"


def format_timestamp(ts: float) -> str:
    """Format an epoch timestamp for display, local time, second precision."""
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")
