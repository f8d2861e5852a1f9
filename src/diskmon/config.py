"""Configuration helpers.

Two formats are supported:

* the flat project-info file (``key value...`` per line) that feeds
  ``diskmon.__info__``;
* the YAML watch configuration used by ``diskmon watch --config``.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from .constants import DEFAULT_INTERVAL, DEFAULT_MIN_AGE
from .errors import InvalidConfigFileError
from .models import ScanOptions


def load_project_info(path: Union[str, Path]) -> Dict[str, str]:
    """Load a flat key-value file.

    Each line holds a key followed by whitespace and a value. Keys are
    lowercased; the value keeps every remaining token joined by one space.
    Blank lines, ``#`` comments and lines without a value are skipped.

    Returns:
        Mapping of key to value, empty if the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        return {}

    info: Dict[str, str] = {}
    data = path.read_text(encoding="utf-8")
    for line in data.replace("\r\n", "\n").replace("\r", "\n").split("\n"):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = re.split(r"\s+", line)
        if len(parts) > 1:
            info[parts[0].lower()] = " ".join(parts[1:])
    return info


@dataclass
class WatchConfig:
    """Settings for a polling watch loop."""

    directory: Optional[str] = None
    interval: float = DEFAULT_INTERVAL
    min_age: float = DEFAULT_MIN_AGE
    options: ScanOptions = field(default_factory=ScanOptions)


_OPTION_KEYS: List[str] = list(ScanOptions.model_fields)


def load_watch_config(path: Union[str, Path]) -> WatchConfig:
    """Load watch settings from a YAML file if present.

    Settings may sit at the top level or under a ``watch:`` key.

    Raises:
        InvalidConfigFileError: If the YAML is malformed or a value is invalid.
    """
    path = Path(path)
    if not path.exists():
        return WatchConfig()

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as e:
        raise InvalidConfigFileError(str(path), str(e)) from e

    if not isinstance(data, dict):
        raise InvalidConfigFileError(str(path), "expected a mapping")

    watch = data.get("watch", data)
    if not isinstance(watch, dict):
        raise InvalidConfigFileError(str(path), "'watch' must be a mapping")

    unknown = set(watch) - set(_OPTION_KEYS) - {"directory", "interval", "min_age"}
    if unknown:
        raise InvalidConfigFileError(str(path), f"unknown keys: {', '.join(sorted(unknown))}")

    try:
        options = ScanOptions(**{k: watch[k] for k in _OPTION_KEYS if k in watch})
        interval = float(watch.get("interval", DEFAULT_INTERVAL))
        min_age = float(watch.get("min_age", DEFAULT_MIN_AGE))
    except (ValidationError, TypeError, ValueError) as e:
        raise InvalidConfigFileError(str(path), str(e)) from e

    directory = watch.get("directory")
    return WatchConfig(
        directory=str(directory) if directory is not None else None,
        interval=interval,
        min_age=min_age,
        options=options,
    )
