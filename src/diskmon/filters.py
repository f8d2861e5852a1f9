"""Compiled entry filters for a scan."""

import re
from typing import Optional, Pattern

from .errors import InvalidFilterError
from .ignore import IgnoreSpec
from .models import FilterSignature, ScanOptions


def _compile(pattern: Optional[str]) -> Optional[Pattern[str]]:
    if pattern is None or pattern == "":
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise InvalidFilterError(pattern, str(e)) from e


class ScanFilter:
    """Decides which listed entries take part in a scan.

    Name and path patterns select files; directories are containers and are
    only pruned by ignore patterns. A directory that ends up holding no
    matching file is never recorded.
    """

    def __init__(self, options: ScanOptions):
        self.name_re = _compile(options.name_filter)
        self.path_re = _compile(options.path_filter)
        self.ignore = IgnoreSpec(options.ignore)
        self.signature: FilterSignature = (
            options.name_filter or None,
            options.path_filter or None,
            tuple(options.ignore),
        )

    def accepts_file(self, name: str, path: str, rpath: str) -> bool:
        if self.name_re is not None and not self.name_re.search(name):
            return False
        if self.path_re is not None and not self.path_re.search(path):
            return False
        return not self.ignore.is_ignored(rpath)

    def accepts_dir(self, rpath: str) -> bool:
        return self.ignore.should_traverse(rpath)
