"""Gitignore-style pattern matching for diskmon scans."""

from pathlib import Path
from typing import Iterable, List

from pathspec import PathSpec
from pathspec.patterns import GitWildMatchPattern


class IgnoreSpec:
    """Manages gitignore-style patterns for entry exclusion."""

    def __init__(self, patterns: Iterable[str] = ()):
        """Initialize ignore spec.

        Args:
            patterns: Gitignore-style patterns, matched against root-relative
                POSIX paths
        """
        self.patterns: List[str] = [p for p in patterns if p]
        # Compile patterns once for efficiency
        self.spec = PathSpec.from_lines(GitWildMatchPattern, self.patterns)

    @classmethod
    def from_file(cls, path: Path, extra: Iterable[str] = ()) -> "IgnoreSpec":
        """Load patterns from an ignore file, one per line.

        Blank lines and ``#`` comments are skipped. A missing file contributes
        no patterns.
        """
        patterns = []
        if path.exists():
            for line in path.read_text().splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    patterns.append(line)
        patterns.extend(extra)
        return cls(patterns)

    def __bool__(self) -> bool:
        return bool(self.patterns)

    def is_ignored(self, relpath: str) -> bool:
        """Check if a root-relative POSIX path should be ignored.

        Args:
            relpath: Root-relative path in POSIX format (forward slashes)

        Returns:
            True if the path matches any ignore pattern
        """
        if not self.patterns:
            return False
        return self.spec.match_file(relpath)

    def should_traverse(self, dirpath: str) -> bool:
        """Check if a directory should be traversed during scanning.

        Args:
            dirpath: Root-relative directory path in POSIX format

        Returns:
            True if the directory should be traversed
        """
        if not self.patterns:
            return True

        # Add trailing slash to match directory patterns
        if not dirpath.endswith("/"):
            dirpath = dirpath + "/"

        return not self.spec.match_file(dirpath)
