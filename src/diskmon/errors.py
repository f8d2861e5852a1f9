"""Custom exceptions for diskmon.

The scanner itself never raises for filesystem trouble: unreadable directories
and entries are transient and simply skipped. These exceptions cover caller
mistakes made before a scan starts (bad patterns, bad configuration files).
"""


class DiskmonError(RuntimeError):
    """Base class for all diskmon errors."""
    pass


# Configuration Errors
class ConfigError(DiskmonError):
    """Base class for configuration errors."""
    pass


class InvalidFilterError(ConfigError):
    """A name or path filter is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(
            f"Invalid filter pattern '{pattern}': {reason}"
        )


class InvalidConfigFileError(ConfigError):
    """Watch configuration file could not be parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(
            f"Invalid configuration in {path}: {reason}"
        )
