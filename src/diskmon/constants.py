"""Constants for diskmon."""

# Project information file shipped inside the package
PROJECT_INFO_FILE = "PROJECT.txt"

# Watch configuration file looked up by the CLI
WATCH_CONFIG_FILE = "diskmon.yaml"

# Ignore file read by the CLI when present in the watched directory
IGNORE_FILE = ".diskmonignore"

# Polling defaults
DEFAULT_INTERVAL = 1.0
DEFAULT_MIN_AGE = 0.0
