"""Version information."""

VERSION = "0.1.0"
SCHEMA_VERSION = 1
