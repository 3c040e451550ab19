"""
Centralized constants for chunkmc.

This module defines immutable configuration values used across chunkmc,
including file names, defaults for resolution, graph export styling, and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, Mapping

# ---------------------------------------------------------------------------
# File names
# ---------------------------------------------------------------------------

#: Per-directory modpack manifest consumed by ``chunkmc check``.
MANIFEST_FILE_NAME: Final[str] = ".chunk.json"

#: Dedicated configuration file name.
CONFIG_FILE_NAME: Final[str] = "chunk.toml"

#: Environment variable holding an explicit configuration path.
CONFIG_ENV_VAR: Final[str] = "CHUNK_CONFIG"

# ---------------------------------------------------------------------------
# Resolution defaults
# ---------------------------------------------------------------------------

#: Default version selection strategy.
DEFAULT_STRATEGY: Final[str] = "latest"

#: Whether optional dependencies are resolved by default.
DEFAULT_INCLUDE_OPTIONAL: Final[bool] = True

#: Default recursion limit (0 = unlimited).
DEFAULT_MAX_DEPTH: Final[int] = 0

#: Constraint string that matches any version.
WILDCARD: Final[str] = "*"

# ---------------------------------------------------------------------------
# Graph export
# ---------------------------------------------------------------------------

#: Node outline colors keyed by node kind.
GRAPH_NODE_COLORS: Final[Mapping[str, str]] = {
    "normal": "black",
    "optional": "gray",
    "embedded": "blue",
}

#: Fill color used for conflict nodes.
GRAPH_CONFLICT_FILL: Final[str] = "#ffcccc"

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
