"""
Utility helpers for chunkmc.

This package provides reusable utilities used across chunkmc:

- Console output helpers (Rich-based)
- Logging configuration and retrieval

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from chunkmc.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from chunkmc.utils.console import (
    build_dependency_tree,
    colorize_validation_type,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_tree,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "print_info",
    "print_error",
    "print_table",
    "print_tree",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "build_dependency_tree",
    "colorize_validation_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "verbosity_to_level",
]
