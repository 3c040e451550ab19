"""
Console output utilities for chunkmc using Rich.

This module provides user-facing output helpers for CLI commands.
For diagnostic or debug output, use :mod:`chunkmc.utils.logger`.

Guidelines:
- print_* functions: user-facing status messages
- print_table / print_tree: structured CLI output
- Logging should never go through this module
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Dict, List, Optional

from rich.tree import Tree
from rich.table import Table
from rich.theme import Theme
from rich.console import Console
from rich.markup import escape

from chunkmc.models import DependencyType, ResolvedDependency, ValidationType

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

CHUNK_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "optional": "bright_black",
        "embedded": "blue",
    }
)

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=CHUNK_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
    return _console


def reconfigure_console() -> None:
    """Drop the cached console so the next call picks up a new environment."""
    global _console
    with _console_lock:
        _console = None


def get_raw_console() -> Console:
    """Return the underlying Rich Console instance."""
    return _get_console()


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    _get_console().print(f"{escape(prefix)} {escape(message)}", style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _get_console().print(f"{escape(prefix)} {escape(message)}", style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _get_console().print(f"{escape(prefix)} {escape(message)}", style="warning")


def print_info(message: str) -> None:
    _get_console().print(escape(message), style="info")


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
) -> None:
    """Render a list of row dictionaries as a Rich table.

    Args:
        data: Rows to render. Nothing is printed for an empty list.
        headers: Column order. Defaults to the keys of the first row.
        title: Optional table title.
        column_styles: Per-column ``style`` / ``justify`` / ``no_wrap``.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, show_header=True, header_style="bold")
    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "left"),
            no_wrap=config.get("no_wrap", False),
            overflow="fold",
        )

    for row in data:
        table.add_row(*(str(row.get(h, "")) for h in headers))

    _get_console().print(table)


def build_dependency_tree(root: ResolvedDependency) -> Tree:
    """Convert a resolved dependency tree into a Rich :class:`Tree`.

    Optional nodes are dimmed and embedded nodes are tagged, mirroring
    the colors used by the DOT export.
    """
    tree = Tree(_node_label(root))
    _attach_children(tree, root)
    return tree


def _attach_children(branch: Tree, node: ResolvedDependency) -> None:
    for child in node.dependencies:
        _attach_children(branch.add(_node_label(child)), child)


def _node_label(node: ResolvedDependency) -> str:
    label = f"{escape(node.id)} [dim]{escape(node.version)}[/dim]"
    if node.type is DependencyType.EMBEDDED:
        return f"[embedded]{label} (embedded)[/embedded]"
    if node.is_optional:
        return f"[optional]{label} (optional)[/optional]"
    return label


def print_tree(root: ResolvedDependency) -> None:
    _get_console().print(build_dependency_tree(root))


def colorize_validation_type(validation_type: ValidationType) -> str:
    """Return a Rich-markup label for a validation finding category."""
    label = validation_type.value.upper()
    color = "yellow" if validation_type is ValidationType.WARNING else "red"
    return f"[{color}]{label}[/{color}]"
