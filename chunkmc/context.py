"""
Shared context object for chunkmc CLI commands.

The top-level group fills one :class:`ChunkContext` per invocation and
subcommands receive it through :data:`pass_context`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from chunkmc.config import ChunkConfig


class ChunkContext:
    """Global context object for chunkmc CLI commands.

    Attributes:
        config_path: Configuration file in use, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration; defaults until the group callback runs.
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: ChunkConfig = ChunkConfig()


#: Click decorator for injecting :class:`ChunkContext` into commands.
pass_context = click.make_pass_decorator(ChunkContext, ensure=True)
