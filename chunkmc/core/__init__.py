"""
Core engine of chunkmc.

- :mod:`~chunkmc.core.provider`: metadata provider contract and local index
- :mod:`~chunkmc.core.resolver`: recursive dependency resolution
- :mod:`~chunkmc.core.graph`: resolution output and DOT export
- :mod:`~chunkmc.core.validator`: static checks over declared dependencies
- :mod:`~chunkmc.core.manifest`: ``.chunk.json`` loading
"""

from __future__ import annotations

from chunkmc.core.graph import DependencyGraph
from chunkmc.core.manifest import ChunkManifest, find_manifest, load_manifest
from chunkmc.core.provider import LocalIndexProvider, ModInfoProvider, load_index
from chunkmc.core.resolver import (
    ResolutionCache,
    ResolutionOptions,
    ResolutionStrategy,
    Resolver,
    check_loader_compatibility,
)
from chunkmc.core.validator import validate_dependencies

__all__ = [
    "ChunkManifest",
    "DependencyGraph",
    "LocalIndexProvider",
    "ModInfoProvider",
    "ResolutionCache",
    "ResolutionOptions",
    "ResolutionStrategy",
    "Resolver",
    "check_loader_compatibility",
    "find_manifest",
    "load_index",
    "load_manifest",
    "validate_dependencies",
]
