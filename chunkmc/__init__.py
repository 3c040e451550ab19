"""
chunkmc: dependency resolution for Minecraft modpacks

chunkmc turns a mod's declared, version-constrained dependencies into a
concrete install tree and reports anything that would make that tree
unsafe to install:

    • Circular dependencies and missing required mods (fatal)
    • Mods resolved at more than one version
    • Mutually incompatible mods
    • Mods that do not support the mod loader in use

The resolver is provider-agnostic: any object implementing
:class:`chunkmc.core.provider.ModInfoProvider` can feed it metadata.
"""

from __future__ import annotations

from chunkmc.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "chunkmc Contributors"
__license__ = "Apache-2.0"
__description__ = "Dependency resolution engine for Minecraft modpacks."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

from chunkmc.core import (  # noqa: E402
    DependencyGraph,
    LocalIndexProvider,
    ModInfoProvider,
    ResolutionOptions,
    ResolutionStrategy,
    Resolver,
    validate_dependencies,
)
from chunkmc.exceptions import ResolutionError  # noqa: E402

__all__ = [
    "__version__",
    "DependencyGraph",
    "LocalIndexProvider",
    "ModInfoProvider",
    "ResolutionError",
    "ResolutionOptions",
    "ResolutionStrategy",
    "Resolver",
    "validate_dependencies",
]
