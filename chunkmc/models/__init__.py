"""
Unified data model exports for chunkmc.

This module re-exports all core data models to provide a stable and
convenient public API. Users can import models directly from
``chunkmc.models`` instead of individual submodules.

Example:
    >>> from chunkmc.models import Dependency, DependencyType, parse_version
"""

from __future__ import annotations

from chunkmc.models.version import (
    Constraint,
    Operator,
    Version,
    VersionConstraints,
    compare,
    is_compatible,
    parse_constraint,
    parse_version,
    parse_version_constraints,
)
from chunkmc.models.dependency import (
    Dependency,
    DependencyType,
    LoaderRequirement,
    LoaderType,
    ModInfo,
    ResolvedDependency,
)
from chunkmc.models.conflict import (
    IncompatiblePair,
    LoaderConflict,
    ValidationResult,
    ValidationType,
    VersionConflict,
)

__all__ = [
    # Versions and constraints
    "Version",
    "Operator",
    "Constraint",
    "VersionConstraints",
    "compare",
    "is_compatible",
    "parse_version",
    "parse_constraint",
    "parse_version_constraints",
    # Dependencies
    "Dependency",
    "DependencyType",
    "LoaderRequirement",
    "LoaderType",
    "ModInfo",
    "ResolvedDependency",
    # Problem reports
    "VersionConflict",
    "IncompatiblePair",
    "LoaderConflict",
    "ValidationType",
    "ValidationResult",
]
