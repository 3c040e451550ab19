"""
Dependency data models for chunkmc.

This module defines the declared side of resolution (what a mod *asks*
for: :class:`Dependency`, :class:`LoaderRequirement`, :class:`ModInfo`)
and the resolved side (what was *chosen*: :class:`ResolvedDependency`).

The ``from_dict`` / ``to_dict`` helpers read and write the JSON shape
used by metadata index files and ``.chunk.json`` manifests.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping, Tuple

from chunkmc.constants import WILDCARD


class DependencyType(Enum):
    """Relationship between a mod and one of its declared dependencies."""

    REQUIRED = "required"
    OPTIONAL = "optional"
    INCOMPATIBLE = "incompatible"
    EMBEDDED = "embedded"


class LoaderType(Enum):
    """Mod-loading frameworks a mod can target."""

    FORGE = "forge"
    FABRIC = "fabric"
    NEOFORGE = "neoforge"
    SPONGE = "sponge"
    QUILT = "quilt"


@dataclass(frozen=True)
class Dependency:
    """A declared, version-constrained dependency.

    Args:
        id: Identifier of the depended-on mod.
        version_constraint: Constraint expression, e.g. ``">=1.2.0 <2.0.0"``.
            Empty means any version.
        type: Kind of relationship.
    """

    id: str
    version_constraint: str = ""
    type: DependencyType = DependencyType.REQUIRED

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Dependency":
        """Build a dependency from its JSON form.

        ``type`` defaults to ``"required"``.

        Raises:
            KeyError: ``id`` is missing.
            ValueError: ``type`` is not a known dependency type.
        """
        return cls(
            id=str(data["id"]),
            version_constraint=str(data.get("version_constraint") or ""),
            type=DependencyType(data.get("type") or DependencyType.REQUIRED.value),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        result: Dict[str, Any] = {"id": self.id, "type": self.type.value}
        if self.version_constraint:
            result["version_constraint"] = self.version_constraint
        return result

    def __str__(self) -> str:
        constraint = self.version_constraint or WILDCARD
        return f"{self.id} {constraint} ({self.type.value})"


@dataclass(frozen=True)
class LoaderRequirement:
    """A mod loader a mod supports, with an optional loader version range."""

    loader: LoaderType
    version_constraint: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LoaderRequirement":
        return cls(
            loader=LoaderType(data["loader"]),
            version_constraint=str(data.get("version_constraint") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"loader": self.loader.value}
        if self.version_constraint:
            result["version_constraint"] = self.version_constraint
        return result


@dataclass(frozen=True)
class ModInfo:
    """Metadata for one version of one mod, as supplied by a provider.

    Attributes:
        id: Unique mod identifier (slug).
        version: Version string of this release.
        name: Display name.
        dependencies: Declared dependencies of this release.
        download_url: Where the release can be downloaded.
        loader_requirements: Loaders (and loader versions) this release runs on.
        minecraft_version: Minecraft version this release targets.
    """

    id: str
    version: str
    name: str = ""
    dependencies: Tuple[Dependency, ...] = ()
    download_url: str = ""
    loader_requirements: Tuple[LoaderRequirement, ...] = ()
    minecraft_version: str = ""

    @property
    def key(self) -> str:
        """Identity used for cycle detection and memoization: ``id@version``."""
        return f"{self.id}@{self.version}"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ModInfo":
        """Build a :class:`ModInfo` from its JSON form.

        Raises:
            KeyError: ``id`` or ``version`` is missing.
            ValueError: A dependency or loader type is unknown.
        """
        return cls(
            id=str(data["id"]),
            version=str(data["version"]),
            name=str(data.get("name") or ""),
            dependencies=tuple(
                Dependency.from_dict(dep) for dep in data.get("dependencies") or ()
            ),
            download_url=str(data.get("download_url") or ""),
            loader_requirements=tuple(
                LoaderRequirement.from_dict(req)
                for req in data.get("loader_requirements") or ()
            ),
            minecraft_version=str(data.get("minecraft_version") or ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
            "download_url": self.download_url,
            "loader_requirements": [
                req.to_dict() for req in self.loader_requirements
            ],
            "minecraft_version": self.minecraft_version,
        }


@dataclass
class ResolvedDependency:
    """A node of the resolved install tree.

    Each node owns its ``dependencies`` list; the list is only appended
    to while the resolver is building the node.

    Attributes:
        id: Mod identifier.
        version: Chosen version (for embedded mods, the declared constraint).
        download_url: Download location of the chosen version.
        type: How the parent depends on this node.
        dependencies: Resolved children.
        is_optional: True when reached through an optional dependency.
    """

    id: str
    version: str
    download_url: str = ""
    type: DependencyType = DependencyType.REQUIRED
    dependencies: List["ResolvedDependency"] = field(default_factory=list)
    is_optional: bool = False

    @property
    def key(self) -> str:
        return f"{self.id}@{self.version}"

    def walk(self) -> List["ResolvedDependency"]:
        """Return this node and all descendants in pre-order."""
        nodes: List[ResolvedDependency] = []
        stack: List[ResolvedDependency] = [self]
        while stack:
            node = stack.pop()
            nodes.append(node)
            stack.extend(reversed(node.dependencies))
        return nodes

    def clone(self) -> "ResolvedDependency":
        """Return a copy of this subtree that shares no nodes with it."""
        root = replace(self, dependencies=[])
        stack: List[Tuple[ResolvedDependency, ResolvedDependency]] = [(self, root)]
        while stack:
            source, target = stack.pop()
            for child in source.dependencies:
                copied = replace(child, dependencies=[])
                target.dependencies.append(copied)
                stack.append((child, copied))
        return root

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "id": self.id,
            "version": self.version,
            "type": self.type.value,
        }
        if self.download_url:
            result["download_url"] = self.download_url
        if self.dependencies:
            result["dependencies"] = [child.to_dict() for child in self.dependencies]
        if self.is_optional:
            result["is_optional"] = True
        return result

    def __str__(self) -> str:
        return self.key
