"""Metadata provider contract and a local, file-backed implementation.

The resolver never talks to the network. Everything it knows about mods
comes through a :class:`ModInfoProvider`, which concrete integrations
(Modrinth, CurseForge, a recipe bench, ...) implement. Providers are
called synchronously from inside the resolution recursion and must be
safe to call from several threads at once when a single resolver is
shared; retries, timeouts and caching are their own business.

:class:`LocalIndexProvider` serves metadata from memory. It backs the
CLI's ``resolve`` command (loaded from a JSON index file) and the test
suite.

Index file format::

    {
      "mods": [
        {"id": "mod-a", "version": "1.0.0",
         "dependencies": [{"id": "mod-b", "version_constraint": ">=1.0.0"}]},
        {"id": "mod-b", "version": "1.2.0"}
      ]
    }
"""

from __future__ import annotations

import json
from pathlib import Path
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Tuple

from chunkmc.constants import WILDCARD
from chunkmc.models import ModInfo, Version, parse_version, parse_version_constraints
from chunkmc.exceptions import ManifestError, ModNotFoundError, ResolutionError
from chunkmc.utils.logger import get_logger

logger = get_logger("provider")

# Public API
__all__ = ["ModInfoProvider", "LocalIndexProvider", "load_index"]


class ModInfoProvider(ABC):
    """Source of mod metadata queried by the resolver.

    Implementations signal an unknown mod or version by raising; the
    resolver treats any exception as "not found" for that branch.
    """

    @abstractmethod
    def get_mod_info(self, mod_id: str, version: str) -> ModInfo:
        """Return metadata for one exact release."""

    @abstractmethod
    def get_latest_version(self, mod_id: str, constraint: str) -> ModInfo:
        """Return the newest release matching *constraint* (``"*"`` for any)."""

    @abstractmethod
    def get_all_versions(self, mod_id: str) -> List[ModInfo]:
        """Return every known release of *mod_id*, in no particular order."""


class LocalIndexProvider(ModInfoProvider):
    """In-memory provider keyed by mod id and version.

    The table is built once in ``__init__`` and only read afterwards, so
    concurrent lookups need no locking.

    Args:
        mods: Releases to serve. A later entry with the same
            ``id@version`` replaces an earlier one.
    """

    def __init__(self, mods: Iterable[ModInfo] = ()) -> None:
        self._mods: Dict[str, Dict[str, ModInfo]] = {}
        for info in mods:
            self._mods.setdefault(info.id, {})[info.version] = info

    def __len__(self) -> int:
        return sum(len(versions) for versions in self._mods.values())

    def __contains__(self, mod_id: object) -> bool:
        return mod_id in self._mods

    def _versions_of(self, mod_id: str) -> Dict[str, ModInfo]:
        versions = self._mods.get(mod_id)
        if not versions:
            raise ModNotFoundError(f"mod not found: {mod_id}", mod_id=mod_id)
        return versions

    def get_mod_info(self, mod_id: str, version: str) -> ModInfo:
        info = self._versions_of(mod_id).get(version)
        if info is None:
            raise ModNotFoundError(
                f"version not found: {mod_id}@{version}",
                mod_id=mod_id,
                version=version,
            )
        return info

    def get_latest_version(self, mod_id: str, constraint: str) -> ModInfo:
        versions = self._versions_of(mod_id)
        constraints = parse_version_constraints(constraint or WILDCARD)

        best: Optional[Tuple[Version, ModInfo]] = None
        for raw, info in versions.items():
            try:
                parsed = parse_version(raw)
            except ResolutionError:
                logger.debug("Skipping unparseable version %s@%s", mod_id, raw)
                continue
            if not constraints.matches(parsed):
                continue
            if best is None or parsed > best[0]:
                best = (parsed, info)

        if best is None:
            raise ModNotFoundError(
                f"no version of {mod_id} matches constraint {constraint or WILDCARD}",
                mod_id=mod_id,
            )
        return best[1]

    def get_all_versions(self, mod_id: str) -> List[ModInfo]:
        return list(self._versions_of(mod_id).values())


def load_index(path: Path) -> LocalIndexProvider:
    """Load a JSON metadata index file into a :class:`LocalIndexProvider`.

    Raises:
        ManifestError: The file cannot be read, is not valid JSON, or
            contains a malformed mod entry.
    """
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(
            f"Cannot read metadata index {path}",
            file_path=str(path),
            original_error=exc,
        ) from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(
            f"Invalid JSON in metadata index {path.name}",
            file_path=str(path),
            original_error=exc,
        ) from exc

    entries = raw.get("mods") if isinstance(raw, dict) else raw
    if not isinstance(entries, list):
        raise ManifestError(
            "Metadata index must be a list of mods or an object with a 'mods' list",
            file_path=str(path),
        )

    mods: List[ModInfo] = []
    for position, entry in enumerate(entries):
        try:
            mods.append(ModInfo.from_dict(entry))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise ManifestError(
                f"Malformed mod entry #{position} in {path.name}",
                file_path=str(path),
                original_error=exc,
            ) from exc

    logger.debug("Loaded %d releases from %s", len(mods), path)
    return LocalIndexProvider(mods)
