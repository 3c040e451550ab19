"""Loading of ``.chunk.json`` modpack manifests.

A manifest describes one modpack directory::

    {
      "name": "my-pack",
      "mc_version": "1.20.1",
      "loader": "fabric",
      "dependencies": [
        {"id": "sodium", "version_constraint": ">=0.5.0", "type": "required"},
        {"id": "optifine", "type": "incompatible"}
      ]
    }

Only ``dependencies`` matters to validation; the other fields are shown
to the user.
"""

from __future__ import annotations

import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union

from chunkmc.constants import MANIFEST_FILE_NAME
from chunkmc.exceptions import ManifestError
from chunkmc.models import Dependency, LoaderType
from chunkmc.utils.logger import get_logger

logger = get_logger("manifest")

__all__ = ["ChunkManifest", "find_manifest", "load_manifest"]


@dataclass
class ChunkManifest:
    """Parsed contents of a ``.chunk.json`` file."""

    name: str = ""
    mc_version: str = ""
    loader: str = ""
    dependencies: List[Dependency] = field(default_factory=list)
    path: Optional[Path] = None

    @property
    def loader_type(self) -> Optional[LoaderType]:
        """The declared loader as an enum, or ``None`` if absent or unknown."""
        try:
            return LoaderType(self.loader.lower())
        except ValueError:
            return None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChunkManifest":
        """Build a manifest from decoded JSON.

        Raises:
            KeyError, TypeError, ValueError: A dependency entry is malformed.
        """
        return cls(
            name=str(data.get("name") or ""),
            mc_version=str(data.get("mc_version") or ""),
            loader=str(data.get("loader") or ""),
            dependencies=[
                Dependency.from_dict(entry) for entry in data.get("dependencies") or ()
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "mc_version": self.mc_version,
            "loader": self.loader,
            "dependencies": [dep.to_dict() for dep in self.dependencies],
        }


def find_manifest(directory: Union[str, Path]) -> Optional[Path]:
    """Return the manifest path inside *directory*, or ``None`` if there is none."""
    candidate = Path(directory) / MANIFEST_FILE_NAME
    return candidate if candidate.is_file() else None


def load_manifest(path: Union[str, Path]) -> ChunkManifest:
    """Read and parse a manifest file.

    Raises:
        ManifestError: The file is unreadable, is not a JSON object, or
            lists a malformed dependency.
    """
    path = Path(path)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ManifestError(
            f"Cannot read manifest {path}",
            file_path=str(path),
            original_error=exc,
        ) from exc
    except json.JSONDecodeError as exc:
        raise ManifestError(
            f"Invalid JSON in {path.name}",
            file_path=str(path),
            original_error=exc,
        ) from exc

    if not isinstance(raw, dict):
        raise ManifestError(
            f"{path.name} must contain a JSON object",
            file_path=str(path),
        )

    try:
        manifest = ChunkManifest.from_dict(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise ManifestError(
            f"Malformed dependency in {path.name}",
            file_path=str(path),
            original_error=exc,
        ) from exc

    manifest.path = path
    logger.debug("Loaded manifest %s with %d dependencies", path, len(manifest.dependencies))
    return manifest
