"""
Problem report models for chunkmc.

These are the *non-fatal* findings of a resolution or validation pass.
They never abort anything on their own; callers inspect them and decide
whether to warn, ask, or refuse to install.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, List

from chunkmc.models.dependency import LoaderType


@dataclass(frozen=True)
class VersionConflict:
    """One mod resolved to incompatible versions by different requirers.

    Args:
        mod_id: The mod with conflicting requirements.
        required_by: Mods that declared a dependency on it.
        constraints: Constraints those mods declared, in the same order.
    """

    mod_id: str
    required_by: List[str] = field(default_factory=list)
    constraints: List[str] = field(default_factory=list)

    def to_display_string(self) -> str:
        """Return a human-readable description of the conflict."""
        return (
            f"Version conflict for {self.mod_id}: required by "
            f"{', '.join(self.required_by)} with constraints "
            f"{', '.join(self.constraints)}"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mod_id": self.mod_id,
            "required_by": list(self.required_by),
            "constraints": list(self.constraints),
        }

    def __str__(self) -> str:
        return self.to_display_string()


@dataclass(frozen=True)
class IncompatiblePair:
    """Two mods that must not be installed together."""

    mod_a: str
    mod_b: str
    reason: str = ""

    def to_display_string(self) -> str:
        return f"Incompatible mods: {self.mod_a} and {self.mod_b} - {self.reason}"

    def to_dict(self) -> Dict[str, Any]:
        return {"mod_a": self.mod_a, "mod_b": self.mod_b, "reason": self.reason}

    def __str__(self) -> str:
        return self.to_display_string()


@dataclass(frozen=True)
class LoaderConflict:
    """A mod that does not support the loader (or loader version) in use.

    Args:
        mod_id: Mod declaring the loader requirement.
        required_loader: Loader the mod asks for.
        target_loader: Loader being installed.
        required_version: Loader version constraint declared by the mod.
        target_version: Version of the loader being installed.
        reason: Explanation suitable for display.
    """

    mod_id: str
    required_loader: LoaderType
    target_loader: LoaderType
    required_version: str = ""
    target_version: str = ""
    reason: str = ""

    def to_display_string(self) -> str:
        return f"Loader conflict for {self.mod_id}: {self.reason}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mod_id": self.mod_id,
            "required_loader": self.required_loader.value,
            "required_version": self.required_version,
            "target_loader": self.target_loader.value,
            "target_version": self.target_version,
            "reason": self.reason,
        }

    def __str__(self) -> str:
        return self.to_display_string()


class ValidationType(Enum):
    """Category of a static validation finding."""

    CONFLICT = "conflict"
    INCOMPATIBLE = "incompatible"
    MISSING = "missing"
    WARNING = "warning"

    @property
    def is_error(self) -> bool:
        return self is not ValidationType.WARNING


@dataclass(frozen=True)
class ValidationResult:
    """A single finding of :func:`chunkmc.core.validator.validate_dependencies`."""

    type: ValidationType
    mod_id: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "mod_id": self.mod_id,
            "message": self.message,
        }

    def __str__(self) -> str:
        return f"{self.type.value.upper()}: {self.mod_id}: {self.message}"
