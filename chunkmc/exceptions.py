"""
Custom exception hierarchy for chunkmc.

This module defines structured exception types used across chunkmc.
All exceptions inherit from :class:`ChunkError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Resolution failures are represented by a single :class:`ResolutionError`
type whose ``error_type`` is one member of the closed
:class:`ResolutionErrorType` enumeration, so callers can branch on the
category without string matching.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, MutableMapping, Optional


class ChunkError(Exception):
    """Base exception for all chunkmc errors.

    All chunkmc-specific exceptions should inherit from this class.
    It supports structured metadata via ``details`` for richer error
    reporting and debugging.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


class ResolutionErrorType(Enum):
    """Categories of resolver-originated failures."""

    CIRCULAR_DEPENDENCY = "circular_dependency"
    VERSION_CONFLICT = "version_conflict"
    NOT_FOUND = "not_found"
    INCOMPATIBLE = "incompatible"
    INVALID_CONSTRAINT = "invalid_constraint"
    LOADER_MISMATCH = "loader_mismatch"


class ResolutionError(ChunkError):
    """Raised when dependency resolution (or version parsing) fails.

    Args:
        error_type: Failure category.
        message: Human-readable error message.
        details: Optional structured metadata (mod id, constraint, cause).
    """

    __slots__ = ("error_type",)

    def __init__(
        self,
        error_type: ResolutionErrorType,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.error_type = error_type

    def __str__(self) -> str:
        return f"{self.error_type.value}: {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"error_type={self.error_type}, message={self.message!r}, "
            f"details={dict(self.details)!r})"
        )


class ModNotFoundError(ChunkError):
    """Raised by metadata providers for an unknown mod or version.

    Args:
        message: Error description.
        mod_id: Identifier that was looked up.
        version: Requested version, if any.
    """

    __slots__ = ("mod_id", "version")

    def __init__(
        self,
        message: str,
        *,
        mod_id: Optional[str] = None,
        version: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "mod", mod_id)
        _add_if(details, "version", version)

        super().__init__(message, details)

        self.mod_id = mod_id
        self.version = version


class ConfigError(ChunkError):
    """Raised when a configuration file cannot be loaded or is invalid.

    Args:
        message: Error description.
        config_path: Path to the offending configuration file.
        option: Name of the invalid option, if applicable.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class ManifestError(ChunkError):
    """Raised when a manifest or metadata index file cannot be parsed.

    Args:
        message: Error description.
        file_path: Path to the file being parsed.
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "file", file_path)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.original_error = original_error
