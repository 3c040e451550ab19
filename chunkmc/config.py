"""Configuration file loader for chunkmc.

Two formats are supported:

- ``chunk.toml``: settings under a ``[chunk]`` table
- ``pyproject.toml``: settings under a ``[tool.chunk]`` table

Discovery order:

1. Explicit path from ``--config`` or ``CHUNK_CONFIG``
2. ``chunk.toml`` in the current directory
3. ``pyproject.toml`` with a ``[tool.chunk]`` table

Precedence: defaults < config file < CLI flags.

Example (``chunk.toml``)::

    [chunk]
    strategy = "minimal"
    include_optional = false
    max_depth = 8
    target_loader = "fabric"
    target_loader_version = "0.15.7"
    minecraft_version = "1.20.1"
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from chunkmc.exceptions import ConfigError
from chunkmc.models import LoaderType
from chunkmc.utils.logger import get_logger
from chunkmc.core.resolver import ResolutionOptions, ResolutionStrategy
from chunkmc.constants import (
    CONFIG_FILE_NAME,
    DEFAULT_INCLUDE_OPTIONAL,
    DEFAULT_MAX_DEPTH,
    DEFAULT_STRATEGY,
)

logger = get_logger("config")

_SECTION = "chunk"
_TYPE_NAMES = {bool: "boolean", int: "integer", str: "string"}


@dataclass
class ChunkConfig:
    """Parsed and validated chunkmc configuration.

    Every field has a default, so an empty file is valid.

    Attributes:
        strategy: ``"latest"`` or ``"minimal"`` version selection.
        include_optional: Resolve optional dependencies.
        max_depth: Recursion limit for resolution, ``0`` for none.
        target_loader: Loader used for compatibility checks, if any.
        target_loader_version: Version of that loader.
        minecraft_version: Target Minecraft version.
        source_path: File the values came from, ``None`` for defaults.
    """

    strategy: str = DEFAULT_STRATEGY
    include_optional: bool = DEFAULT_INCLUDE_OPTIONAL
    max_depth: int = DEFAULT_MAX_DEPTH
    target_loader: Optional[str] = None
    target_loader_version: str = ""
    minecraft_version: str = ""

    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "include_optional": self.include_optional,
            "max_depth": self.max_depth,
            "target_loader": self.target_loader,
            "target_loader_version": self.target_loader_version,
            "minecraft_version": self.minecraft_version,
        }

    def to_resolution_options(self) -> ResolutionOptions:
        """Translate the file-level settings into resolver options."""
        return ResolutionOptions(
            strategy=ResolutionStrategy(self.strategy),
            include_optional=self.include_optional,
            max_depth=self.max_depth,
            target_loader=LoaderType(self.target_loader) if self.target_loader else None,
            target_loader_version=self.target_loader_version,
            minecraft_version=self.minecraft_version,
        )


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Path given on the command line or through
            ``CHUNK_CONFIG``. Must exist when provided.

    Returns:
        Resolved path, or ``None`` when nothing was found.

    Raises:
        ConfigError: *explicit_path* does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    chunk_toml = cwd / CONFIG_FILE_NAME
    if chunk_toml.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, chunk_toml)
        return chunk_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_chunk_section(pyproject_toml):
        logger.debug("Found [tool.chunk] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_chunk_section(path: Path) -> bool:
    # An unrelated, broken pyproject.toml must not stop discovery
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return _SECTION in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> ChunkConfig:
    """Load and validate the chunkmc configuration.

    Args:
        config_path: Explicit file. ``None`` means auto-discovery.

    Returns:
        A validated :class:`ChunkConfig`, defaults when no file is found.

    Raises:
        ConfigError: The file cannot be parsed, has unknown keys, or has
            invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        return ChunkConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get(_SECTION, {})
    else:
        section = raw.get(_SECTION, {})

    if not section:
        logger.debug("Config file has no [%s] table, using defaults", _SECTION)
        return ChunkConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: The file cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _require_type(section: Dict[str, Any], key: str, expected: type, config_path: str) -> Any:
    value = section[key]
    # bool is a subclass of int; "max_depth = true" is still an error
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ConfigError(
            f"{key} must be {'a' if expected is not int else 'an'} "
            f"{_TYPE_NAMES[expected]}, got {type(value).__name__}",
            config_path=config_path,
            option=key,
        )
    return value


def _parse_section(section: Dict[str, Any], *, config_path: str) -> ChunkConfig:
    """Validate the ``[chunk]`` / ``[tool.chunk]`` table.

    Raises:
        ConfigError: Unknown keys, wrong types, or out-of-range values.
    """
    config = ChunkConfig()

    known = set(config.to_log_dict())
    unknown = set(section) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "strategy" in section:
        value = _require_type(section, "strategy", str, config_path).lower()
        valid = [strategy.value for strategy in ResolutionStrategy]
        if value not in valid:
            raise ConfigError(
                f"strategy must be one of {', '.join(valid)}, got {value!r}",
                config_path=config_path,
                option="strategy",
            )
        config.strategy = value

    if "include_optional" in section:
        config.include_optional = _require_type(
            section, "include_optional", bool, config_path
        )

    if "max_depth" in section:
        value = _require_type(section, "max_depth", int, config_path)
        if value < 0:
            raise ConfigError(
                f"max_depth must be >= 0, got {value}",
                config_path=config_path,
                option="max_depth",
            )
        config.max_depth = value

    if "target_loader" in section:
        value = _require_type(section, "target_loader", str, config_path).lower()
        valid = [loader.value for loader in LoaderType]
        if value not in valid:
            raise ConfigError(
                f"target_loader must be one of {', '.join(valid)}, got {value!r}",
                config_path=config_path,
                option="target_loader",
            )
        config.target_loader = value

    for key in ("target_loader_version", "minecraft_version"):
        if key in section:
            setattr(config, key, _require_type(section, key, str, config_path))

    return config
