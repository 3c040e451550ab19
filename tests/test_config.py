from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from chunkmc.config import (
    ChunkConfig,
    _parse_section,
    _pyproject_has_chunk_section,
    _read_toml,
    discover_config_file,
    load_config,
)
from chunkmc.core.resolver import ResolutionStrategy
from chunkmc.exceptions import ConfigError
from chunkmc.models import LoaderType


@pytest.mark.unit
class TestChunkConfig:
    """Tests for ChunkConfig dataclass."""

    def test_default_initialization(self) -> None:
        config = ChunkConfig()

        assert config.strategy == "latest"
        assert config.include_optional is True
        assert config.max_depth == 0
        assert config.target_loader is None
        assert config.target_loader_version == ""
        assert config.minecraft_version == ""
        assert config.source_path is None

    def test_to_log_dict(self) -> None:
        """Test to_log_dict exposes settings but not the source path."""
        config = ChunkConfig(max_depth=4, source_path=Path("/tmp/chunk.toml"))

        data = config.to_log_dict()

        assert data["max_depth"] == 4
        assert "source_path" not in data
        assert set(data) == {
            "strategy",
            "include_optional",
            "max_depth",
            "target_loader",
            "target_loader_version",
            "minecraft_version",
        }

    def test_to_resolution_options_defaults(self) -> None:
        options = ChunkConfig().to_resolution_options()

        assert options.strategy is ResolutionStrategy.LATEST
        assert options.include_optional is True
        assert options.max_depth == 0
        assert options.target_loader is None

    def test_to_resolution_options_custom(self) -> None:
        config = ChunkConfig(
            strategy="minimal",
            include_optional=False,
            max_depth=3,
            target_loader="neoforge",
            target_loader_version="20.4.80",
            minecraft_version="1.20.4",
        )

        options = config.to_resolution_options()

        assert options.strategy is ResolutionStrategy.MINIMAL
        assert options.include_optional is False
        assert options.max_depth == 3
        assert options.target_loader is LoaderType.NEOFORGE
        assert options.target_loader_version == "20.4.80"
        assert options.minecraft_version == "1.20.4"


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[chunk]\n", encoding="utf-8")
        (tmp_path / "chunk.toml").write_text("[chunk]\n", encoding="utf-8")

        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file(config_file)

        assert result == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(tmp_path / "nonexistent.toml")

        assert "not found" in exc_info.value.message
        assert exc_info.value.config_path.endswith("nonexistent.toml")

    def test_discovers_chunk_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "chunk.toml"
        config_file.write_text("[chunk]\n", encoding="utf-8")

        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == config_file

    def test_discovers_pyproject_toml_with_section(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.chunk]\nmax_depth = 2\n", encoding="utf-8")

        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == config_file

    def test_ignores_pyproject_toml_without_section(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.other]\nkey = 'value'\n", encoding="utf-8")

        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() is None

    def test_returns_none_when_no_config_found(self, tmp_path: Path) -> None:
        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() is None

    def test_chunk_toml_before_pyproject(self, tmp_path: Path) -> None:
        chunk_toml = tmp_path / "chunk.toml"
        chunk_toml.write_text("[chunk]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.chunk]\n", encoding="utf-8")

        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() == chunk_toml


@pytest.mark.unit
class TestPyprojectHasChunkSection:
    def test_true_when_section_exists(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool.chunk]\nstrategy = 'minimal'\n", encoding="utf-8")

        assert _pyproject_has_chunk_section(path) is True

    def test_false_when_section_missing(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("[project]\nname = 'x'\n", encoding="utf-8")

        assert _pyproject_has_chunk_section(path) is False

    def test_false_on_broken_file(self, tmp_path: Path) -> None:
        """Test an unparseable pyproject.toml is skipped rather than fatal."""
        path = tmp_path / "pyproject.toml"
        path.write_text("[tool.chunk\n", encoding="utf-8")

        assert _pyproject_has_chunk_section(path) is False


@pytest.mark.unit
class TestReadToml:
    def test_reads_valid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "chunk.toml"
        path.write_text("[chunk]\nmax_depth = 5\n", encoding="utf-8")

        assert _read_toml(path) == {"chunk": {"max_depth": 5}}

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "chunk.toml"
        path.write_text("[chunk\n", encoding="utf-8")

        with pytest.raises(ConfigError, match="Invalid TOML in chunk.toml"):
            _read_toml(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="Cannot read configuration file"):
            _read_toml(tmp_path / "missing.toml")


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section validation."""

    def test_parses_empty_section(self) -> None:
        assert _parse_section({}, config_path="chunk.toml") == ChunkConfig()

    def test_parses_all_options(self) -> None:
        config = _parse_section(
            {
                "strategy": "MINIMAL",
                "include_optional": False,
                "max_depth": 8,
                "target_loader": "Fabric",
                "target_loader_version": "0.15.7",
                "minecraft_version": "1.20.1",
            },
            config_path="chunk.toml",
        )

        assert config.strategy == "minimal"
        assert config.include_optional is False
        assert config.max_depth == 8
        assert config.target_loader == "fabric"
        assert config.target_loader_version == "0.15.7"
        assert config.minecraft_version == "1.20.1"

    def test_unknown_keys(self) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({"strategi": "latest", "depth": 1}, config_path="chunk.toml")

        assert exc_info.value.message == "Unknown configuration keys: depth, strategi"

    @pytest.mark.parametrize(
        "key,value,message",
        [
            ("include_optional", "yes", "include_optional must be a boolean, got str"),
            ("max_depth", "3", "max_depth must be an integer, got str"),
            ("max_depth", True, "max_depth must be an integer, got bool"),
            ("strategy", 1, "strategy must be a string, got int"),
            ("minecraft_version", 1.2, "minecraft_version must be a string, got float"),
        ],
    )
    def test_wrong_types(self, key: str, value: object, message: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({key: value}, config_path="chunk.toml")

        assert exc_info.value.message == message
        assert exc_info.value.option == key

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ConfigError, match="strategy must be one of latest, minimal"):
            _parse_section({"strategy": "newest"}, config_path="chunk.toml")

    def test_unknown_loader(self) -> None:
        with pytest.raises(ConfigError, match="target_loader must be one of"):
            _parse_section({"target_loader": "rift"}, config_path="chunk.toml")

    def test_negative_depth(self) -> None:
        with pytest.raises(ConfigError, match="max_depth must be >= 0"):
            _parse_section({"max_depth": -1}, config_path="chunk.toml")


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config."""

    def test_returns_defaults_when_no_config_found(self, tmp_path: Path) -> None:
        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            config = load_config()

        assert config == ChunkConfig()

    def test_loads_chunk_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "chunk.toml"
        path.write_text("[chunk]\nstrategy = 'minimal'\nmax_depth = 2\n", encoding="utf-8")

        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            config = load_config()

        assert config.strategy == "minimal"
        assert config.max_depth == 2
        assert config.source_path == path

    def test_loads_pyproject_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text(
            "[project]\nname = 'pack'\n\n[tool.chunk]\ntarget_loader = 'quilt'\n",
            encoding="utf-8",
        )

        with patch("chunkmc.config.Path.cwd", return_value=tmp_path):
            config = load_config()

        assert config.target_loader == "quilt"
        assert config.source_path == path

    def test_loads_explicit_config_path(self, tmp_path: Path) -> None:
        path = tmp_path / "settings.toml"
        path.write_text("[chunk]\ninclude_optional = false\n", encoding="utf-8")

        config = load_config(path)

        assert config.include_optional is False
        assert config.source_path == path.resolve()

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "chunk.toml"
        path.write_text("not = [valid\n", encoding="utf-8")

        with pytest.raises(ConfigError):
            load_config(path)

    def test_unknown_keys_in_file(self, tmp_path: Path) -> None:
        path = tmp_path / "chunk.toml"
        path.write_text("[chunk]\ncolour = true\n", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            load_config(path)

        assert exc_info.value.config_path == str(path.resolve())

    def test_empty_chunk_section(self, tmp_path: Path) -> None:
        path = tmp_path / "chunk.toml"
        path.write_text("[chunk]\n", encoding="utf-8")

        config = load_config(path)

        assert config.to_log_dict() == ChunkConfig().to_log_dict()
        assert config.source_path == path.resolve()
