"""Unit tests for chunkmc.core.provider."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from chunkmc.core.provider import LocalIndexProvider, ModInfoProvider, load_index
from chunkmc.exceptions import ManifestError, ModNotFoundError
from chunkmc.models import DependencyType, ModInfo


@pytest.fixture
def provider() -> LocalIndexProvider:
    return LocalIndexProvider(
        [
            ModInfo(id="lithium", version="0.11.0"),
            ModInfo(id="lithium", version="0.12.1"),
            ModInfo(id="lithium", version="0.13.0-beta.1"),
            ModInfo(id="lithium", version="snapshot"),
            ModInfo(id="ferritecore", version="6.0.1"),
        ]
    )


@pytest.mark.unit
class TestLocalIndexProvider:
    """Tests for the in-memory provider."""

    def test_is_a_provider(self, provider: LocalIndexProvider) -> None:
        assert isinstance(provider, ModInfoProvider)

    def test_abstract_contract(self) -> None:
        with pytest.raises(TypeError):
            ModInfoProvider()  # type: ignore[abstract]

    def test_len_and_contains(self, provider: LocalIndexProvider) -> None:
        assert len(provider) == 5
        assert "lithium" in provider
        assert "sodium" not in provider

    def test_get_mod_info(self, provider: LocalIndexProvider) -> None:
        assert provider.get_mod_info("lithium", "0.12.1").version == "0.12.1"

    def test_get_mod_info_unknown_mod(self, provider: LocalIndexProvider) -> None:
        with pytest.raises(ModNotFoundError) as exc_info:
            provider.get_mod_info("sodium", "1.0.0")

        assert exc_info.value.mod_id == "sodium"

    def test_get_mod_info_unknown_version(self, provider: LocalIndexProvider) -> None:
        with pytest.raises(ModNotFoundError) as exc_info:
            provider.get_mod_info("lithium", "9.9.9")

        assert exc_info.value.version == "9.9.9"

    def test_latest_any(self, provider: LocalIndexProvider) -> None:
        """Test "*" returns the highest parseable version, prereleases included."""
        assert provider.get_latest_version("lithium", "*").version == "0.13.0-beta.1"

    def test_latest_with_constraint(self, provider: LocalIndexProvider) -> None:
        assert provider.get_latest_version("lithium", "<0.13.0-beta.1").version == "0.12.1"

    def test_latest_empty_constraint(self, provider: LocalIndexProvider) -> None:
        assert provider.get_latest_version("ferritecore", "").version == "6.0.1"

    def test_latest_nothing_matches(self, provider: LocalIndexProvider) -> None:
        with pytest.raises(ModNotFoundError):
            provider.get_latest_version("lithium", ">=1.0.0")

    def test_all_versions(self, provider: LocalIndexProvider) -> None:
        versions = {info.version for info in provider.get_all_versions("lithium")}

        assert versions == {"0.11.0", "0.12.1", "0.13.0-beta.1", "snapshot"}

    def test_later_entry_replaces_earlier(self) -> None:
        provider = LocalIndexProvider(
            [ModInfo(id="a", version="1", name="old"), ModInfo(id="a", version="1", name="new")]
        )

        assert len(provider) == 1
        assert provider.get_mod_info("a", "1").name == "new"


@pytest.mark.unit
class TestLoadIndex:
    """Tests for load_index."""

    def _write(self, tmp_path: Path, payload: object) -> Path:
        path = tmp_path / "index.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_object_form(self, tmp_path: Path) -> None:
        path = self._write(
            tmp_path,
            {
                "mods": [
                    {
                        "id": "mod-a",
                        "version": "1.0.0",
                        "dependencies": [
                            {"id": "mod-b", "version_constraint": ">=1.0.0", "type": "optional"}
                        ],
                    },
                    {"id": "mod-b", "version": "1.2.0"},
                ]
            },
        )

        provider = load_index(path)

        info = provider.get_mod_info("mod-a", "1.0.0")
        assert info.dependencies[0].type is DependencyType.OPTIONAL
        assert len(provider) == 2

    def test_list_form(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, [{"id": "a", "version": "1"}])

        assert "a" in load_index(path)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ManifestError) as exc_info:
            load_index(tmp_path / "nope.json")

        assert exc_info.value.file_path.endswith("nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "index.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ManifestError, match="Invalid JSON"):
            load_index(path)

    def test_wrong_shape(self, tmp_path: Path) -> None:
        path = self._write(tmp_path, {"mods": {"a": "1"}})

        with pytest.raises(ManifestError, match="must be a list"):
            load_index(path)

    @pytest.mark.parametrize(
        "entry",
        [
            {"version": "1.0.0"},
            {"id": "a", "version": "1", "dependencies": [{"id": "b", "type": "soft"}]},
            {"id": "a", "version": "1", "loader_requirements": [{"loader": "rift"}]},
            "just-a-string",
        ],
        ids=["missing-id", "bad-dependency-type", "bad-loader", "not-an-object"],
    )
    def test_malformed_entry(self, tmp_path: Path, entry: object) -> None:
        path = self._write(tmp_path, {"mods": [entry]})

        with pytest.raises(ManifestError, match="Malformed mod entry #0"):
            load_index(path)
