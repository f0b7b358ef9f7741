"""Tests for the YAML configuration loader."""

from pathlib import Path

import pytest

from flightcore.core.config import ConfigError, ConfigLoader
from flightcore.core.resource_path import get_config_path, get_project_root


class TestConfigLoader:
    """Test ConfigLoader access and persistence."""

    def test_dot_notation_get(self) -> None:
        """Nested values are reachable with dotted keys."""
        config = ConfigLoader({"engine": {"idle_rpm": 800, "failures": {"interval": 30}}})

        assert config.get("engine.idle_rpm") == 800
        assert config.get("engine.failures.interval") == 30
        assert config.get("engine.max_rpm") is None
        assert config.get("engine.max_rpm", 2700) == 2700

    def test_get_through_non_mapping_returns_default(self) -> None:
        """A dotted path through a scalar yields the default."""
        config = ConfigLoader({"engine": 5})
        assert config.get("engine.idle_rpm", "missing") == "missing"

    def test_set_creates_sections(self) -> None:
        """set() creates intermediate sections."""
        config = ConfigLoader()
        config.set("weather.preset", "calm")
        assert config.to_dict() == {"weather": {"preset": "calm"}}

    def test_get_section(self) -> None:
        """get_section returns mappings and rejects scalars or gaps."""
        config = ConfigLoader({"aircraft": {"trainer": {}}, "name": "x"})

        assert config.get_section("aircraft") == {"trainer": {}}
        with pytest.raises(ConfigError, match="not found"):
            config.get_section("weather")
        with pytest.raises(ConfigError, match="not a section"):
            config.get_section("name")

    def test_merge_is_deep(self) -> None:
        """Merging keeps untouched nested keys."""
        base = ConfigLoader({"engine": {"idle_rpm": 800, "max_rpm": 2700}})
        base.merge(ConfigLoader({"engine": {"max_rpm": 3000}}))

        assert base.get("engine.idle_rpm") == 800
        assert base.get("engine.max_rpm") == 3000

    def test_save_and_load(self, tmp_path: Path) -> None:
        """A saved configuration loads back unchanged."""
        path = tmp_path / "nested" / "engine.yaml"
        ConfigLoader({"engine": {"idle_rpm": 750}}).save(path)

        assert ConfigLoader.load(path).get("engine.idle_rpm") == 750

    def test_load_empty_file(self, tmp_path: Path) -> None:
        """An empty file is an empty configuration."""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert ConfigLoader.load(path).to_dict() == {}


class TestConfigErrors:
    """ConfigLoader error reporting."""

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            ConfigLoader.load(tmp_path / "nope.yaml")

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """YAML errors are wrapped and chained."""
        path = tmp_path / "bad.yaml"
        path.write_text("aircraft: [unclosed\n")

        with pytest.raises(ConfigError, match="Failed to load") as exc_info:
            ConfigLoader.load(path)
        assert exc_info.value.__cause__ is not None

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ConfigError, match="must be a mapping"):
            ConfigLoader.load(path)


class TestResourcePath:
    """Shipped configuration files are found from the source tree."""

    def test_config_dir(self) -> None:
        assert get_config_path() == get_project_root() / "config"

    def test_shipped_configs_exist(self) -> None:
        """The aircraft catalog and logging config ship in config/."""
        assert get_config_path("aircraft.yaml").is_file()
        assert get_config_path("logging.yaml").is_file()
