"""
Tests for configuration loading.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterator

import pytest
import yaml

from hookwire.infrastructure.config.loader import ConfigLoader
from hookwire.infrastructure.config.models import ApplicationConfig


class TestConfigLoader:
    """Test cases for ConfigLoader."""

    @pytest.fixture
    def loader(self, monkeypatch: pytest.MonkeyPatch) -> ConfigLoader:
        for name in list(os.environ):
            if name.startswith("HOOKWIRE_"):
                monkeypatch.delenv(name)
        return ConfigLoader()

    @pytest.fixture
    def yaml_config_file(self) -> Iterator[str]:
        config_data = {
            "name": "yaml-app",
            "server": {"host": "127.0.0.1", "port": 9100},
            "lifecycle": {"start_timeout": 3.0, "stop_timeout": 2.0},
            "logging": {"level": "DEBUG"},
        }
        with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
            yaml.safe_dump(config_data, f)
            temp_path = f.name

        yield temp_path

        os.unlink(temp_path)

    @pytest.fixture
    def json_config_file(self) -> Iterator[str]:
        config_data = {"name": "json-app", "server": {"port": 9200}}
        with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
            json.dump(config_data, f)
            temp_path = f.name

        yield temp_path

        os.unlink(temp_path)

    def test_load_defaults(self, loader: ConfigLoader) -> None:
        config = loader.load_config()

        assert isinstance(config, ApplicationConfig)
        assert config.server.port == 8080

    def test_load_yaml(self, loader: ConfigLoader, yaml_config_file: str) -> None:
        config = loader.load_config(yaml_config_file)

        assert config.name == "yaml-app"
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9100
        assert config.lifecycle.start_timeout == 3.0
        assert config.logging.level == "DEBUG"

    def test_load_json(self, loader: ConfigLoader, json_config_file: str) -> None:
        config = loader.load_config(json_config_file)

        assert config.name == "json-app"
        assert config.server.port == 9200

    def test_missing_file(self, loader: ConfigLoader) -> None:
        with pytest.raises(FileNotFoundError):
            loader.load_config("/nonexistent/config.yaml")

    def test_unsupported_extension(self, loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("name = 'x'")

        with pytest.raises(ValueError, match="Unsupported"):
            loader.load_config(str(path))

    def test_invalid_yaml(self, loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("server: [unclosed")

        with pytest.raises(ValueError, match="Invalid YAML"):
            loader.load_config(str(path))

    def test_non_mapping_document(self, loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            loader.load_config(str(path))

    def test_wrongly_typed_value(self, loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("server:\n  port: \"abc\"\n")

        with pytest.raises(ValueError, match="Server port must be an integer"):
            loader.load_config(str(path))

    def test_environment_overrides(self, loader: ConfigLoader, yaml_config_file: str,
                                   monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOOKWIRE_PORT", "9300")
        monkeypatch.setenv("HOOKWIRE_STOP_TIMEOUT", "7.5")
        monkeypatch.setenv("HOOKWIRE_LOG_JSON", "true")

        config = loader.load_config(yaml_config_file)

        assert config.server.port == 9300
        assert config.server.host == "127.0.0.1"
        assert config.lifecycle.stop_timeout == 7.5
        assert config.lifecycle.start_timeout == 3.0
        assert config.logging.json

    def test_invalid_environment_value(self, loader: ConfigLoader,
                                       monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HOOKWIRE_PORT", "not-a-port")

        with pytest.raises(ValueError, match="HOOKWIRE_PORT"):
            loader.load_config()

    def test_save_yaml(self, loader: ConfigLoader, tmp_path: Path) -> None:
        path = tmp_path / "out.yaml"
        config = ApplicationConfig()
        config.server.port = 9400

        loader.save_config(config, str(path))

        saved = yaml.safe_load(path.read_text())
        assert saved["server"]["port"] == 9400
        assert saved["lifecycle"]["stop_timeout"] == 5.0

    def test_save_unsupported_format(self, loader: ConfigLoader, tmp_path: Path) -> None:
        with pytest.raises(ValueError):
            loader.save_config(ApplicationConfig(), str(tmp_path / "out.ini"), "ini")

    def test_merge_configs(self, loader: ConfigLoader) -> None:
        base = {"server": {"host": "a", "port": 1}, "name": "x"}
        override = {"server": {"port": 2}}

        merged = loader._merge_configs(base, override)

        assert merged == {"server": {"host": "a", "port": 2}, "name": "x"}
        assert base["server"]["port"] == 1
