"""
Tests for configuration models.
"""

import pytest

from hookwire.infrastructure.config.models import (
    ApplicationConfig,
    LifecycleConfig,
    LoggingConfig,
    ServerConfig,
)


class TestApplicationConfig:
    """Test cases for ApplicationConfig."""

    def test_defaults(self) -> None:
        config = ApplicationConfig()

        assert config.name == "hookwire"
        assert config.server.port == 8080
        assert config.lifecycle.start_timeout == 15.0
        assert config.lifecycle.stop_timeout == 5.0
        assert config.logging.level == "INFO"
        assert not config.logging.json

    def test_invalid_port(self) -> None:
        with pytest.raises(ValueError, match="port"):
            ApplicationConfig(server=ServerConfig(port=70000))

    def test_port_zero_allowed(self) -> None:
        assert ApplicationConfig(server=ServerConfig(port=0)).server.port == 0

    def test_invalid_timeout(self) -> None:
        with pytest.raises(ValueError, match="Stop timeout"):
            ApplicationConfig(lifecycle=LifecycleConfig(stop_timeout=0))

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValueError, match="Log level"):
            ApplicationConfig(logging=LoggingConfig(level="VERBOSE"))

    def test_validate_after_mutation(self) -> None:
        config = ApplicationConfig()
        config.server.port = -1

        with pytest.raises(ValueError):
            config.validate()

    def test_from_dict(self) -> None:
        config = ApplicationConfig.from_dict({
            "name": "echo",
            "server": {"host": "127.0.0.1", "port": 9000},
            "lifecycle": {"start_timeout": 2.0},
            "logging": {"level": "DEBUG", "json": True},
        })

        assert config.name == "echo"
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9000
        assert config.lifecycle.start_timeout == 2.0
        assert config.lifecycle.stop_timeout == 5.0
        assert config.logging.json

    def test_from_dict_unknown_field(self) -> None:
        with pytest.raises(ValueError, match="Invalid configuration section"):
            ApplicationConfig.from_dict({"server": {"hostname": "x"}})

    def test_from_dict_string_port(self) -> None:
        with pytest.raises(ValueError, match="Server port must be an integer"):
            ApplicationConfig.from_dict({"server": {"port": "abc"}})

    def test_from_dict_string_timeout(self) -> None:
        with pytest.raises(ValueError, match="Start timeout must be a number"):
            ApplicationConfig.from_dict({"lifecycle": {"start_timeout": "soon"}})

    def test_from_dict_non_string_log_level(self) -> None:
        with pytest.raises(ValueError, match="Log level"):
            ApplicationConfig.from_dict({"logging": {"level": 10}})

    def test_to_dict(self) -> None:
        data = ApplicationConfig().to_dict()

        assert data["server"] == {"host": "0.0.0.0", "port": 8080}
        assert data["lifecycle"] == {"start_timeout": 15.0, "stop_timeout": 5.0}
