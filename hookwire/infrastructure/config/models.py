"""
Configuration models and data structures.

This module defines the configuration models used by the CLI and the demo
programs, providing type safety and validation for configuration values.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    json: bool = False
    log_directory: str = "logs"
    max_file_size: str = "10 MB"
    backup_count: int = 5
    console_enabled: bool = True
    file_enabled: bool = False


@dataclass
class LifecycleConfig:
    """Start/stop budgets for lifecycle hooks, in seconds."""
    start_timeout: float = 15.0
    stop_timeout: float = 5.0


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class ApplicationConfig:
    """Main application configuration."""

    name: str = "hookwire"
    version: str = "0.1.0"
    debug: bool = False
    environment: str = "production"

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    lifecycle: LifecycleConfig = field(default_factory=LifecycleConfig)
    server: ServerConfig = field(default_factory=ServerConfig)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """
        Validate the configuration.

        Raises:
            ValueError: If a value has the wrong type or is out of range
        """
        port = self.server.port
        if not isinstance(port, int) or isinstance(port, bool):
            raise ValueError(f"Server port must be an integer, got {port!r}")
        if not (0 <= port <= 65535):
            raise ValueError(f"Server port must be between 0 and 65535, got {port}")

        timeouts = [
            ("Start timeout", self.lifecycle.start_timeout),
            ("Stop timeout", self.lifecycle.stop_timeout),
        ]
        for name, timeout in timeouts:
            if not isinstance(timeout, (int, float)) or isinstance(timeout, bool):
                raise ValueError(f"{name} must be a number, got {timeout!r}")
            if timeout <= 0:
                raise ValueError(f"{name} must be positive, got {timeout}")

        level = self.logging.level
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            raise ValueError(
                f"Log level must be one of {', '.join(LOG_LEVELS)}, got {level!r}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ApplicationConfig':
        """Create configuration from dictionary."""
        try:
            logging_config = LoggingConfig(**data.get('logging', {}))
            lifecycle_config = LifecycleConfig(**data.get('lifecycle', {}))
            server_config = ServerConfig(**data.get('server', {}))
        except TypeError as e:
            raise ValueError(f"Invalid configuration section: {e}") from e

        return cls(
            name=data.get('name', 'hookwire'),
            version=data.get('version', '0.1.0'),
            debug=data.get('debug', False),
            environment=data.get('environment', 'production'),
            logging=logging_config,
            lifecycle=lifecycle_config,
            server=server_config,
        )
