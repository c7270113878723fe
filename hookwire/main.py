"""
Main entry point for the hookwire demo programs.

This module provides the command-line interface: each command loads the
configuration, sets up logging, builds an application from options and
supervises it until SIGINT/SIGTERM.
"""

import logging
from typing import Optional

import typer

from .application.options import StartTimeout, StopTimeout
from .application.supervisor import run_app
from .demo.echo import custom_logger_echo_options, echo_options
from .demo.users import users_options
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import ApplicationConfig
from .infrastructure.logging.setup import setup_logging

cli = typer.Typer(
    name="hookwire",
    help="Dependency injection with ordered lifecycle hooks: demo programs"
)

logger = logging.getLogger(__name__)


def _load_config(config_file: Optional[str]) -> ApplicationConfig:
    try:
        return ConfigLoader().load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Error loading configuration: {e}", err=True)
        raise typer.Exit(1)


@cli.command()
def echo(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Server host address"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Server port"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    json_logs: bool = typer.Option(
        False, "--json", help="Write logs as JSON lines"
    ),
    custom_logger: bool = typer.Option(
        False, "--custom-logger", help="Register hooks from an invoke target and log events as JSON"
    )
) -> None:
    """Serve POST /echo until interrupted."""

    config = _load_config(config_file)

    if host:
        config.server.host = host
    if port is not None:
        config.server.port = port
    if log_level:
        config.logging.level = log_level.upper()
    if json_logs or custom_logger:
        config.logging.json = True

    try:
        config.validate()
    except ValueError as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(1)

    setup_logging(config.logging)
    logger.info(f"Starting {config.name} v{config.version} echo server")

    options = custom_logger_echo_options(config) if custom_logger else echo_options(config)
    code = run_app(*options)
    raise typer.Exit(code)


@cli.command()
def users(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    wait: bool = typer.Option(
        True, "--wait/--no-wait", help="Wait for a signal before stopping"
    )
) -> None:
    """Save a user and read it back through the user module."""

    config = _load_config(config_file)
    setup_logging(config.logging)

    code = run_app(
        *users_options(),
        StartTimeout(config.lifecycle.start_timeout),
        StopTimeout(config.lifecycle.stop_timeout),
        block=wait,
    )
    raise typer.Exit(code)


@cli.command()
def init_config(
    output: str = typer.Option(
        "config.yaml", "--output", "-o", help="Output configuration file"
    ),
    format: str = typer.Option(
        "yaml", "--format", "-f", help="Configuration format (yaml/json)"
    )
) -> None:
    """Generate a default configuration file."""

    config = ApplicationConfig()

    try:
        ConfigLoader().save_config(config, output, format)
    except ValueError as e:
        typer.echo(f"Error saving configuration: {e}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Default configuration saved to {output}")


@cli.command()
def validate_config(
    config_file: str = typer.Argument(..., help="Configuration file to validate")
) -> None:
    """Validate a configuration file."""

    try:
        config = ConfigLoader().load_config(config_file)
    except (FileNotFoundError, ValueError) as e:
        typer.echo(f"Configuration validation failed: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Configuration file {config_file} is valid")
    typer.echo(f"Application: {config.name} v{config.version}")
    typer.echo(f"Server: {config.server.host}:{config.server.port}")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
