"""
HTTP echo server assembled from providers.

``echo_options`` registers the hooks from the server constructor itself.
``custom_logger_echo_options`` builds an unmanaged server, registers its
hooks from a separate invoke target and logs events through a custom sink.
"""

import logging
from typing import List

from fastapi import FastAPI
from loguru import logger as loguru_logger

from ..application.lifecycle import Lifecycle
from ..application.options import Invoke, Option, Provide, StartTimeout, StopTimeout, Supply, WithEventSink
from ..core.interfaces.lifecycle import Hook
from ..infrastructure.config.models import ApplicationConfig, ServerConfig
from ..infrastructure.logging.event_logger import LoguruEventSink
from ..presentation.api import create_app, new_echo_handler
from ..presentation.server import HTTPServer

logger = logging.getLogger(__name__)


def new_server_config(config: ApplicationConfig) -> ServerConfig:
    return config.server


def new_http_server(lifecycle: Lifecycle, app: FastAPI, config: ServerConfig) -> HTTPServer:
    """Build the server and register its start/stop hooks."""
    server = HTTPServer(app, config, shutdown_timeout=5.0)
    lifecycle.append(Hook.for_component(server))
    return server


def new_unmanaged_http_server(app: FastAPI, config: ServerConfig) -> HTTPServer:
    return HTTPServer(app, config, shutdown_timeout=5.0)


def start_http_server(lifecycle: Lifecycle, server: HTTPServer) -> None:
    """Register the server's hooks from outside its constructor."""
    lifecycle.append(on_start=server.start, on_stop=server.stop)


def require_server(server: HTTPServer) -> None:
    """Pull the server, and therefore its hooks, into the graph."""
    host, port = server.address
    logger.debug(f"HTTP server configured for {host}:{port}")


def new_json_event_sink() -> LoguruEventSink:
    return LoguruEventSink(loguru_logger.bind(app="echo"))


def echo_options(config: ApplicationConfig) -> List[Option]:
    return [
        Supply(config),
        Provide(new_server_config, new_http_server, create_app, new_echo_handler),
        Invoke(require_server),
        StartTimeout(config.lifecycle.start_timeout),
        StopTimeout(config.lifecycle.stop_timeout),
    ]


def custom_logger_echo_options(config: ApplicationConfig) -> List[Option]:
    return [
        Supply(config),
        Provide(new_server_config, new_unmanaged_http_server, create_app, new_echo_handler),
        Invoke(start_http_server),
        WithEventSink(new_json_event_sink),
        StartTimeout(config.lifecycle.start_timeout),
        StopTimeout(config.lifecycle.stop_timeout),
    ]
