"""
HTTP server component driven by lifecycle hooks.

``start`` binds the listening socket synchronously, so address errors fail
the hook, then serves in a background task and returns. ``stop`` asks the
server to exit and waits for the task with a bound.
"""

import asyncio
import contextlib
import logging
import socket
from typing import Iterator, Optional, Tuple

import uvicorn
from fastapi import FastAPI

from ..core.interfaces.lifecycle import IStartable, IStoppable
from ..infrastructure.config.models import ServerConfig

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_TIMEOUT = 5.0


class _EmbeddedServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the supervisor."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield

    def install_signal_handlers(self) -> None:
        pass


class HTTPServer(IStartable, IStoppable):
    """Serve an ASGI application in a background task."""

    def __init__(self, app: FastAPI, config: ServerConfig,
                 shutdown_timeout: float = DEFAULT_SHUTDOWN_TIMEOUT) -> None:
        self._app = app
        self._config = config
        self._shutdown_timeout = shutdown_timeout
        self._server: Optional[_EmbeddedServer] = None
        self._socket: Optional[socket.socket] = None
        self._task: Optional[asyncio.Task] = None  # type: ignore[type-arg]

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the configured one before start."""
        if self._socket is not None:
            host, port = self._socket.getsockname()[:2]
            return host, port
        return self._config.host, self._config.port

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self._task is not None:
            raise RuntimeError("HTTP server already started")

        self._socket = self._bind()
        uvicorn_config = uvicorn.Config(
            self._app,
            log_config=None,
            access_log=False,
            lifespan="off",
        )
        self._server = _EmbeddedServer(uvicorn_config)

        host, port = self.address
        logger.info(f"Starting HTTP server at {host}:{port}")
        self._task = asyncio.create_task(
            self._server.serve(sockets=[self._socket]), name=f"http-server-{port}")
        self._task.add_done_callback(self._on_served)

    async def stop(self) -> None:
        logger.info("Stopping HTTP server")
        if self._task is None or self._server is None:
            return

        self._server.should_exit = True
        try:
            await asyncio.wait_for(self._task, timeout=self._shutdown_timeout)
        finally:
            if self._socket is not None:
                self._socket.close()
            self._task = None
            self._server = None
            self._socket = None

    def _bind(self) -> socket.socket:
        host, port = self._config.host, self._config.port
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((host, port))
            sock.listen(2048)
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        return sock

    def _on_served(self, task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Server failed: {error}")
