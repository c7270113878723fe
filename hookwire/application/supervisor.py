"""
Process supervisor: start the application, wait for a termination signal,
stop it, and turn the outcome into an exit status.
"""

import asyncio
import logging
import signal
from typing import Any, Optional, Sequence

from ..core.domain.events import Stopping
from ..core.domain.errors import HookwireError
from .app import App
from .options import Option

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class Supervisor:
    """
    Drive an ``App`` through one start/stop cycle.

    The only suspension point between start and stop is an ``asyncio.Event``
    set from a signal handler (or ``request_shutdown``). Shutdown is
    cooperative: it triggers ``stop`` and does not interrupt running hooks.
    """

    def __init__(self, app: App,
                 stop_timeout: Optional[float] = None,
                 signals: Sequence[signal.Signals] = SHUTDOWN_SIGNALS,
                 block: bool = True) -> None:
        """
        Args:
            app: Built application
            stop_timeout: Budget for stop in seconds; the app's configured
                stop timeout when omitted
            signals: Signals that trigger shutdown
            block: Wait for a signal between start and stop; when False the
                application is stopped right after a successful start
        """
        self._app = app
        self._stop_timeout = stop_timeout
        self._signals = tuple(signals)
        self._block = block
        self._shutdown = asyncio.Event()
        self._received: Optional[str] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    @property
    def app(self) -> App:
        return self._app

    def run(self) -> int:
        """Run the supervised cycle on a new event loop and return the exit status."""
        return asyncio.run(self.serve())

    async def serve(self) -> int:
        """Run the supervised cycle on the current event loop."""
        self._loop = asyncio.get_running_loop()
        installed = self._install_signal_handlers(self._loop)
        try:
            try:
                await self._app.start()
            except HookwireError as e:
                logger.error(f"Failed to start application: {e}")
                return EXIT_FAILURE

            if self._block:
                await self._shutdown.wait()
                self._app.event_sink.handle(Stopping(signal=self._received or ""))
            logger.info("Shutting down application...")

            try:
                await self._app.stop(self._stop_timeout)
            except HookwireError as e:
                logger.error(f"Failed to stop application: {e}")
                return EXIT_FAILURE
            return EXIT_OK
        finally:
            self._remove_signal_handlers(self._loop, installed)

    def request_shutdown(self, sig: signal.Signals = signal.SIGTERM) -> None:
        """Trigger shutdown as if ``sig`` had been received. Thread safe."""
        if self._loop is not None and self._loop.is_running():
            self._loop.call_soon_threadsafe(self._on_signal, sig)
        else:
            self._on_signal(sig)

    def _on_signal(self, sig: signal.Signals) -> None:
        if self._received is None:
            self._received = _signal_name(sig)
            logger.debug(f"Received {self._received}")
        self._shutdown.set()

    def _install_signal_handlers(self, loop: asyncio.AbstractEventLoop) -> bool:
        try:
            for sig in self._signals:
                loop.add_signal_handler(sig, self._on_signal, sig)
        except (NotImplementedError, RuntimeError, ValueError) as e:
            # Not on the main thread, or a platform without loop signal support
            logger.debug(f"Signal handlers not installed: {e}")
            return False
        return True

    def _remove_signal_handlers(self, loop: Optional[asyncio.AbstractEventLoop],
                                installed: bool) -> None:
        if loop is None or not installed:
            return
        for sig in self._signals:
            loop.remove_signal_handler(sig)


def run_app(*options: Option, stop_timeout: Optional[float] = None,
            block: bool = True) -> int:
    """
    Build an application from options and supervise it.

    Returns:
        Process exit status: 1 if building, starting or stopping failed
    """
    try:
        app = App(*options)
    except (HookwireError, TypeError, ValueError) as e:
        logger.error(f"Failed to build application: {e}")
        return EXIT_FAILURE

    return Supervisor(app, stop_timeout=stop_timeout, block=block).run()


def _signal_name(value: Any) -> str:
    try:
        return signal.Signals(value).name
    except ValueError:
        return str(value)
