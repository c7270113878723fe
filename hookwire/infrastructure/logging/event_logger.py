"""
Default event sink: one structured loguru record per lifecycle event.

Context fields are attached with ``bind()`` so they end up in the record's
``extra`` mapping, and in the JSON document when the console sink is set up
with ``serialize=True``.
"""

from typing import Any, Callable, Dict, Optional, Type

from loguru import logger as loguru_logger

from ...core.domain.events import (
    Event,
    Invoked,
    Invoking,
    LoggerInitialized,
    OnStartExecuted,
    OnStartExecuting,
    OnStopExecuted,
    OnStopExecuting,
    Provided,
    RolledBack,
    RollingBack,
    Started,
    Stopped,
    Stopping,
    Supplied,
)
from ...core.interfaces.events import IEventSink


def format_runtime(seconds: float) -> str:
    """Render a hook runtime the way durations usually read in logs."""
    if seconds >= 1:
        return f"{seconds:.3f}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds * 1e6:.1f}µs"


class LoguruEventSink(IEventSink):
    """
    Render lifecycle events as structured log records.

    Successful actions log at INFO, events carrying an error at ERROR.
    Unknown event classes are logged at INFO as "Unhandled event".
    """

    def __init__(self, log: Optional[Any] = None) -> None:
        """
        Args:
            log: loguru logger to write to; the process-wide loguru logger
                when omitted
        """
        self._log = (log if log is not None else loguru_logger).bind(component="hookwire")
        self._renderers: Dict[Type[Event], Callable[[Any], None]] = {
            OnStartExecuting: self._on_start_executing,
            OnStartExecuted: self._on_start_executed,
            OnStopExecuting: self._on_stop_executing,
            OnStopExecuted: self._on_stop_executed,
            Supplied: self._supplied,
            Provided: self._provided,
            Invoking: self._invoking,
            Invoked: self._invoked,
            Stopping: self._stopping,
            Stopped: self._stopped,
            RollingBack: self._rolling_back,
            RolledBack: self._rolled_back,
            Started: self._started,
            LoggerInitialized: self._logger_initialized,
        }

    def handle(self, event: Event) -> None:
        renderer = self._renderers.get(type(event))
        if renderer is None:
            self._log.bind(kind=event.kind, event=type(event).__qualname__).info("Unhandled event")
            return
        renderer(event)

    def _info(self, kind: str, message: str, **fields: Any) -> None:
        self._log.bind(kind=kind, **fields).info(message)

    def _error(self, kind: str, message: str, error: BaseException, **fields: Any) -> None:
        self._log.bind(kind=kind, error=str(error), **fields).error(message)

    def _on_start_executing(self, e: OnStartExecuting) -> None:
        self._info(e.kind, "OnStart hook executing", caller=e.caller_name, function=e.function_name)

    def _on_start_executed(self, e: OnStartExecuted) -> None:
        fields = dict(caller=e.caller_name, function=e.function_name,
                      runtime=format_runtime(e.runtime))
        if e.err is not None:
            self._error(e.kind, "OnStart hook failed", e.err, **fields)
        else:
            self._info(e.kind, "OnStart hook executed", **fields)

    def _on_stop_executing(self, e: OnStopExecuting) -> None:
        self._info(e.kind, "OnStop hook executing", caller=e.caller_name, function=e.function_name)

    def _on_stop_executed(self, e: OnStopExecuted) -> None:
        fields = dict(caller=e.caller_name, function=e.function_name,
                      runtime=format_runtime(e.runtime))
        if e.err is not None:
            self._error(e.kind, "OnStop hook failed", e.err, **fields)
        else:
            self._info(e.kind, "OnStop hook executed", **fields)

    def _supplied(self, e: Supplied) -> None:
        if e.err is not None:
            self._error(e.kind, "Supplied failed", e.err, type=e.type_name, module=e.module_name)
        else:
            self._info(e.kind, "Supplied", type=e.type_name, module=e.module_name)

    def _provided(self, e: Provided) -> None:
        if e.err is not None:
            self._error(e.kind, "Provide failed", e.err, constructor=e.constructor_name,
                        module=e.module_name, types=", ".join(e.output_type_names))
            return
        for output in e.output_type_names:
            self._info(e.kind, "Provided", constructor=e.constructor_name,
                       module=e.module_name, type=output)

    def _invoking(self, e: Invoking) -> None:
        self._info(e.kind, "Invoking", function=e.function_name, module=e.module_name)

    def _invoked(self, e: Invoked) -> None:
        if e.err is not None:
            self._error(e.kind, "Invoke failed", e.err, function=e.function_name, module=e.module_name)
        else:
            self._info(e.kind, "Invoked", function=e.function_name, module=e.module_name)

    def _stopping(self, e: Stopping) -> None:
        self._info(e.kind, "Received signal", signal=e.signal)

    def _stopped(self, e: Stopped) -> None:
        if e.err is not None:
            self._error(e.kind, "Stop failed", e.err)
        else:
            self._info(e.kind, "Stopped")

    def _rolling_back(self, e: RollingBack) -> None:
        # start_err is always set; rolling back is an error condition
        self._log.bind(kind=e.kind, error=str(e.start_err)).error("Start failed, rolling back")

    def _rolled_back(self, e: RolledBack) -> None:
        if e.err is not None:
            self._error(e.kind, "Rollback failed", e.err)
        else:
            self._info(e.kind, "Rolled back")

    def _started(self, e: Started) -> None:
        if e.err is not None:
            self._error(e.kind, "Start failed", e.err)
        else:
            self._info(e.kind, "Started")

    def _logger_initialized(self, e: LoggerInitialized) -> None:
        if e.err is not None:
            self._error(e.kind, "Custom event sink initialization failed", e.err,
                        function=e.constructor_name)
        else:
            self._info(e.kind, "Initialized custom event sink", function=e.constructor_name)
