"""
Lifecycle event models.

Every action taken by the container or the orchestrator is reported as one
immutable event. The set of event classes below is closed; sinks dispatch on
the concrete class and must fall back to a generic rendering for anything
they do not recognise.
"""

import time
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Event:
    """Base class of all lifecycle events."""

    timestamp: float = field(default_factory=time.time, compare=False)
    """Unix timestamp when the event was created."""

    @property
    def kind(self) -> str:
        """Event kind tag, the concrete class name."""
        return type(self).__name__

    @property
    def error(self) -> Optional[BaseException]:
        """Error carried by the event, if any."""
        return None

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert event to a flat dictionary suitable for structured logging.

        Errors are rendered as strings and unset optional fields are omitted.
        """
        result: Dict[str, Any] = {'kind': self.kind}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            if isinstance(value, BaseException):
                value = str(value)
            result[f.name] = value
        return result


@dataclass(frozen=True)
class Provided(Event):
    """A constructor was invoked to produce one or more types."""
    constructor_name: str = ""
    output_type_names: Tuple[str, ...] = ()
    module_name: str = ""
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err


@dataclass(frozen=True)
class Supplied(Event):
    """A ready-made value was handed to the graph."""
    type_name: str = ""
    module_name: str = ""
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err


@dataclass(frozen=True)
class Invoking(Event):
    """An invoke target is about to be called."""
    function_name: str = ""
    module_name: str = ""


@dataclass(frozen=True)
class Invoked(Event):
    """An invoke target returned, or its dependencies failed to resolve."""
    function_name: str = ""
    module_name: str = ""
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err


@dataclass(frozen=True)
class OnStartExecuting(Event):
    function_name: str = ""
    caller_name: str = ""


@dataclass(frozen=True)
class OnStartExecuted(Event):
    function_name: str = ""
    caller_name: str = ""
    runtime: float = 0.0
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err


@dataclass(frozen=True)
class OnStopExecuting(Event):
    function_name: str = ""
    caller_name: str = ""


@dataclass(frozen=True)
class OnStopExecuted(Event):
    function_name: str = ""
    caller_name: str = ""
    runtime: float = 0.0
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err


@dataclass(frozen=True)
class Started(Event):
    """Start finished; ``err`` is set when it failed."""
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err


@dataclass(frozen=True)
class Stopping(Event):
    """The supervisor received a shutdown signal."""
    signal: str = ""


@dataclass(frozen=True)
class Stopped(Event):
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err


@dataclass(frozen=True)
class RollingBack(Event):
    """A start hook failed and started hooks are being stopped."""
    start_err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.start_err


@dataclass(frozen=True)
class RolledBack(Event):
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err


@dataclass(frozen=True)
class LoggerInitialized(Event):
    """A custom event sink was constructed."""
    constructor_name: str = ""
    err: Optional[BaseException] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self.err
