"""
hookwire - dependency injection with ordered lifecycle hooks.

Constructors are registered as providers and resolved on demand into a
singleton object graph. Constructors may register start/stop hooks, which an
orchestrator runs in order with timeouts and rollback, reporting every action
to an event sink.
"""

__version__ = "0.1.0"

from .core.interfaces.lifecycle import Hook, ILifecycle, IStartable, IStoppable
from .core.interfaces.events import IEventSink
from .core.domain import events
from .core.domain.errors import (
    CombinedStopError,
    ConstructionError,
    CyclicDependencyError,
    DuplicateProviderError,
    HookwireError,
    InvokeError,
    LifecycleStateError,
    StartHookError,
    StartTimeoutError,
    StopHookError,
    StopTimeoutError,
    UnknownTypeError,
)
from .application import (
    App,
    AppState,
    Container,
    Invoke,
    Lifecycle,
    Module,
    Provide,
    RecordingEventSink,
    StartTimeout,
    StopTimeout,
    Supervisor,
    Supply,
    WithEventSink,
    annotate,
    run_app,
)

__all__ = [
    "Hook",
    "ILifecycle",
    "IStartable",
    "IStoppable",
    "IEventSink",
    "events",
    "CombinedStopError",
    "ConstructionError",
    "CyclicDependencyError",
    "DuplicateProviderError",
    "HookwireError",
    "InvokeError",
    "LifecycleStateError",
    "StartHookError",
    "StartTimeoutError",
    "StopHookError",
    "StopTimeoutError",
    "UnknownTypeError",
    "App",
    "AppState",
    "Container",
    "Invoke",
    "Lifecycle",
    "Module",
    "Provide",
    "RecordingEventSink",
    "StartTimeout",
    "StopTimeout",
    "Supervisor",
    "Supply",
    "WithEventSink",
    "annotate",
    "run_app",
]
