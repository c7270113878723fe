"""
Domain models: lifecycle events and the error taxonomy.
"""

from . import events
from .errors import (
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

__all__ = [
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
]
