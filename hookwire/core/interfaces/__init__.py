"""
Interfaces shared between the container, the orchestrator and user code.
"""

from .lifecycle import Hook, HookFunc, ILifecycle, IStartable, IStoppable, callable_name
from .events import IEventSink

__all__ = [
    "Hook",
    "HookFunc",
    "ILifecycle",
    "IStartable",
    "IStoppable",
    "IEventSink",
    "callable_name",
]
