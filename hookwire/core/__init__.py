"""
Core module containing the domain models and interfaces of the container.

Nothing in here depends on the application or infrastructure layers.
"""

from .interfaces.lifecycle import Hook, ILifecycle, IStartable, IStoppable
from .interfaces.events import IEventSink
from .domain.events import Event
from .domain.errors import HookwireError

__all__ = [
    "Hook",
    "ILifecycle",
    "IStartable",
    "IStoppable",
    "IEventSink",
    "Event",
    "HookwireError",
]
