"""
Lifecycle interfaces for components and constructors that need startup/shutdown behavior.

Constructors receive an ``ILifecycle`` and append ``Hook`` pairs to it. The
orchestrator later runs every ``on_start`` in registration order and every
``on_stop`` in reverse order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Union

HookFunc = Callable[[], Union[Awaitable[Any], None]]


def callable_name(func: Any) -> str:
    """Qualified name of a function, bound method or callable object."""
    if func is None:
        return ""
    name = getattr(func, '__qualname__', None) or getattr(func, '__name__', None)
    if name is None:
        name = type(func).__qualname__
    module = getattr(func, '__module__', None)
    if module and module != 'builtins':
        return f"{module}.{name}"
    return str(name)


class IStartable(ABC):
    """Interface for components that can be started."""

    @abstractmethod
    async def start(self) -> None:
        """
        Start the component.

        Must return promptly; long-running work belongs in a background task.

        Raises:
            Exception: If the component fails to start.
        """
        pass


class IStoppable(ABC):
    """Interface for components that can be stopped."""

    @abstractmethod
    async def stop(self) -> None:
        """
        Stop the component gracefully.

        Raises:
            Exception: If the component fails to stop cleanly.
        """
        pass


@dataclass(frozen=True)
class Hook:
    """
    A pair of start/stop callables registered by a constructor.

    Either callable may be absent. Callables take no arguments and may be
    plain functions or coroutine functions.
    """

    on_start: Optional[HookFunc] = None
    on_stop: Optional[HookFunc] = None
    caller_name: str = ""
    """Name of the constructor that registered the hook."""

    @classmethod
    def for_component(cls, component: Any) -> 'Hook':
        """Build a hook from a component's ``start``/``stop`` methods."""
        on_start = component.start if isinstance(component, IStartable) else None
        on_stop = component.stop if isinstance(component, IStoppable) else None
        if on_start is None and on_stop is None:
            raise TypeError(
                f"{type(component).__name__} is neither startable nor stoppable")
        return cls(on_start=on_start, on_stop=on_stop)

    @property
    def on_start_name(self) -> str:
        return callable_name(self.on_start)

    @property
    def on_stop_name(self) -> str:
        return callable_name(self.on_stop)


class ILifecycle(ABC):
    """Interface handed to constructors for registering hooks."""

    @abstractmethod
    def append(self, hook: Optional[Hook] = None, *,
               on_start: Optional[HookFunc] = None,
               on_stop: Optional[HookFunc] = None) -> None:
        """
        Append a hook pair.

        Args:
            hook: A prepared hook, or None to build one from the keywords
            on_start: Start callable (ignored when ``hook`` is given)
            on_stop: Stop callable (ignored when ``hook`` is given)
        """
        pass
