"""
Options that describe an application.

An application is declared as a list of options: constructors to provide,
values to supply, targets to invoke, modules grouping other options, a
custom event sink and timeouts. ``App`` applies them in order.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, Tuple, Union

from ..core.interfaces.events import IEventSink

if TYPE_CHECKING:
    from .app import AppBuilder


@dataclass(frozen=True)
class Annotation:
    """A constructor, target or value with explicit keys and name."""
    target: Any
    provides: Optional[Union[Any, Sequence[Any]]] = None
    depends: Optional[Sequence[Any]] = None
    name: Optional[str] = None
    fallible: bool = True


def annotate(target: Any, *,
             provides: Optional[Union[Any, Sequence[Any]]] = None,
             depends: Optional[Sequence[Any]] = None,
             name: Optional[str] = None,
             fallible: bool = True) -> Annotation:
    """
    Attach explicit keys to a constructor, invoke target or supplied value.

    Args:
        target: Constructor, invoke target, or value for ``Supply``
        provides: Output key(s) instead of the return annotation
        depends: Dependency keys instead of the parameter annotations
        name: Name reported in events
        fallible: Whether a constructor is expected to raise
    """
    return Annotation(target=target, provides=provides, depends=depends,
                      name=name, fallible=fallible)


class Option(ABC):
    """Base class of application options."""

    @abstractmethod
    def apply(self, builder: 'AppBuilder', module_name: str) -> None:
        """Record this option on the builder."""
        pass


class Provide(Option):
    """Register constructors."""

    def __init__(self, *constructors: Union[Callable[..., Any], Annotation]) -> None:
        self.constructors: Tuple[Union[Callable[..., Any], Annotation], ...] = constructors

    def apply(self, builder: 'AppBuilder', module_name: str) -> None:
        for constructor in self.constructors:
            builder.add_provide(constructor, module_name)

    def __repr__(self) -> str:
        return f"Provide({', '.join(repr(c) for c in self.constructors)})"


class Supply(Option):
    """Register ready values under their own type (or an annotated key)."""

    def __init__(self, *values: Any) -> None:
        self.values: Tuple[Any, ...] = values

    def apply(self, builder: 'AppBuilder', module_name: str) -> None:
        for value in self.values:
            builder.add_supply(value, module_name)


class Invoke(Option):
    """Register targets called, in order, once every provider is registered."""

    def __init__(self, *targets: Union[Callable[..., None], Annotation]) -> None:
        self.targets: Tuple[Union[Callable[..., None], Annotation], ...] = targets

    def apply(self, builder: 'AppBuilder', module_name: str) -> None:
        for target in self.targets:
            builder.add_invoke(target, module_name)


class Module(Option):
    """A named group of options; its name tags the events of its providers."""

    def __init__(self, name: str, *options: Option) -> None:
        if not name:
            raise ValueError("Module name cannot be empty")
        self.name = name
        self.options: Tuple[Option, ...] = options

    def apply(self, builder: 'AppBuilder', module_name: str) -> None:
        for option in self.options:
            option.apply(builder, self.name)

    def __repr__(self) -> str:
        return f"Module({self.name!r}, {len(self.options)} options)"


class WithEventSink(Option):
    """Replace the default event sink with one built by ``factory``."""

    def __init__(self, factory: Callable[[], IEventSink]) -> None:
        self.factory = factory

    def apply(self, builder: 'AppBuilder', module_name: str) -> None:
        builder.set_event_sink_factory(self.factory)


class StartTimeout(Option):
    """Total budget in seconds for running every OnStart hook."""

    def __init__(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError(f"Start timeout must be positive, got {seconds}")
        self.seconds = seconds

    def apply(self, builder: 'AppBuilder', module_name: str) -> None:
        builder.start_timeout = self.seconds


class StopTimeout(Option):
    """Total budget in seconds for running every OnStop hook."""

    def __init__(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError(f"Stop timeout must be positive, got {seconds}")
        self.seconds = seconds

    def apply(self, builder: 'AppBuilder', module_name: str) -> None:
        builder.stop_timeout = self.seconds
