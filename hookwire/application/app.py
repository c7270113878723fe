"""
Application assembly.

``App`` turns a list of options into a built object graph: it registers every
provider, calls every invoke target (which constructs whatever they depend on
and collects lifecycle hooks), and hands the hooks to the orchestrator.
"""

import logging
from typing import Any, Callable, List, Optional, Tuple, Union

from ..core.domain.errors import ConstructionError
from ..core.domain.events import LoggerInitialized
from ..core.interfaces.events import IEventSink
from ..core.interfaces.lifecycle import callable_name
from ..infrastructure.logging.event_logger import LoguruEventSink
from .container import Container
from .options import Annotation, Option
from .startup import DEFAULT_START_TIMEOUT, DEFAULT_STOP_TIMEOUT, Application, AppState

logger = logging.getLogger(__name__)


class AppBuilder:
    """Collects what the options describe, in declaration order."""

    def __init__(self) -> None:
        self.registrations: List[Tuple[str, Any, str]] = []
        self.invokes: List[Tuple[Any, str]] = []
        self.event_sink_factory: Optional[Callable[[], IEventSink]] = None
        self.start_timeout = DEFAULT_START_TIMEOUT
        self.stop_timeout = DEFAULT_STOP_TIMEOUT

    def add_provide(self, constructor: Union[Callable[..., Any], Annotation], module_name: str) -> None:
        self.registrations.append(("provide", constructor, module_name))

    def add_supply(self, value: Any, module_name: str) -> None:
        self.registrations.append(("supply", value, module_name))

    def add_invoke(self, target: Union[Callable[..., None], Annotation], module_name: str) -> None:
        self.invokes.append((target, module_name))

    def set_event_sink_factory(self, factory: Callable[[], IEventSink]) -> None:
        self.event_sink_factory = factory


class App:
    """
    An application built from options.

    Construction registers providers and runs invoke targets; any registry,
    resolver or invoke error is raised from the constructor, so an ``App``
    that exists always has a complete graph.

    Usage:
        app = App(Provide(new_server, new_handler), Invoke(register_routes))
        await app.start()
        ...
        await app.stop()
    """

    def __init__(self, *options: Option) -> None:
        builder = AppBuilder()
        for option in options:
            option.apply(builder, "")

        self._event_sink = self._create_event_sink(builder.event_sink_factory)
        self._container = Container(self._event_sink)
        self._application = Application(
            self._container.hooks,
            self._event_sink,
            start_timeout=builder.start_timeout,
            stop_timeout=builder.stop_timeout,
        )

        for kind, item, module_name in builder.registrations:
            if kind == "supply":
                self._supply(item, module_name)
            else:
                self._provide(item, module_name)

        for target, module_name in builder.invokes:
            self._invoke(target, module_name)

        logger.debug(
            f"Application built: {len(self._container.registry)} providers, "
            f"{len(self._container.hooks)} lifecycle hooks")

    @property
    def container(self) -> Container:
        return self._container

    @property
    def event_sink(self) -> IEventSink:
        return self._event_sink

    @property
    def state(self) -> AppState:
        return self._application.state

    @property
    def start_timeout(self) -> float:
        return self._application.start_timeout

    @property
    def stop_timeout(self) -> float:
        return self._application.stop_timeout

    async def start(self, timeout: Optional[float] = None) -> None:
        """Run OnStart hooks; see ``Application.start``."""
        await self._application.start(timeout)

    async def stop(self, timeout: Optional[float] = None) -> None:
        """Run OnStop hooks; see ``Application.stop``."""
        await self._application.stop(timeout)

    def run(self, stop_timeout: Optional[float] = None) -> int:
        """
        Start, wait for SIGINT/SIGTERM, then stop.

        Returns:
            Process exit status: 0 on a clean run, 1 if start or stop failed
        """
        from .supervisor import Supervisor

        return Supervisor(self, stop_timeout=stop_timeout).run()

    def _provide(self, item: Union[Callable[..., Any], Annotation], module_name: str) -> None:
        if isinstance(item, Annotation):
            self._container.provide(
                item.target,
                provides=item.provides,
                depends=item.depends,
                name=item.name,
                module_name=module_name,
                fallible=item.fallible,
            )
        else:
            self._container.provide(item, module_name=module_name)

    def _supply(self, item: Any, module_name: str) -> None:
        if isinstance(item, Annotation):
            self._container.supply(item.target, provides=item.provides, module_name=module_name)
        else:
            self._container.supply(item, module_name=module_name)

    def _invoke(self, item: Union[Callable[..., None], Annotation], module_name: str) -> None:
        if isinstance(item, Annotation):
            self._container.invoke(item.target, depends=item.depends, module_name=module_name)
        else:
            self._container.invoke(item, module_name=module_name)

    @staticmethod
    def _create_event_sink(factory: Optional[Callable[[], IEventSink]]) -> IEventSink:
        default_sink = LoguruEventSink()
        if factory is None:
            return default_sink

        name = callable_name(factory)
        try:
            sink = factory()
            if not callable(getattr(sink, 'handle', None)):
                raise TypeError(f"{type(sink).__name__} has no handle(event) method")
        except Exception as e:
            error = ConstructionError(name, e)
            default_sink.handle(LoggerInitialized(constructor_name=name, err=error))
            raise error from e

        sink.handle(LoggerInitialized(constructor_name=name))
        return sink
