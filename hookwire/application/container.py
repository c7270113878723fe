"""
Dependency injection container for building an application's object graph.

This module provides the resolver: constructors are registered as providers,
and requesting a type constructs it together with every transitive
dependency. Every provider runs at most once; its result is cached for the
lifetime of the container. Constructors and invoke targets may ask for a
``Lifecycle`` to register start/stop hooks.
"""

import inspect
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Union

from ..core.domain.errors import (
    ConstructionError,
    CyclicDependencyError,
    HookwireError,
    InvokeError,
    UnknownTypeError,
    type_name,
)
from ..core.domain.events import Event, Invoked, Invoking, Provided, Supplied
from ..core.interfaces.events import IEventSink
from ..core.interfaces.lifecycle import callable_name
from .lifecycle import HookRegistry, Lifecycle
from .registry import Dependency, Provider, ProviderRegistry, analyze_dependencies, analyze_outputs

logger = logging.getLogger(__name__)


class IContainer(ABC):
    """Interface for dependency injection containers."""

    @abstractmethod
    def provide(self, constructor: Callable[..., Any], *,
                provides: Optional[Union[Any, Sequence[Any]]] = None,
                depends: Optional[Sequence[Any]] = None,
                name: Optional[str] = None,
                module_name: str = "",
                fallible: bool = True) -> Provider:
        """
        Register a constructor.

        Args:
            constructor: Factory function or class
            provides: Output key(s); defaults to the return annotation
            depends: Dependency keys; default to the parameter annotations
            name: Name used in events; defaults to the constructor's name
            module_name: Owning module, reported in events
            fallible: Whether the constructor is expected to raise

        Raises:
            DuplicateProviderError: If an output type is already provided
            TypeError: If inputs or outputs cannot be determined
        """
        pass

    @abstractmethod
    def supply(self, value: Any, *, provides: Optional[Any] = None,
               module_name: str = "") -> Provider:
        """Register a ready value under its type (or ``provides``)."""
        pass

    @abstractmethod
    def resolve(self, service_type: Any) -> Any:
        """
        Resolve an instance of a type.

        Raises:
            UnknownTypeError: If the type or one of its dependencies is not provided
            CyclicDependencyError: If the dependency graph has a cycle
            ConstructionError: If a constructor raised
        """
        pass

    @abstractmethod
    def invoke(self, target: Callable[..., Any], *,
               depends: Optional[Sequence[Any]] = None,
               module_name: str = "") -> None:
        """
        Call a target with its dependencies resolved.

        Raises:
            InvokeError: If the target raised
        """
        pass

    @abstractmethod
    def is_registered(self, service_type: Any) -> bool:
        pass


class Container(IContainer):
    """
    Singleton-only dependency injection container.

    Resolution is depth first and runs under a re-entrant lock, so concurrent
    first requests for a type still construct it exactly once. Before any
    constructor runs, the dependency graph of the request is walked so that a
    cycle or a missing type fails the request without side effects.
    """

    def __init__(self, event_sink: IEventSink,
                 hooks: Optional[HookRegistry] = None,
                 registry: Optional[ProviderRegistry] = None) -> None:
        self._sink = event_sink
        self._hooks = hooks if hooks is not None else HookRegistry()
        self._registry = registry if registry is not None else ProviderRegistry()
        self._instances: Dict[Any, Any] = {}
        self._failures: Dict[int, ConstructionError] = {}
        self._resolution_stack: List[Any] = []
        self._lock = threading.RLock()

    @property
    def registry(self) -> ProviderRegistry:
        return self._registry

    @property
    def hooks(self) -> HookRegistry:
        return self._hooks

    @property
    def instances(self) -> Dict[Any, Any]:
        """Snapshot of the instance cache."""
        with self._lock:
            return dict(self._instances)

    def provide(self, constructor: Callable[..., Any], *,
                provides: Optional[Union[Any, Sequence[Any]]] = None,
                depends: Optional[Sequence[Any]] = None,
                name: Optional[str] = None,
                module_name: str = "",
                fallible: bool = True) -> Provider:
        """Register a constructor; a rejected registration emits a failed ``Provided``."""
        name = name or callable_name(constructor)
        outputs: Sequence[Any] = ()
        try:
            if not callable(constructor):
                raise TypeError(f"constructor must be callable, got {constructor!r}")
            outputs = analyze_outputs(constructor, provides)
            provider = Provider(
                constructor=constructor,
                outputs=outputs,
                dependencies=analyze_dependencies(constructor, depends),
                name=name,
                module_name=module_name,
                fallible=fallible,
            )
            with self._lock:
                self._registry.register(provider)
        except (HookwireError, TypeError, ValueError) as e:
            self._emit(Provided(constructor_name=name,
                                output_type_names=tuple(type_name(key) for key in outputs),
                                module_name=module_name, err=e))
            raise
        return provider

    def supply(self, value: Any, *, provides: Optional[Any] = None,
               module_name: str = "") -> Provider:
        """Register a ready value; a rejected value emits a failed ``Supplied``."""
        key = provides if provides is not None else type(value)
        try:
            if isinstance(provides, (list, tuple)):
                raise TypeError("Supply accepts a single provides= key per value")
            provider = Provider(
                constructor=lambda: value,
                outputs=(key,),
                dependencies=(),
                name=f"supply({type_name(key)})",
                module_name=module_name,
                fallible=False,
                supplied=True,
            )
            with self._lock:
                self._registry.register(provider)
        except (HookwireError, TypeError, ValueError) as e:
            self._emit(Supplied(type_name=type_name(key), module_name=module_name, err=e))
            raise
        return provider

    def resolve(self, service_type: Any) -> Any:
        """Resolve an instance of a type."""
        with self._lock:
            try:
                self._check_graph(service_type, None, [], set())
            except HookwireError as e:
                # nothing was constructed, so report the request itself
                self._emit(Provided(output_type_names=(type_name(service_type),), err=e))
                raise
            return self._resolve(service_type, None)

    def try_resolve(self, service_type: Any) -> Optional[Any]:
        """Resolve a type, returning None instead of raising resolver errors."""
        try:
            return self.resolve(service_type)
        except HookwireError:
            return None

    def is_registered(self, service_type: Any) -> bool:
        return self._registry.is_registered(service_type)

    def invoke(self, target: Callable[..., Any], *,
               depends: Optional[Sequence[Any]] = None,
               module_name: str = "") -> None:
        """Call an invoke target with its dependencies resolved."""
        function_name = callable_name(target)
        self._emit(Invoking(function_name=function_name, module_name=module_name))

        lifecycle = Lifecycle(self._hooks, function_name)
        try:
            with self._lock:
                try:
                    dependencies = analyze_dependencies(target, depends)
                    visited: Set[Any] = set()
                    for dependency in dependencies:
                        self._check_dependency(dependency, function_name, [], visited)
                    args = self._resolve_arguments(dependencies, function_name, lifecycle)
                except (HookwireError, TypeError) as e:
                    self._emit(Invoked(function_name=function_name,
                                       module_name=module_name, err=e))
                    raise

            try:
                result = target(*args)
                if inspect.isawaitable(result):
                    if inspect.iscoroutine(result):
                        result.close()
                    raise TypeError("invoke targets must be synchronous functions")
            except Exception as e:
                error = InvokeError(function_name, e)
                self._emit(Invoked(function_name=function_name,
                                   module_name=module_name, err=error))
                raise error from e
        finally:
            lifecycle.close()

        if result is not None:
            logger.warning(
                f"Invoke target {function_name} returned a value; it is ignored")
        self._emit(Invoked(function_name=function_name, module_name=module_name))

    def _emit(self, event: Event) -> None:
        self._sink.handle(event)

    def _check_graph(self, key: Any, required_by: Optional[str],
                     path: List[Any], visited: Set[Any]) -> None:
        """Walk the graph below ``key`` without constructing anything."""
        if key in self._instances:
            return
        if key in path:
            raise CyclicDependencyError(path[path.index(key):] + [key])
        if key in visited:
            return

        provider = self._registry.lookup(key, required_by)
        path.append(key)
        try:
            for dependency in provider.dependencies:
                self._check_dependency(dependency, provider.name, path, visited)
        finally:
            path.pop()
        visited.update(provider.outputs)

    def _check_dependency(self, dependency: Dependency, required_by: str,
                          path: List[Any], visited: Set[Any]) -> None:
        if dependency.is_lifecycle:
            return
        if dependency.optional and not self._is_available(dependency.key):
            return
        self._check_graph(dependency.key, required_by, path, visited)

    def _is_available(self, key: Any) -> bool:
        return key in self._instances or self._registry.is_registered(key)

    def _resolve(self, key: Any, required_by: Optional[str]) -> Any:
        if key in self._instances:
            return self._instances[key]

        if key in self._resolution_stack:
            cycle = self._resolution_stack[self._resolution_stack.index(key):] + [key]
            raise CyclicDependencyError(cycle)

        provider = self._registry.lookup(key, required_by)
        failure = self._failures.get(id(provider))
        if failure is not None:
            raise failure

        self._resolution_stack.append(key)
        try:
            self._construct(provider)
        finally:
            self._resolution_stack.pop()
        return self._instances[key]

    def _resolve_arguments(self, dependencies: Sequence[Dependency],
                           caller: str, lifecycle: Lifecycle) -> List[Any]:
        args = []
        for dependency in dependencies:
            if dependency.is_lifecycle:
                args.append(lifecycle)
            elif dependency.optional and not self._is_available(dependency.key):
                args.append(dependency.default)
            else:
                args.append(self._resolve(dependency.key, caller))
        return args

    def _construct(self, provider: Provider) -> None:
        """Run a provider's constructor once and cache its outputs."""
        lifecycle = Lifecycle(self._hooks, provider.name)
        try:
            args = self._resolve_arguments(provider.dependencies, provider.name, lifecycle)
            try:
                result = provider.constructor(*args)
                values = self._split_outputs(provider, result)
            except Exception as e:
                if not provider.fallible:
                    logger.error(f"Constructor {provider.name} is not expected to fail but raised {e!r}")
                error = ConstructionError(provider.name, e)
                self._failures[id(provider)] = error
                self._emit_provided(provider, error)
                raise error from e
        finally:
            lifecycle.close()

        for key, value in zip(provider.outputs, values):
            self._instances[key] = value
        self._emit_provided(provider, None)

    def _split_outputs(self, provider: Provider, result: Any) -> Sequence[Any]:
        if inspect.isawaitable(result):
            if inspect.iscoroutine(result):
                result.close()
            raise TypeError("constructors must be synchronous functions")
        if not provider.multiple_outputs:
            return (result,)
        if not isinstance(result, (tuple, list)) or len(result) != len(provider.outputs):
            raise TypeError(
                f"expected a tuple of {len(provider.outputs)} values for "
                f"{', '.join(provider.output_type_names)}, got {result!r}")
        return tuple(result)

    def _emit_provided(self, provider: Provider, error: Optional[BaseException]) -> None:
        if provider.supplied:
            for output in provider.output_type_names:
                self._emit(Supplied(type_name=output,
                                    module_name=provider.module_name, err=error))
            return
        self._emit(Provided(
            constructor_name=provider.name,
            output_type_names=provider.output_type_names,
            module_name=provider.module_name,
            err=error,
        ))
