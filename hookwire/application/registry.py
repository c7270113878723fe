"""
Provider registry.

A provider is a constructor together with the types it consumes and the
types it produces. Dependencies are discovered from type hints the same way
for plain functions and for classes, and can be overridden with explicit keys
when a type hint is not a suitable key.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union, get_type_hints

from ..core.domain.errors import DuplicateProviderError, UnknownTypeError, type_name
from ..core.interfaces.lifecycle import ILifecycle, callable_name

logger = logging.getLogger(__name__)

_EMPTY = inspect.Parameter.empty


@dataclass(frozen=True)
class Dependency:
    """One parameter of a constructor or invoke target."""
    key: Any
    name: str
    optional: bool = False
    default: Any = None

    @property
    def is_lifecycle(self) -> bool:
        return inspect.isclass(self.key) and issubclass(self.key, ILifecycle)


@dataclass(frozen=True)
class Provider:
    """Registration information for a constructor."""

    constructor: Callable[..., Any]
    outputs: Tuple[Any, ...]
    dependencies: Tuple[Dependency, ...]
    name: str
    module_name: str = ""
    fallible: bool = True
    """Constructors signal failure by raising; a non-fallible constructor
    that raises anyway is reported as an unexpected failure."""
    supplied: bool = False
    """True when the provider hands out a ready value (``Supply``)."""

    @property
    def output_type_names(self) -> Tuple[str, ...]:
        return tuple(type_name(key) for key in self.outputs)

    @property
    def multiple_outputs(self) -> bool:
        return len(self.outputs) > 1


def _unwrap_optional(annotation: Any) -> Tuple[Any, bool]:
    """Return (inner type, True) for Optional[T], else (annotation, False)."""
    if getattr(annotation, '__origin__', None) is Union:
        args = [arg for arg in annotation.__args__ if arg is not type(None)]
        if len(args) == 1 and len(annotation.__args__) == 2:
            return args[0], True
    return annotation, False


def analyze_dependencies(func: Callable[..., Any],
                         depends: Optional[Sequence[Any]] = None) -> Tuple[Dependency, ...]:
    """
    Determine the dependencies of a constructor or invoke target.

    Args:
        func: Function or class to analyze
        depends: Explicit dependency keys, one per positional parameter

    Returns:
        Dependencies in parameter order

    Raises:
        TypeError: If a parameter has no usable type annotation
    """
    if depends is not None:
        return tuple(Dependency(key=key, name=f"arg{i}") for i, key in enumerate(depends))

    target = func.__init__ if inspect.isclass(func) else func  # type: ignore[misc]
    signature = inspect.signature(func)
    try:
        type_hints = get_type_hints(target)
    except (NameError, TypeError) as e:
        raise TypeError(f"cannot read type hints of {callable_name(func)}: {e}") from e

    dependencies = []
    for param_name, param in signature.parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue

        annotation = type_hints.get(param_name, param.annotation)
        if annotation is _EMPTY:
            raise TypeError(
                f"parameter '{param_name}' of {callable_name(func)} has no type "
                f"annotation; annotate it or pass depends=")

        has_default = param.default is not _EMPTY
        key, is_optional = _unwrap_optional(annotation)
        dependencies.append(Dependency(
            key=key,
            name=param_name,
            optional=has_default,
            default=param.default if has_default else None,
        ))
        if is_optional and not has_default:
            logger.debug(
                f"{callable_name(func)}: Optional parameter '{param_name}' has no "
                f"default and is treated as required")

    return tuple(dependencies)


def analyze_outputs(func: Callable[..., Any],
                    provides: Optional[Union[Any, Sequence[Any]]] = None) -> Tuple[Any, ...]:
    """
    Determine the output types of a constructor.

    Args:
        func: Function or class to analyze
        provides: Explicit output key, or a list/tuple of keys for a
            constructor returning a tuple of values

    Raises:
        TypeError: If the output type cannot be determined
    """
    if provides is not None:
        if isinstance(provides, (list, tuple)):
            if not provides:
                raise TypeError(f"{callable_name(func)}: provides= must not be empty")
            return tuple(provides)
        return (provides,)

    if inspect.isclass(func):
        return (func,)

    try:
        hints = get_type_hints(func)
    except (NameError, TypeError) as e:
        raise TypeError(f"cannot read type hints of {callable_name(func)}: {e}") from e

    output = hints.get('return', _EMPTY)
    if output is _EMPTY or output is None or output is type(None):
        raise TypeError(
            f"constructor {callable_name(func)} has no return annotation; "
            f"annotate it or pass provides=")
    return (output,)


class ProviderRegistry:
    """
    Registry of providers keyed by output type.

    A type is produced by at most one provider; registering a second provider
    for it is rejected so the graph never depends on registration order.
    """

    def __init__(self) -> None:
        self._providers: Dict[Any, Provider] = {}
        self._order: List[Provider] = []

    def register(self, provider: Provider) -> None:
        """
        Register a provider for each of its output types.

        Raises:
            DuplicateProviderError: If an output type is already provided
            ValueError: If the provider claims to produce the lifecycle
        """
        for key in provider.outputs:
            if inspect.isclass(key) and issubclass(key, ILifecycle):
                raise ValueError(
                    f"{provider.name} cannot provide {type_name(key)}: "
                    f"the lifecycle is supplied by the application")
            existing = self._providers.get(key)
            if existing is not None:
                raise DuplicateProviderError(key, existing.name, provider.name)

        for key in provider.outputs:
            self._providers[key] = provider
        self._order.append(provider)
        logger.debug(f"Registered {provider.name} -> {', '.join(provider.output_type_names)}")

    def lookup(self, key: Any, required_by: Optional[str] = None) -> Provider:
        """
        Get the provider for a type.

        Raises:
            UnknownTypeError: If no provider produces the type
        """
        try:
            return self._providers[key]
        except KeyError:
            raise UnknownTypeError(key, required_by) from None
        except TypeError as e:
            raise UnknownTypeError(key, required_by) from e

    def is_registered(self, key: Any) -> bool:
        try:
            return key in self._providers
        except TypeError:
            return False

    def providers(self) -> List[Provider]:
        """All providers in registration order."""
        return list(self._order)

    def __contains__(self, key: Any) -> bool:
        return self.is_registered(key)

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Provider]:
        return iter(self._order)
