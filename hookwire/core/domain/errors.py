"""
Exception hierarchy for the container and the lifecycle orchestrator.

Registry and resolver errors abort the graph build. Hook errors are raised
by the orchestrator after rollback or after every stop hook has run.
"""

from typing import Any, List, Optional, Sequence


def type_name(key: Any) -> str:
    """Readable name for a type key (class, NewType, or any hashable)."""
    module = getattr(key, '__module__', None)
    qualname = getattr(key, '__qualname__', None) or getattr(key, '__name__', None)
    if qualname is None:
        return repr(key)
    if module in (None, 'builtins'):
        return str(qualname)
    return f"{module}.{qualname}"


class HookwireError(Exception):
    """Base class for all container and lifecycle errors."""
    pass


class DuplicateProviderError(HookwireError):
    """Raised when a second provider is registered for an output type."""

    def __init__(self, key: Any, existing: str, duplicate: str):
        super().__init__(
            f"{type_name(key)} is already provided by {existing}; "
            f"cannot register {duplicate}")
        self.key = key
        self.existing = existing
        self.duplicate = duplicate


class UnknownTypeError(HookwireError):
    """Raised when a type is requested that no provider produces."""

    def __init__(self, key: Any, required_by: Optional[str] = None):
        message = f"missing type: {type_name(key)}"
        if required_by:
            message += f" (required by {required_by})"
        super().__init__(message)
        self.key = key
        self.required_by = required_by


class CyclicDependencyError(HookwireError):
    """Raised when the dependency graph of a request contains a cycle."""

    def __init__(self, cycle: Sequence[Any]):
        self.cycle = list(cycle)
        path = " -> ".join(type_name(key) for key in self.cycle)
        super().__init__(f"cycle detected in dependency graph: {path}")


class ConstructionError(HookwireError):
    """Wraps an exception raised by a constructor."""

    def __init__(self, constructor: str, cause: BaseException):
        super().__init__(f"constructor {constructor} failed: {cause}")
        self.constructor = constructor
        self.cause = cause


class InvokeError(HookwireError):
    """Raised when an invoke target lets an exception escape."""

    def __init__(self, function: str, cause: BaseException):
        super().__init__(f"invoke target {function} failed: {cause}")
        self.function = function
        self.cause = cause


class LifecycleStateError(HookwireError):
    """Raised on an illegal application state transition."""
    pass


class StartHookError(HookwireError):
    """Wraps a failing OnStart hook; triggers rollback."""

    def __init__(self, hook: str, cause: Optional[BaseException] = None,
                 message: Optional[str] = None):
        super().__init__(message or f"OnStart hook {hook} failed: {cause}")
        self.hook = hook
        self.cause = cause


class StartTimeoutError(StartHookError):
    """Raised when the start deadline elapses inside or before a hook."""

    def __init__(self, hook: str, timeout: float):
        super().__init__(
            hook, message=f"OnStart hook {hook} did not finish within the "
                          f"{timeout:g}s start timeout")
        self.timeout = timeout


class StopHookError(HookwireError):
    """Wraps a failing OnStop hook."""

    def __init__(self, hook: str, cause: Optional[BaseException] = None,
                 message: Optional[str] = None):
        super().__init__(message or f"OnStop hook {hook} failed: {cause}")
        self.hook = hook
        self.cause = cause


class StopTimeoutError(StopHookError):
    """Raised when the stop deadline elapses inside or before a hook."""

    def __init__(self, hook: str, timeout: float):
        super().__init__(
            hook, message=f"OnStop hook {hook} did not finish within the "
                          f"{timeout:g}s stop timeout")
        self.timeout = timeout


class CombinedStopError(HookwireError):
    """Raised when more than one OnStop hook failed."""

    def __init__(self, errors: List[StopHookError]):
        self.errors = list(errors)
        details = "; ".join(str(e) for e in self.errors)
        super().__init__(f"{len(self.errors)} OnStop hooks failed: {details}")
