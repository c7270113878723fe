"""
Hook registry and the lifecycle registrar handed to constructors.
"""

import logging
from dataclasses import replace
from typing import Iterator, List, Optional, Tuple

from ..core.domain.errors import LifecycleStateError
from ..core.interfaces.lifecycle import Hook, HookFunc, ILifecycle

logger = logging.getLogger(__name__)


class HookRegistry:
    """Ordered hook pairs, in the order their constructors registered them."""

    def __init__(self) -> None:
        self._hooks: List[Hook] = []
        self._frozen = False

    def add(self, hook: Hook) -> None:
        if self._frozen:
            raise LifecycleStateError(
                f"cannot register hook from {hook.caller_name or 'unknown caller'}: "
                f"the application has already been started")
        self._hooks.append(hook)
        logger.debug(f"Registered lifecycle hook #{len(self._hooks)} from {hook.caller_name}")

    def freeze(self) -> None:
        """Reject further registrations; called when start begins."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def hooks(self) -> Tuple[Hook, ...]:
        return tuple(self._hooks)

    def __len__(self) -> int:
        return len(self._hooks)

    def __iter__(self) -> Iterator[Hook]:
        return iter(tuple(self._hooks))


class Lifecycle(ILifecycle):
    """
    Registrar bound to a single constructor or invoke target call.

    Every hook appended through it is tagged with that caller's name. The
    registrar is closed once the call returns; appending afterwards fails.
    """

    def __init__(self, registry: HookRegistry, caller_name: str) -> None:
        self._registry = registry
        self._caller_name = caller_name
        self._closed = False

    @property
    def caller_name(self) -> str:
        return self._caller_name

    def append(self, hook: Optional[Hook] = None, *,
               on_start: Optional[HookFunc] = None,
               on_stop: Optional[HookFunc] = None) -> None:
        if self._closed:
            raise LifecycleStateError(
                f"lifecycle of {self._caller_name} used after the call returned")
        if hook is None:
            hook = Hook(on_start=on_start, on_stop=on_stop)
        self._registry.add(replace(hook, caller_name=self._caller_name))

    def close(self) -> None:
        self._closed = True
