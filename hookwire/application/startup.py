"""
Application startup and shutdown orchestration.

This module runs the hooks collected while the object graph was built: every
OnStart hook in registration order within a start budget, and every OnStop
hook in reverse order within a stop budget. A failing start rolls back the
hooks that had already started.
"""

import asyncio
import inspect
import logging
import time
from enum import Enum, auto
from typing import List, Optional

from ..core.domain.errors import (
    CombinedStopError,
    HookwireError,
    LifecycleStateError,
    StartHookError,
    StartTimeoutError,
    StopHookError,
    StopTimeoutError,
)
from ..core.domain.events import (
    OnStartExecuted,
    OnStartExecuting,
    OnStopExecuted,
    OnStopExecuting,
    RolledBack,
    RollingBack,
    Started,
    Stopped,
)
from ..core.interfaces.events import IEventSink
from ..core.interfaces.lifecycle import Hook, HookFunc
from .lifecycle import HookRegistry

logger = logging.getLogger(__name__)

DEFAULT_START_TIMEOUT = 15.0
DEFAULT_STOP_TIMEOUT = 5.0


class AppState(Enum):
    """Application lifecycle states."""
    NOT_STARTED = auto()
    STARTING = auto()
    RUNNING = auto()
    STOPPING = auto()
    STOPPED = auto()
    START_FAILED = auto()


class _DeadlineExceeded(Exception):
    pass


class Application:
    """
    Runs lifecycle hooks with ordering, timeout and rollback guarantees.

    Hooks run one at a time on the calling event loop. Start may be called
    once; stop is idempotent and only runs hooks when the application is
    running.
    """

    def __init__(self, hooks: HookRegistry, event_sink: IEventSink,
                 start_timeout: float = DEFAULT_START_TIMEOUT,
                 stop_timeout: float = DEFAULT_STOP_TIMEOUT) -> None:
        self._hooks = hooks
        self._sink = event_sink
        self._start_timeout = start_timeout
        self._stop_timeout = stop_timeout
        self._state = AppState.NOT_STARTED
        self._started_hooks: List[Hook] = []

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def start_timeout(self) -> float:
        return self._start_timeout

    @property
    def stop_timeout(self) -> float:
        return self._stop_timeout

    async def start(self, timeout: Optional[float] = None) -> None:
        """
        Run every OnStart hook in registration order.

        Args:
            timeout: Total start budget in seconds; defaults to the
                configured start timeout

        Raises:
            LifecycleStateError: If the application was already started
            StartHookError: If a hook failed; started hooks were rolled back
            StartTimeoutError: If the budget ran out
        """
        if self._state is not AppState.NOT_STARTED:
            raise LifecycleStateError(
                f"cannot start application in state {self._state.name}")

        budget = self._start_timeout if timeout is None else timeout
        self._hooks.freeze()
        self._state = AppState.STARTING
        logger.debug(f"Starting {len(self._hooks)} lifecycle hooks (timeout {budget:g}s)")

        deadline = self._now() + budget
        try:
            for hook in self._hooks:
                await self._start_hook(hook, deadline, budget)
                self._started_hooks.append(hook)
        except StartHookError as error:
            self._sink.handle(RollingBack(start_err=error))
            rollback_error = await self._rollback()
            self._sink.handle(RolledBack(err=rollback_error))
            self._state = AppState.START_FAILED
            self._sink.handle(Started(err=error))
            raise

        self._state = AppState.RUNNING
        self._sink.handle(Started())

    async def stop(self, timeout: Optional[float] = None) -> None:
        """
        Run every OnStop hook in reverse registration order.

        Every hook runs even when an earlier one failed. Calling stop when
        the application is not running only emits ``Stopped``.

        Args:
            timeout: Total stop budget in seconds; defaults to the
                configured stop timeout

        Raises:
            StopHookError: If exactly one hook failed
            StopTimeoutError: If the budget ran out inside or before a hook
            CombinedStopError: If several hooks failed
        """
        if self._state is not AppState.RUNNING:
            logger.debug(f"Stop requested in state {self._state.name}; nothing to stop")
            self._sink.handle(Stopped())
            return

        budget = self._stop_timeout if timeout is None else timeout
        self._state = AppState.STOPPING
        errors = await self._stop_hooks(self._started_hooks, budget)
        self._started_hooks = []
        self._state = AppState.STOPPED

        error = self._combine(errors)
        self._sink.handle(Stopped(err=error))
        if error is not None:
            raise error

    async def _rollback(self) -> Optional[HookwireError]:
        """Stop hooks that already started; errors are logged, not raised."""
        errors = await self._stop_hooks(self._started_hooks, self._stop_timeout)
        self._started_hooks = []
        for error in errors:
            logger.error(f"Rollback error: {error}")
        return self._combine(errors)

    async def _stop_hooks(self, hooks: List[Hook], budget: float) -> List[StopHookError]:
        deadline = self._now() + budget
        errors: List[StopHookError] = []
        for hook in reversed(hooks):
            error = await self._stop_hook(hook, deadline, budget)
            if error is not None:
                errors.append(error)
            if isinstance(error, StopTimeoutError):
                # the timer may fire marginally early; the budget is spent
                deadline = min(deadline, self._now())
        return errors

    async def _start_hook(self, hook: Hook, deadline: float, budget: float) -> None:
        if hook.on_start is None:
            return

        name = hook.on_start_name
        self._sink.handle(OnStartExecuting(function_name=name, caller_name=hook.caller_name))
        began = time.perf_counter()
        error: Optional[StartHookError] = None
        try:
            await self._execute(hook.on_start, deadline)
        except _DeadlineExceeded as e:
            error = StartTimeoutError(name, budget)
            error.__cause__ = e.__cause__
        except (Exception, asyncio.CancelledError) as e:
            # a hook raising CancelledError has failed, it was not cancelled
            error = StartHookError(name, e)
            error.__cause__ = e

        self._sink.handle(OnStartExecuted(
            function_name=name,
            caller_name=hook.caller_name,
            runtime=time.perf_counter() - began,
            err=error,
        ))
        if error is not None:
            raise error

    async def _stop_hook(self, hook: Hook, deadline: float,
                         budget: float) -> Optional[StopHookError]:
        if hook.on_stop is None:
            return None

        name = hook.on_stop_name
        self._sink.handle(OnStopExecuting(function_name=name, caller_name=hook.caller_name))
        began = time.perf_counter()
        error: Optional[StopHookError] = None
        try:
            await self._execute(hook.on_stop, deadline)
        except _DeadlineExceeded as e:
            error = StopTimeoutError(name, budget)
            error.__cause__ = e.__cause__
        except (Exception, asyncio.CancelledError) as e:
            error = StopHookError(name, e)
            error.__cause__ = e

        self._sink.handle(OnStopExecuted(
            function_name=name,
            caller_name=hook.caller_name,
            runtime=time.perf_counter() - began,
            err=error,
        ))
        return error

    async def _execute(self, func: HookFunc, deadline: float) -> None:
        """
        Run one hook callable within the deadline.

        Coroutines are cancelled when the deadline passes. Plain callables
        cannot be interrupted; overrunning the deadline still counts as a
        timeout.
        """
        remaining = deadline - self._now()
        if remaining <= 0:
            raise _DeadlineExceeded()

        result = func()
        if inspect.isawaitable(result):
            try:
                await asyncio.wait_for(result, timeout=remaining)
            except asyncio.TimeoutError as e:
                raise _DeadlineExceeded() from e
        elif self._now() > deadline:
            raise _DeadlineExceeded()

    @staticmethod
    def _combine(errors: List[StopHookError]) -> Optional[HookwireError]:
        if not errors:
            return None
        if len(errors) == 1:
            return errors[0]
        return CombinedStopError(errors)

    @staticmethod
    def _now() -> float:
        return time.monotonic()
