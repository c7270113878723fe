"""
Tests for the process supervisor.

This module tests the exit status of a supervised run, signal handling and
the ``run_app`` entry point.
"""

import asyncio
import os
import signal
import sys
from typing import List, NewType

import pytest

from hookwire import (
    App,
    AppState,
    Invoke,
    Lifecycle,
    Provide,
    RecordingEventSink,
    StopTimeout,
    StopTimeoutError,
    Supervisor,
    WithEventSink,
    run_app,
)
from hookwire.application.options import Option
from hookwire.application.supervisor import EXIT_FAILURE, EXIT_OK
from hookwire.core.domain.events import Stopping

Worker = NewType("Worker", str)


def build_app(sink: RecordingEventSink, calls: List[str],
              fail_start: bool = False, fail_stop: bool = False) -> App:
    def on_start() -> None:
        calls.append("start")
        if fail_start:
            raise RuntimeError("cannot start worker")

    def on_stop() -> None:
        calls.append("stop")
        if fail_stop:
            raise RuntimeError("cannot stop worker")

    def new_worker(lifecycle: Lifecycle) -> Worker:
        lifecycle.append(on_start=on_start, on_stop=on_stop)
        return Worker("worker")

    def use_worker(worker: Worker) -> None:
        pass

    return App(Provide(new_worker), Invoke(use_worker), WithEventSink(lambda: sink))


def slow_stop_options(sink: RecordingEventSink, *options: Option) -> List[Option]:
    async def on_stop() -> None:
        await asyncio.sleep(0.2)

    def new_worker(lifecycle: Lifecycle) -> Worker:
        lifecycle.append(on_stop=on_stop)
        return Worker("worker")

    def use_worker(worker: Worker) -> None:
        pass

    return [Provide(new_worker), Invoke(use_worker), WithEventSink(lambda: sink), *options]


async def wait_for_state(app: App, state: AppState, timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while app.state is not state:
        if loop.time() > deadline:
            raise AssertionError(f"application did not reach {state.name}")
        await asyncio.sleep(0.01)


class TestSupervisor:
    """Supervised start/stop cycles."""

    @pytest.mark.asyncio
    async def test_shutdown_request_returns_ok(self) -> None:
        sink = RecordingEventSink()
        calls: List[str] = []
        app = build_app(sink, calls)
        supervisor = Supervisor(app)

        task = asyncio.create_task(supervisor.serve())
        await wait_for_state(app, AppState.RUNNING)
        supervisor.request_shutdown(signal.SIGINT)

        assert await asyncio.wait_for(task, timeout=5) == EXIT_OK
        assert calls == ["start", "stop"]
        stopping = sink.of_type(Stopping)
        assert len(stopping) == 1
        assert stopping[0].signal == "SIGINT"
        assert sink.kinds[-3:] == ["OnStopExecuting", "OnStopExecuted", "Stopped"]

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX signals required")
    async def test_sigterm_triggers_shutdown(self) -> None:
        sink = RecordingEventSink()
        calls: List[str] = []
        app = build_app(sink, calls)
        supervisor = Supervisor(app)

        task = asyncio.create_task(supervisor.serve())
        await wait_for_state(app, AppState.RUNNING)
        os.kill(os.getpid(), signal.SIGTERM)

        assert await asyncio.wait_for(task, timeout=5) == EXIT_OK
        assert sink.of_type(Stopping)[0].signal == "SIGTERM"
        assert app.state is AppState.STOPPED

    @pytest.mark.asyncio
    async def test_start_failure_returns_failure(self) -> None:
        sink = RecordingEventSink()
        calls: List[str] = []
        app = build_app(sink, calls, fail_start=True)

        code = await Supervisor(app).serve()

        assert code == EXIT_FAILURE
        assert app.state is AppState.START_FAILED
        assert "Stopping" not in sink.kinds

    @pytest.mark.asyncio
    async def test_stop_failure_returns_failure(self) -> None:
        sink = RecordingEventSink()
        calls: List[str] = []
        app = build_app(sink, calls, fail_stop=True)
        supervisor = Supervisor(app, block=False)

        code = await supervisor.serve()

        assert code == EXIT_FAILURE
        assert calls == ["start", "stop"]
        assert sink.events[-1].failed

    @pytest.mark.asyncio
    async def test_non_blocking_run(self) -> None:
        sink = RecordingEventSink()
        calls: List[str] = []
        app = build_app(sink, calls)

        code = await Supervisor(app, block=False).serve()

        assert code == EXIT_OK
        assert calls == ["start", "stop"]
        assert sink.of_type(Stopping) == []

    @pytest.mark.asyncio
    async def test_shutdown_requested_before_wait(self) -> None:
        sink = RecordingEventSink()
        app = build_app(sink, [])
        supervisor = Supervisor(app)

        supervisor.request_shutdown()

        assert await supervisor.serve() == EXIT_OK
        assert sink.of_type(Stopping)[0].signal == "SIGTERM"

    @pytest.mark.asyncio
    async def test_configured_stop_timeout_applies(self) -> None:
        sink = RecordingEventSink()
        app = App(*slow_stop_options(sink, StopTimeout(0.05)))

        code = await Supervisor(app, block=False).serve()

        assert code == EXIT_FAILURE
        assert app.state is AppState.STOPPED
        assert isinstance(sink.events[-1].err, StopTimeoutError)

    @pytest.mark.asyncio
    async def test_explicit_stop_timeout_overrides_configured(self) -> None:
        sink = RecordingEventSink()
        app = App(*slow_stop_options(sink, StopTimeout(0.05)))

        code = await Supervisor(app, stop_timeout=2.0, block=False).serve()

        assert code == EXIT_OK
        assert not sink.events[-1].failed


class TestRunApp:
    """The run_app entry point."""

    def test_build_failure_returns_failure(self) -> None:
        def use_worker(worker: Worker) -> None:
            pass

        assert run_app(Invoke(use_worker), WithEventSink(RecordingEventSink)) == EXIT_FAILURE

    def test_clean_run(self) -> None:
        sink = RecordingEventSink()
        calls: List[str] = []

        def new_worker(lifecycle: Lifecycle) -> Worker:
            lifecycle.append(on_start=lambda: calls.append("start"),
                             on_stop=lambda: calls.append("stop"))
            return Worker("worker")

        def use_worker(worker: Worker) -> None:
            pass

        code = run_app(Provide(new_worker), Invoke(use_worker),
                       WithEventSink(lambda: sink), block=False)

        assert code == EXIT_OK
        assert calls == ["start", "stop"]

    def test_configured_stop_timeout_applies(self) -> None:
        sink = RecordingEventSink()

        code = run_app(*slow_stop_options(sink, StopTimeout(0.05)), block=False)

        assert code == EXIT_FAILURE
        assert isinstance(sink.events[-1].err, StopTimeoutError)
