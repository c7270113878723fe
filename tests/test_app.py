"""
Tests for building applications from options.
"""

from typing import List, NewType

import pytest

from hookwire import (
    App,
    AppState,
    ConstructionError,
    CyclicDependencyError,
    DuplicateProviderError,
    Invoke,
    InvokeError,
    Lifecycle,
    Module,
    Provide,
    RecordingEventSink,
    StartTimeout,
    StopTimeout,
    Supply,
    UnknownTypeError,
    WithEventSink,
    annotate,
)
from hookwire.core.domain.events import Invoked, LoggerInitialized, Provided, Supplied
from hookwire.core.interfaces.lifecycle import callable_name

Greeting = NewType("Greeting", str)
Name = NewType("Name", str)


class Settings:
    def __init__(self, greeting: str = "hello") -> None:
        self.greeting = greeting


def new_greeting(settings: Settings) -> Greeting:
    return Greeting(settings.greeting)


class TestAppBuild:
    """Building the graph from options."""

    def test_invoke_builds_only_what_it_needs(self) -> None:
        sink = RecordingEventSink()
        calls: List[str] = []

        def new_name() -> Name:
            calls.append("name")
            return Name("unused")

        def greet(greeting: Greeting) -> None:
            calls.append(f"greet:{greeting}")

        app = App(
            Supply(Settings("hi")),
            Provide(new_greeting, new_name),
            Invoke(greet),
            WithEventSink(lambda: sink),
        )

        assert calls == ["greet:hi"]
        assert app.container.instances.keys() == {Settings, Greeting}
        assert app.state is AppState.NOT_STARTED

    def test_supply_annotated_key(self) -> None:
        sink = RecordingEventSink()

        app = App(Supply(annotate("world", provides=Name)), WithEventSink(lambda: sink))

        assert app.container.resolve(Name) == "world"
        assert sink.of_type(Supplied)[0].type_name.endswith("Name")

    def test_annotated_constructor(self) -> None:
        app = App(
            Supply(annotate("x", provides=Name)),
            Provide(annotate(lambda n: Greeting(f"hi {n}"), provides=Greeting,
                             depends=[Name], name="greeting")),
            WithEventSink(RecordingEventSink),
        )

        assert app.container.resolve(Greeting) == "hi x"

    def test_annotated_invoke(self) -> None:
        seen = []

        App(
            Supply(annotate("x", provides=Name)),
            Invoke(annotate(lambda n: seen.append(n), depends=[Name])),
            WithEventSink(RecordingEventSink),
        )

        assert seen == ["x"]

    def test_module_name_tags_events(self) -> None:
        sink = RecordingEventSink()

        App(
            Module("greetings", Supply(Settings()), Provide(new_greeting)),
            Invoke(lambda: None),
            Invoke(annotate(lambda g: None, depends=[Greeting])),
            WithEventSink(lambda: sink),
        )

        assert sink.of_type(Supplied)[0].module_name == "greetings"
        provided = sink.of_type(Provided)[0]
        assert provided.module_name == "greetings"
        assert provided.constructor_name == callable_name(new_greeting)
        assert all(event.module_name == "" for event in sink.of_type(Invoked))

    def test_nested_module_uses_innermost_name(self) -> None:
        sink = RecordingEventSink()

        App(
            Module("outer", Module("inner", Supply(Settings())), Provide(new_greeting)),
            Invoke(annotate(lambda g: None, depends=[Greeting])),
            WithEventSink(lambda: sink),
        )

        assert sink.of_type(Supplied)[0].module_name == "inner"
        assert sink.of_type(Provided)[0].module_name == "outer"

    def test_empty_module_name_rejected(self) -> None:
        with pytest.raises(ValueError):
            Module("")

    def test_timeouts(self) -> None:
        app = App(StartTimeout(1.5), StopTimeout(2.5), WithEventSink(RecordingEventSink))

        assert app.start_timeout == 1.5
        assert app.stop_timeout == 2.5

    def test_non_positive_timeout_rejected(self) -> None:
        with pytest.raises(ValueError):
            StartTimeout(0)
        with pytest.raises(ValueError):
            StopTimeout(-1)


class TestAppBuildErrors:
    """Errors raised while building."""

    def test_duplicate_provider(self) -> None:
        with pytest.raises(DuplicateProviderError):
            App(Supply(Settings()), Supply(Settings()), WithEventSink(RecordingEventSink))

    def test_duplicate_provider_reported(self) -> None:
        sink = RecordingEventSink()

        def other_greeting() -> Greeting:
            return Greeting("hey")

        with pytest.raises(DuplicateProviderError) as exc_info:
            App(Provide(new_greeting, other_greeting), WithEventSink(lambda: sink))

        assert sink.kinds == ["LoggerInitialized", "Provided"]
        event = sink.events[-1]
        assert event.constructor_name == callable_name(other_greeting)
        assert event.err is exc_info.value

    def test_duplicate_supply_reported(self) -> None:
        sink = RecordingEventSink()

        with pytest.raises(DuplicateProviderError):
            App(Supply(Settings()), Supply(Settings()), WithEventSink(lambda: sink))

        assert sink.kinds == ["LoggerInitialized", "Supplied"]
        assert sink.events[-1].failed

    def test_supply_with_several_keys_reported(self) -> None:
        sink = RecordingEventSink()

        with pytest.raises(TypeError):
            App(Supply(annotate("x", provides=[Name, Greeting])), WithEventSink(lambda: sink))

        assert sink.kinds == ["LoggerInitialized", "Supplied"]
        assert isinstance(sink.events[-1].err, TypeError)

    def test_missing_type(self) -> None:
        def use(name: Name) -> None:
            pass

        with pytest.raises(UnknownTypeError):
            App(Invoke(use), WithEventSink(RecordingEventSink))

    def test_cycle(self) -> None:
        with pytest.raises(CyclicDependencyError):
            App(
                Provide(annotate(lambda g: Name(g), provides=Name, depends=[Greeting]),
                        annotate(lambda n: Greeting(n), provides=Greeting, depends=[Name])),
                Invoke(annotate(lambda n: None, depends=[Name])),
                WithEventSink(RecordingEventSink),
            )

    def test_invoke_error_stops_later_invokes(self) -> None:
        calls = []

        def first() -> None:
            raise RuntimeError("boom")

        def second() -> None:
            calls.append("second")

        with pytest.raises(InvokeError):
            App(Invoke(first, second), WithEventSink(RecordingEventSink))

        assert calls == []


class TestEventSinkOption:
    """Custom event sinks."""

    def test_custom_sink_reports_initialization(self) -> None:
        sink = RecordingEventSink()

        def new_sink() -> RecordingEventSink:
            return sink

        app = App(WithEventSink(new_sink))

        assert app.event_sink is sink
        initialized = sink.of_type(LoggerInitialized)
        assert len(initialized) == 1
        assert initialized[0].constructor_name == callable_name(new_sink)
        assert not initialized[0].failed

    def test_failing_sink_factory(self) -> None:
        def new_sink() -> RecordingEventSink:
            raise RuntimeError("no sink for you")

        with pytest.raises(ConstructionError) as exc_info:
            App(WithEventSink(new_sink))

        assert isinstance(exc_info.value.cause, RuntimeError)

    def test_sink_without_handle_rejected(self) -> None:
        with pytest.raises(ConstructionError):
            App(WithEventSink(lambda: object()))  # type: ignore[arg-type,return-value]

    def test_last_sink_option_wins(self) -> None:
        first = RecordingEventSink()
        second = RecordingEventSink()

        app = App(WithEventSink(lambda: first), WithEventSink(lambda: second))

        assert app.event_sink is second
        assert first.events == []


class TestAppLifecycle:
    """Starting and stopping a built application."""

    @pytest.mark.asyncio
    async def test_hooks_from_constructors_run(self) -> None:
        calls: List[str] = []

        def new_name(lifecycle: Lifecycle) -> Name:
            lifecycle.append(on_start=lambda: calls.append("start"),
                             on_stop=lambda: calls.append("stop"))
            return Name("svc")

        def use(name: Name) -> None:
            calls.append(f"use:{name}")

        app = App(Provide(new_name), Invoke(use), WithEventSink(RecordingEventSink))
        await app.start()
        assert app.state is AppState.RUNNING
        await app.stop()

        assert calls == ["use:svc", "start", "stop"]
        assert app.state is AppState.STOPPED
