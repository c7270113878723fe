"""
Event sinks that do not log.
"""

from typing import List, Type

from ..core.domain.events import Event
from ..core.interfaces.events import IEventSink


class NullEventSink(IEventSink):
    """Discards every event."""

    def handle(self, event: Event) -> None:
        pass


class RecordingEventSink(IEventSink):
    """Keeps every event in arrival order."""

    def __init__(self) -> None:
        self.events: List[Event] = []

    def handle(self, event: Event) -> None:
        self.events.append(event)

    @property
    def kinds(self) -> List[str]:
        return [event.kind for event in self.events]

    def of_type(self, event_type: Type[Event]) -> List[Event]:
        return [event for event in self.events if isinstance(event, event_type)]

    def clear(self) -> None:
        self.events.clear()
