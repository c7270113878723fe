"""
Event sink interface.

A sink observes the container and orchestrator. It is called synchronously
in the exact order actions happen and must return promptly.
"""

from abc import ABC, abstractmethod

from ..domain.events import Event


class IEventSink(ABC):
    """Interface for lifecycle event observers."""

    @abstractmethod
    def handle(self, event: Event) -> None:
        """
        Receive one event.

        Args:
            event: The event to record or render
        """
        pass
