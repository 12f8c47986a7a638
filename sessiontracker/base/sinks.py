# ==============================================================================
# Event Sink Abstract Class
# ==============================================================================
"""
Base class for event sinks.

A sink receives the synthetic session-start and session-end events. Emission
is fire-and-forget from the tracker's point of view; buffering and delivery
guarantees belong to the implementation.
"""

from abc import ABC, abstractmethod


class EventSink(ABC):
    """Base class for emitted event sinks."""

    @abstractmethod
    def emit(self, event_name: str, properties: dict) -> None:
        """
        Emit a single event.

        Args:
            event_name: Name of the event (e.g., "Session start")
            properties: Event properties, always including distinct_id
                and timestamp
        """
        ...

    def close(self) -> None:
        """
        Release sink resources.

        Called when the process is shutting down.
        Use this to flush buffers, close connections, etc.
        """
        pass
