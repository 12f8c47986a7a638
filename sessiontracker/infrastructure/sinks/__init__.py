# ==============================================================================
# Event Sink Infrastructure
# ==============================================================================
"""
EventSink implementations for emitted session events.

Available implementations:
- KafkaEventSink: publishes to the session events topic
- HttpCaptureSink: posts to an HTTP capture endpoint
- LoggingEventSink: writes to the application log
"""

from sessiontracker.base import EventSink
from sessiontracker.infrastructure.sinks.http import HttpCaptureSink
from sessiontracker.infrastructure.sinks.kafka import KafkaEventSink
from sessiontracker.infrastructure.sinks.log import LoggingEventSink
from sessiontracker.utils.config import Settings


def create_sink(settings: Settings) -> EventSink:
    """
    Create the sink selected by the SINK_IMPL environment variable.

    - "kafka" (default): publishes to KAFKA_SESSION_EVENTS_TOPIC
    - "http": posts to SINK_HTTP_HOST
    - "log": writes to the application log

    Args:
        settings: Application settings

    Returns:
        Configured EventSink

    Raises:
        ValueError: If unknown implementation is configured
    """
    impl = settings.sink.impl

    match impl:
        case "kafka":
            return KafkaEventSink(settings.kafka)
        case "http":
            return HttpCaptureSink(
                settings.sink.http_host,
                api_key=settings.sink.http_api_key,
                timeout=settings.sink.http_timeout_seconds,
            )
        case "log":
            return LoggingEventSink()
        case _:
            raise ValueError(f"Unknown sink implementation: {impl}")


__all__ = [
    "HttpCaptureSink",
    "KafkaEventSink",
    "LoggingEventSink",
    "create_sink",
]
