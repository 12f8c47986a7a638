# ==============================================================================
# Session Gate
# ==============================================================================
"""
Session gate: decides, per inbound event, whether a new session begins.

The gate relies on a single atomic increment of an expiring per-subject
counter. The caller whose increment returns 1 owns the session start: it
emits the start event and schedules the first expiry check. Every qualifying
event then refreshes the counter TTL and the last-seen state.

No locks are taken. Concurrent events for the same subject are safe because
only one of them can observe the counter at 1.
"""

import logging

from sessiontracker.base.cache import Cache
from sessiontracker.base.scheduler import TaskScheduler
from sessiontracker.base.sinks import EventSink
from sessiontracker.core.models import (
    CHECK_SESSION_TASK,
    InboundEvent,
    SessionDescriptor,
    TrackerConfig,
)
from sessiontracker.core.timestamps import Clock, utc_now

logger = logging.getLogger(__name__)


class SessionGate:
    """
    Consumes inbound events and maintains session liveness markers.

    Args:
        config: Immutable tracker configuration
        cache: Store providing the atomic counter and TTLs
        scheduler: Delayed task queue for the expiry watchdog
        sink: Destination for the session-start event
        clock: Wall-clock source, used when an event carries no timestamp
    """

    def __init__(
        self,
        config: TrackerConfig,
        cache: Cache,
        scheduler: TaskScheduler,
        sink: EventSink,
        clock: Clock = utc_now,
    ):
        self._config = config
        self._cache = cache
        self._scheduler = scheduler
        self._sink = sink
        self._clock = clock

    def is_qualifying(self, event: InboundEvent) -> bool:
        """Events we emitted ourselves never count as activity."""
        return event.event not in self._config.synthetic_events

    def handle(self, event: InboundEvent | dict) -> bool:
        """
        Process one inbound event.

        Args:
            event: Inbound event model or raw event dict

        Returns:
            True if the event counted as session activity, False if it was
            skipped (synthetic event name or no distinct_id)
        """
        if not isinstance(event, InboundEvent):
            event = InboundEvent.model_validate(event)

        if not self.is_qualifying(event):
            return False

        subject = event.distinct_id
        if subject is None:
            logger.warning("Skipping event %r without distinct_id", event.event)
            return False

        config = self._config
        timestamp = event.resolve_timestamp(self._clock())
        session_key = config.session_key(subject)

        # First increment in the current window opens the session
        count = self._cache.increment(session_key)
        if count == 1:
            self._start_session(subject, timestamp)

        self._cache.expire(session_key, config.session_length_seconds)
        self._cache.set(config.seen_last_key(subject), timestamp, config.state_ttl_seconds)
        self._cache.set(config.event_count_key(subject), count, config.state_ttl_seconds)
        return True

    def _start_session(self, subject: str, timestamp: str) -> None:
        config = self._config
        logger.info("Session started for %s at %s", subject, timestamp)
        self._sink.emit(
            config.session_start_event,
            {"distinct_id": subject, "timestamp": timestamp},
        )
        descriptor = SessionDescriptor(distinct_id=subject, session_start=timestamp)
        self._scheduler.schedule(
            CHECK_SESSION_TASK,
            descriptor.to_payload(),
            config.session_length_seconds,
            "seconds",
        )
