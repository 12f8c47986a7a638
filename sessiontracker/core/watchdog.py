# ==============================================================================
# Expiry Watchdog
# ==============================================================================
"""
Expiry watchdog: the deferred check that closes idle sessions.

Each invocation inspects the session counter for its subject:

- ALIVE (counter present): reschedule itself after the recheck interval.
- EXPIRED (counter absent): emit the session-end event and stop.

Invocations cannot be cancelled once enqueued, so a stale or duplicate
wake-up must be harmless: it either reschedules or closes on the same
observable state.
"""

import logging
from datetime import datetime

from sessiontracker.base.cache import Cache
from sessiontracker.base.scheduler import TaskScheduler
from sessiontracker.base.sinks import EventSink
from sessiontracker.core.models import CHECK_SESSION_TASK, SessionDescriptor, TrackerConfig
from sessiontracker.core.timestamps import Clock, format_timestamp, parse_timestamp, utc_now

logger = logging.getLogger(__name__)


class ExpiryWatchdog:
    """
    Self-rescheduling session expiry check.

    Args:
        config: Immutable tracker configuration
        cache: Store holding the session counter and last-seen state
        scheduler: Delayed task queue used to reschedule
        sink: Destination for the session-end event
        clock: Wall-clock source
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

    def check(self, descriptor: SessionDescriptor | dict) -> None:
        """
        Close the session if it went idle, otherwise check again later.

        Args:
            descriptor: Session descriptor or its job payload
        """
        if not isinstance(descriptor, SessionDescriptor):
            descriptor = SessionDescriptor.from_payload(descriptor)

        if self._cache.exists(self._config.session_key(descriptor.distinct_id)):
            self._reschedule(descriptor)
        else:
            self._close(descriptor)

    def _reschedule(self, descriptor: SessionDescriptor) -> None:
        logger.debug(
            "Session for %s still alive, rechecking in %ds",
            descriptor.distinct_id,
            self._config.recheck_interval_seconds,
        )
        self._scheduler.schedule(
            CHECK_SESSION_TASK,
            descriptor.to_payload(),
            self._config.recheck_interval_seconds,
            "seconds",
        )

    def _close(self, descriptor: SessionDescriptor) -> None:
        config = self._config
        subject = descriptor.distinct_id
        now = self._clock()

        seen_last_key = config.seen_last_key(subject)
        count_key = config.event_count_key(subject)

        seen_last_dt = parse_timestamp(self._cache.get(seen_last_key))
        if seen_last_dt is None:
            # Last-seen never written or already gone: approximate it
            seen_last_dt = now - config.session_length
            logger.warning(
                "No last-seen timestamp for %s, assuming %s",
                subject,
                format_timestamp(seen_last_dt),
            )
        seen_last = format_timestamp(seen_last_dt)

        properties = {
            "distinct_id": subject,
            "timestamp": seen_last,
            "duration.seconds": self._duration_seconds(descriptor, seen_last_dt),
            "session.start": descriptor.session_start,
            "seen.last": seen_last,
            "seen.last.elapsed-since.seconds": (now - seen_last_dt).total_seconds(),
        }

        event_count = self._cache.get(count_key)
        if isinstance(event_count, int) and event_count > 0:
            properties["session.events.count"] = event_count

        # Last-seen and count must survive a failed emit
        self._sink.emit(config.session_end_event, properties)
        logger.info(
            "Session ended for %s (duration=%.0fs)", subject, properties["duration.seconds"]
        )

        self._cache.set(seen_last_key, None)
        self._cache.set(count_key, None)

    @staticmethod
    def _duration_seconds(descriptor: SessionDescriptor, seen_last: datetime) -> float:
        session_start = parse_timestamp(descriptor.session_start)
        if session_start is None:
            logger.warning(
                "Unparseable session start %r for %s, reporting zero duration",
                descriptor.session_start,
                descriptor.distinct_id,
            )
            return 0.0
        return (seen_last - session_start).total_seconds()
