# ==============================================================================
# Session Tracker
# ==============================================================================
"""
Facade wiring the session gate and expiry watchdog to one configuration.

The host feeds every inbound event to handle() and drains the delayed job
queue with run_due_checks(). Both halves share the same cache, scheduler,
sink and clock.
"""

import logging
from collections.abc import Iterable

from sessiontracker.base.cache import Cache
from sessiontracker.base.scheduler import TaskHandler, TaskScheduler
from sessiontracker.base.sinks import EventSink
from sessiontracker.core.gate import SessionGate
from sessiontracker.core.models import CHECK_SESSION_TASK, InboundEvent, TrackerConfig
from sessiontracker.core.timestamps import Clock, utc_now
from sessiontracker.core.watchdog import ExpiryWatchdog

logger = logging.getLogger(__name__)


class SessionTracker:
    """
    Session boundary detection over a shared store.

    Args:
        config: Immutable tracker configuration
        cache: Key-value store with atomic counters and TTLs
        scheduler: Durable delayed task queue
        sink: Destination for session start/end events
        clock: Wall-clock source (injectable for tests)
    """

    def __init__(
        self,
        config: TrackerConfig,
        cache: Cache,
        scheduler: TaskScheduler,
        sink: EventSink,
        clock: Clock = utc_now,
    ):
        self.config = config
        self.scheduler = scheduler
        self.sink = sink
        self.gate = SessionGate(config, cache, scheduler, sink, clock)
        self.watchdog = ExpiryWatchdog(config, cache, scheduler, sink, clock)

    @property
    def jobs(self) -> dict[str, TaskHandler]:
        """Delayed job handlers by task name."""
        return {CHECK_SESSION_TASK: self.watchdog.check}

    def handle(self, event: InboundEvent | dict) -> bool:
        """Feed one inbound event to the session gate. True if it was tracked."""
        return self.gate.handle(event)

    def handle_many(self, events: Iterable[InboundEvent | dict]) -> int:
        """
        Feed events in order.

        Returns:
            Count of events that counted as session activity
        """
        tracked = 0
        for event in events:
            if self.gate.handle(event):
                tracked += 1
        return tracked

    def run_due_checks(self, limit: int = 100) -> int:
        """
        Run watchdog checks whose due time has passed.

        Returns:
            Count of checks executed
        """
        return self.scheduler.run_due(self.jobs, limit=limit)
