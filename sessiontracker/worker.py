# ==============================================================================
# Watchdog Worker
# ==============================================================================
"""
Standalone worker that drains due watchdog checks.

The consumer already runs due checks between polls. Extra workers let the
check cadence keep up when the inbound topic is quiet or when many sessions
close at once. Any number of workers can share the same Valkey queue.
"""

import logging
import time

from sessiontracker.base import BaseRunner
from sessiontracker.core import SessionTracker

logger = logging.getLogger(__name__)


class WatchdogWorker(BaseRunner):
    """Polls the delayed task queue and runs due session checks."""

    def __init__(
        self,
        tracker: SessionTracker,
        batch_size: int = 100,
        idle_sleep_seconds: float = 1.0,
        log_level: str = "INFO",
    ):
        super().__init__(log_level=log_level)
        self._tracker = tracker
        self._batch_size = batch_size
        self._idle_sleep_seconds = idle_sleep_seconds
        self._total_checks = 0

    @property
    def total_checks(self) -> int:
        return self._total_checks

    def run_once(self) -> int:
        """Run one batch of due checks. Returns the count executed."""
        executed = self._tracker.run_due_checks(limit=self._batch_size)
        self._total_checks += executed
        return executed

    def _run(self) -> None:
        logger.info("Starting watchdog worker (batch=%d)...", self._batch_size)
        while not self.shutdown_requested:
            # A full batch means more may be due: go again without sleeping
            if self.run_once() < self._batch_size:
                time.sleep(self._idle_sleep_seconds)

    def _cleanup(self) -> None:
        self._tracker.sink.close()
        logger.info("Watchdog worker stopped after %d checks.", self._total_checks)
