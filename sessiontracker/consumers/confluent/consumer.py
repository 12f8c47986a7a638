# ==============================================================================
# Confluent Kafka Session Tracker Consumer
# ==============================================================================
"""
Inbound event consumer using confluent-kafka (librdkafka C wrapper).

Each loop iteration:
1. consume() a batch of inbound events
2. hand every event to the session tracker in partition order
3. commit offsets
4. run the watchdog checks that have come due

Offsets are only committed after the tracker has processed the batch, so a
crash (e.g. Valkey unreachable after retries) replays the batch on restart.
"""

import logging
import time

from pydantic import ValidationError

from sessiontracker.base import BaseRunner
from sessiontracker.core import SessionTracker
from sessiontracker.infrastructure.kafka import build_consumer_config, decode_message_value
from sessiontracker.utils.config import Settings

logger = logging.getLogger(__name__)

SUMMARY_INTERVAL_SECONDS = 30


class SessionTrackerConsumer(BaseRunner):
    """Consumes inbound events from Kafka and drives the session tracker."""

    def __init__(
        self,
        tracker: SessionTracker,
        consumer,
        topic: str,
        batch_size: int = 500,
        poll_timeout_ms: int = 1000,
        worker_batch_size: int = 100,
        run_watchdog: bool = True,
        log_level: str = "INFO",
    ):
        """
        Initialize the consumer runner.

        Args:
            tracker: Session tracker receiving the events
            consumer: confluent-kafka Consumer (or compatible object)
            topic: Inbound events topic
            batch_size: Messages per consume() call
            poll_timeout_ms: consume() timeout in milliseconds
            worker_batch_size: Max due watchdog checks to run per iteration
            run_watchdog: Also drain due watchdog checks between polls
            log_level: Logging level for the runner process
        """
        super().__init__(log_level=log_level)
        self._tracker = tracker
        self._consumer = consumer
        self._topic = topic
        self._batch_size = batch_size
        self._poll_timeout = poll_timeout_ms / 1000.0
        self._worker_batch_size = worker_batch_size
        self._run_watchdog = run_watchdog

        self._total_events = 0
        self._total_skipped = 0
        self._total_checks = 0
        self._last_summary = time.monotonic()

    @classmethod
    def from_settings(
        cls, settings: Settings, tracker: SessionTracker, run_watchdog: bool = True
    ) -> "SessionTrackerConsumer":
        """Create a runner with a confluent-kafka Consumer built from settings."""
        from confluent_kafka import Consumer

        consumer = Consumer(build_consumer_config(settings.kafka, settings.consumer))
        return cls(
            tracker,
            consumer,
            settings.kafka.events_topic,
            batch_size=settings.consumer.batch_size,
            poll_timeout_ms=settings.consumer.poll_timeout_ms,
            worker_batch_size=settings.consumer.worker_batch_size,
            run_watchdog=run_watchdog,
            log_level=settings.log_level,
        )

    # ==========================================================================
    # Run loop
    # ==========================================================================

    def _run(self) -> None:
        def on_assign(consumer, partitions):
            logger.info(
                "Assigned %d partitions: %s",
                len(partitions),
                [f"{p.topic}-{p.partition}" for p in partitions],
            )

        def on_revoke(consumer, partitions):
            logger.info("Revoked %d partitions", len(partitions))

        self._consumer.subscribe([self._topic], on_assign=on_assign, on_revoke=on_revoke)

        logger.info("Starting session tracker consumer (confluent-kafka)...")
        logger.info("Topic: %s", self._topic)

        while not self.shutdown_requested:
            self.poll_once()

    def poll_once(self) -> int:
        """
        Run one consume / process / commit / watchdog iteration.

        Returns:
            Count of events handed to the tracker
        """
        messages = self._consumer.consume(
            num_messages=self._batch_size,
            timeout=self._poll_timeout,
        )

        handled = 0
        if messages:
            handled = self.process_messages(messages)
            self._consumer.commit(asynchronous=False)

        if self._run_watchdog:
            self._total_checks += self._tracker.run_due_checks(limit=self._worker_batch_size)

        self._maybe_log_summary()
        return handled

    def process_messages(self, messages: list) -> int:
        """
        Hand decoded events to the tracker.

        Malformed messages are logged and skipped. Store failures propagate.

        Returns:
            Count of events handed to the tracker
        """
        handled = 0
        for msg in messages:
            error = msg.error()
            if error:
                logger.error("Consumer error: %s", error)
                continue

            event = decode_message_value(msg.value())
            if event is None:
                self._total_skipped += 1
                continue

            try:
                self._tracker.handle(event)
            except ValidationError as e:
                logger.warning("Skipping invalid event: %s", e.errors(include_url=False))
                self._total_skipped += 1
                continue
            handled += 1

        self._total_events += handled
        return handled

    def _maybe_log_summary(self) -> None:
        now = time.monotonic()
        if now - self._last_summary < SUMMARY_INTERVAL_SECONDS:
            return
        self._last_summary = now
        logger.info(
            "Summary: events=%s skipped=%s checks=%s",
            f"{self._total_events:,}",
            f"{self._total_skipped:,}",
            f"{self._total_checks:,}",
        )

    def _cleanup(self) -> None:
        logger.info(
            "Final: events=%s skipped=%s checks=%s",
            f"{self._total_events:,}",
            f"{self._total_skipped:,}",
            f"{self._total_checks:,}",
        )
        self._consumer.close()
        self._tracker.sink.close()
        logger.info("Session tracker consumer shutdown complete.")
