# ==============================================================================
# Kafka Event Sink
# ==============================================================================
"""
EventSink that publishes session events to a Kafka topic (confluent-kafka).

Message format (JSON value, keyed by distinct_id for per-subject ordering):

    {"event": "Session end", "distinct_id": "u1", "timestamp": "...",
     "properties": {...}}
"""

import json
import logging
import time

from sessiontracker.base import EventSink
from sessiontracker.infrastructure.kafka import build_producer_config
from sessiontracker.utils.config import KafkaSettings

logger = logging.getLogger(__name__)

FLUSH_TIMEOUT_SECONDS = 30


class KafkaEventSink(EventSink):
    """Publishes emitted events to the session events topic."""

    def __init__(self, settings: KafkaSettings, producer=None):
        """
        Initialize the sink.

        Args:
            settings: Kafka settings (bootstrap servers, topic, SSL)
            producer: Existing confluent-kafka Producer. If None, creates one.
        """
        if producer is None:
            from confluent_kafka import Producer

            producer = Producer(build_producer_config(settings))

        self._producer = producer
        self._topic = settings.session_events_topic
        self._delivery_errors = 0

    @property
    def delivery_errors(self) -> int:
        return self._delivery_errors

    def _delivery_callback(self, err, msg) -> None:
        """Callback for message delivery reports."""
        if err is not None:
            self._delivery_errors += 1
            logger.error("Session event delivery failed: %s", err)

    def emit(self, event_name: str, properties: dict) -> None:
        """Publish one event; delivery is confirmed asynchronously."""
        distinct_id = properties.get("distinct_id")
        message = {
            "event": event_name,
            "distinct_id": distinct_id,
            "timestamp": properties.get("timestamp"),
            "properties": properties,
        }

        max_retries = 5
        for retry in range(max_retries):
            try:
                self._producer.produce(
                    self._topic,
                    key=str(distinct_id) if distinct_id is not None else None,
                    value=json.dumps(message),
                    callback=self._delivery_callback,
                )
                break
            except BufferError:
                if retry == max_retries - 1:
                    raise
                # Queue full - poll to drain and wait before retry
                self._producer.poll(1.0)
                time.sleep(0.1 * (retry + 1))

        # Serve delivery callbacks without blocking
        self._producer.poll(0)

    def close(self) -> None:
        """Flush outstanding messages."""
        remaining = self._producer.flush(FLUSH_TIMEOUT_SECONDS)
        if remaining:
            logger.warning("%d session event(s) not delivered before shutdown", remaining)
