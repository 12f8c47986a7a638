# ==============================================================================
# Confluent Kafka Consumer
# ==============================================================================
"""
Confluent Kafka consumer implementation.

Uses the confluent-kafka library (librdkafka C wrapper) to feed inbound
events into the session tracker.
"""

from sessiontracker.consumers.confluent.consumer import SessionTrackerConsumer

__all__ = ["SessionTrackerConsumer"]
