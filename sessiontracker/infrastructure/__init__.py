# ==============================================================================
# Infrastructure Adapters
# ==============================================================================
"""
Adapters for external services (ports-and-adapters architecture).

This module contains the concrete implementations of the capability contract:
- cache/ - Cache adapters (Valkey/Redis)
- scheduler.py - Delayed task queue (Valkey sorted set)
- sinks/ - Emitted event sinks (Kafka, HTTP capture, log)
- kafka.py - confluent-kafka configuration and message decoding
- factory.py - SessionTracker assembly from settings
"""

from sessiontracker.infrastructure.cache import (
    ValkeyCache,
    check_valkey_connection,
    create_valkey_client,
)
from sessiontracker.infrastructure.factory import create_scheduler, create_tracker
from sessiontracker.infrastructure.kafka import (
    build_consumer_config,
    build_producer_config,
    decode_message_value,
)
from sessiontracker.infrastructure.scheduler import ValkeyTaskScheduler
from sessiontracker.infrastructure.sinks import (
    HttpCaptureSink,
    KafkaEventSink,
    LoggingEventSink,
    create_sink,
)

__all__ = [
    # Cache
    "ValkeyCache",
    "check_valkey_connection",
    "create_valkey_client",
    # Factory
    "create_scheduler",
    "create_tracker",
    # Kafka
    "build_consumer_config",
    "build_producer_config",
    "decode_message_value",
    # Scheduler
    "ValkeyTaskScheduler",
    # Sinks
    "HttpCaptureSink",
    "KafkaEventSink",
    "LoggingEventSink",
    "create_sink",
]
