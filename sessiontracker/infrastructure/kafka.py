# ==============================================================================
# Kafka Infrastructure
# ==============================================================================
"""
confluent-kafka client configuration and message decoding.

This module consolidates the Kafka plumbing shared by the inbound event
consumer and the outbound session event sink:
- Client configuration (SSL, PLAINTEXT, reliability settings)
- JSON message decoding

Note: confluent-kafka uses dot-notation keys (e.g., 'bootstrap.servers').
"""

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from sessiontracker.utils.config import ConsumerSettings, KafkaSettings

logger = logging.getLogger(__name__)


# ==============================================================================
# Configuration
# ==============================================================================


def _security_config(settings: "KafkaSettings") -> dict:
    """Security settings shared by producers and consumers."""
    if settings.security_protocol != "SSL":
        return {"security.protocol": "PLAINTEXT"}

    config = {"security.protocol": "SSL"}
    file_settings = {
        "ssl.ca.location": settings.ssl_ca_file,
        "ssl.certificate.location": settings.ssl_cert_file,
        "ssl.key.location": settings.ssl_key_file,
    }
    for option, file_name in file_settings.items():
        if not file_name:
            continue
        path = Path(file_name).expanduser()
        if path.exists():
            config[option] = str(path)
        else:
            logger.warning("Kafka SSL file not found: %s", path)
    return config


def build_producer_config(settings: "KafkaSettings") -> dict:
    """
    Build confluent-kafka producer configuration from settings.

    Session events are low volume, so the producer favours delivery
    guarantees over batching throughput.

    Args:
        settings: KafkaSettings instance

    Returns:
        Dict with confluent-kafka producer configuration
    """
    config = {
        "bootstrap.servers": settings.bootstrap_servers,
        # Reliability settings
        "acks": "all",  # Wait for all replicas
        "enable.idempotence": True,
        "retries": 10,
        "retry.backoff.ms": 100,
        # Small linger to batch start/end bursts
        "linger.ms": 5,
        "compression.type": "lz4",
    }
    config.update(_security_config(settings))
    return config


def build_consumer_config(
    settings: "KafkaSettings", consumer_settings: "ConsumerSettings"
) -> dict:
    """
    Build confluent-kafka consumer configuration.

    Offsets are committed manually after events have been handed to the
    session tracker.

    Args:
        settings: KafkaSettings instance
        consumer_settings: ConsumerSettings instance

    Returns:
        Dict with confluent-kafka consumer configuration
    """
    config = {
        "bootstrap.servers": settings.bootstrap_servers,
        "group.id": consumer_settings.group_id,
        "auto.offset.reset": consumer_settings.auto_offset_reset,
        "enable.auto.commit": False,  # Manual commit for reliability
        # Session management
        "session.timeout.ms": 45000,
        "heartbeat.interval.ms": 15000,
        "max.poll.interval.ms": 300000,  # 5 minutes max processing time
    }
    config.update(_security_config(settings))
    return config


# ==============================================================================
# Message Decoding
# ==============================================================================


def decode_message_value(value: bytes | None) -> dict[str, Any] | None:
    """
    Decode a Kafka message value into an event dict.

    Args:
        value: Raw message value

    Returns:
        Event dict, or None if the value is empty, not JSON or not an object
    """
    if not value:
        return None
    try:
        data = json.loads(value.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning("Failed to decode message: %s", e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring non-object message of type %s", type(data).__name__)
        return None
    return data
