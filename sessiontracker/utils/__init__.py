# ==============================================================================
# Session Tracker Utilities
# ==============================================================================
"""
Shared utilities for the session tracker.

This module exports configuration and retry helpers for use throughout
the package.
"""

from sessiontracker.utils.config import (
    ConsumerSettings,
    KafkaSettings,
    SessionSettings,
    Settings,
    SinkSettings,
    ValkeySettings,
    get_settings,
)
from sessiontracker.utils.retry import (
    HTTP_RETRY_EXCEPTIONS,
    REDIS_RETRY_EXCEPTIONS,
    retry_light,
    retry_standard,
)

__all__ = [
    # Config
    "ConsumerSettings",
    "KafkaSettings",
    "SessionSettings",
    "Settings",
    "SinkSettings",
    "ValkeySettings",
    "get_settings",
    # Retry
    "HTTP_RETRY_EXCEPTIONS",
    "REDIS_RETRY_EXCEPTIONS",
    "retry_light",
    "retry_standard",
]
