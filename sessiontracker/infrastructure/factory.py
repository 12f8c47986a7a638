# ==============================================================================
# Session Tracker Factory
# ==============================================================================
"""
Assemble a SessionTracker from application settings.

This is the single place where settings are turned into the immutable
TrackerConfig and concrete adapters (Valkey cache, Valkey scheduler, sink).
"""

import logging

from sessiontracker.base import EventSink
from sessiontracker.core import SessionTracker
from sessiontracker.infrastructure.cache import ValkeyCache, create_valkey_client
from sessiontracker.infrastructure.scheduler import ValkeyTaskScheduler
from sessiontracker.infrastructure.sinks import create_sink
from sessiontracker.utils.config import Settings, get_settings

logger = logging.getLogger(__name__)


def scheduler_key(settings: Settings) -> str:
    """Sorted set key of the delayed task queue, inside the tracker namespace."""
    return f"{settings.session.key_prefix}tasks:scheduled"


def create_scheduler(settings: Settings, client=None) -> ValkeyTaskScheduler:
    """Create the Valkey-backed delayed task scheduler."""
    client = client if client is not None else create_valkey_client(settings.valkey.url)
    return ValkeyTaskScheduler(client, key=scheduler_key(settings))


def create_tracker(
    settings: Settings | None = None,
    sink: EventSink | None = None,
    client=None,
) -> SessionTracker:
    """
    Build a SessionTracker wired to Valkey and the configured sink.

    Args:
        settings: Application settings. If None, uses get_settings().
        sink: Event sink override. If None, uses SINK_IMPL.
        client: Redis client override (shared by cache and scheduler)

    Returns:
        Ready-to-use SessionTracker
    """
    if settings is None:
        settings = get_settings()
    if client is None:
        client = create_valkey_client(settings.valkey.url)

    config = settings.session.to_tracker_config()
    logger.info(
        "Session tracker: length=%ds start=%r end=%r",
        config.session_length_seconds,
        config.session_start_event,
        config.session_end_event,
    )

    return SessionTracker(
        config,
        ValkeyCache(client=client),
        create_scheduler(settings, client),
        sink if sink is not None else create_sink(settings),
    )
