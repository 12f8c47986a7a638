# ==============================================================================
# Logging Event Sink
# ==============================================================================
"""EventSink that writes session events to the application log."""

import json
import logging

from sessiontracker.base import EventSink

logger = logging.getLogger(__name__)


class LoggingEventSink(EventSink):
    """Logs every emitted event at INFO. Useful for local runs and replays."""

    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def emit(self, event_name: str, properties: dict) -> None:
        self._log.info("%s %s", event_name, json.dumps(properties, sort_keys=True))
