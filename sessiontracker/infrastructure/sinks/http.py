# ==============================================================================
# HTTP Capture Event Sink
# ==============================================================================
"""
EventSink that posts session events to an analytics capture endpoint.

Request format (POST {host}/capture/):

    {"api_key": "...", "event": "Session start", "distinct_id": "u1",
     "timestamp": "...", "properties": {...}}

Includes light retry logic (3 attempts, ~7 seconds) for connection errors
and timeouts. Other HTTP errors are raised to the caller.
"""

import logging

import requests

from sessiontracker.base import EventSink
from sessiontracker.utils.retry import HTTP_RETRY_EXCEPTIONS, retry_light

logger = logging.getLogger(__name__)

CAPTURE_PATH = "/capture/"
DEFAULT_TIMEOUT = 10  # seconds


class HttpCaptureSink(EventSink):
    """Posts emitted events to an HTTP capture API."""

    def __init__(
        self,
        host: str,
        api_key: str | None = None,
        timeout: int = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """
        Initialize the sink.

        Args:
            host: Base URL of the capture service
            api_key: Project API key sent with every event
            timeout: Request timeout in seconds
            session: Existing requests session (for connection reuse and tests)
        """
        self._url = host.rstrip("/") + CAPTURE_PATH
        self._api_key = api_key
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return self._url

    def build_body(self, event_name: str, properties: dict) -> dict:
        """Build the capture request body."""
        return {
            "api_key": self._api_key,
            "event": event_name,
            "distinct_id": properties.get("distinct_id"),
            "timestamp": properties.get("timestamp"),
            "properties": properties,
        }

    def emit(self, event_name: str, properties: dict) -> None:
        """Post one event, retrying transient network failures."""
        self._post(self.build_body(event_name, properties))

    @retry_light(HTTP_RETRY_EXCEPTIONS, logger)
    def _post(self, body: dict) -> None:
        response = self._session.post(self._url, json=body, timeout=self._timeout)
        response.raise_for_status()

    def close(self) -> None:
        """Close pooled connections."""
        self._session.close()
