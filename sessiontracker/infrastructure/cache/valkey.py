# ==============================================================================
# Valkey Cache Implementation
# ==============================================================================
"""
Valkey/Redis implementation of the Cache interface.

Provides:
- Generic key-value storage with TTL
- Atomic counters (INCRBY) and TTL refresh (EXPIRE)
- Pattern-based deletion

Uses JSON serialization for stored values. Counters are stored natively by
Valkey and decode back to int.
"""

import json
import logging
from typing import Any

import redis
from redis.backoff import ExponentialBackoff
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.retry import Retry

from sessiontracker.base import Cache
from sessiontracker.utils.config import get_settings
from sessiontracker.utils.retry import VALKEY_RETRIES

logger = logging.getLogger(__name__)


def create_valkey_client(
    url: str | None = None,
    socket_timeout: int = 10,
    retries: int | None = None,
    health_check_interval: int = 30,
) -> redis.Redis:
    """
    Create a Valkey/Redis client connection.

    Configured with:
    - 10 second socket timeouts for fast failure detection
    - Automatic retries with exponential backoff for transient failures
    - Health check interval to keep connections alive

    Args:
        url: Valkey/Redis connection URL. If None, uses settings.
        socket_timeout: Socket timeout in seconds (default: 10)
        retries: Number of retries for transient failures (default: VALKEY_RETRIES)
        health_check_interval: Health check interval in seconds (default: 30)

    Returns:
        redis.Redis client instance
    """
    if url is None:
        url = get_settings().valkey.url

    retry_count = retries if retries is not None else VALKEY_RETRIES
    retry_strategy = Retry(ExponentialBackoff(cap=32, base=1), retries=retry_count)

    return redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=socket_timeout,
        socket_connect_timeout=socket_timeout,
        retry=retry_strategy,
        retry_on_error=[RedisTimeoutError, RedisConnectionError],
        health_check_interval=health_check_interval,
    )


class ValkeyCache(Cache):
    """
    Valkey/Redis implementation of the Cache interface.

    All values are stored as JSON strings and deserialized on retrieval.
    Values that are not valid JSON (written by other tools) are returned
    as raw strings.
    """

    def __init__(self, url: str | None = None, client: redis.Redis | None = None):
        """
        Initialize Valkey cache.

        Args:
            url: Valkey/Redis connection URL. If None, uses settings.
            client: Existing Redis client. If given, url is ignored.
        """
        self._client = client if client is not None else create_valkey_client(url)

    @property
    def client(self) -> redis.Redis:
        """Get the underlying Redis client for advanced operations."""
        return self._client

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a cached value.

        Args:
            key: Cache key
            default: Value returned when the key is absent

        Returns:
            Decoded value, or default if not found
        """
        value = self._client.get(key)
        if value is None:
            return default
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            logger.debug("Value for key %s is not JSON, returning raw string", key)
            return value

    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """
        Set a cached value with optional TTL.

        Args:
            key: Cache key
            value: Value to cache (JSON-serializable). None deletes the key.
            ttl_seconds: Optional time-to-live in seconds
        """
        if value is None:
            self._client.delete(key)
            return

        json_value = json.dumps(value)
        if ttl_seconds is not None:
            self._client.setex(key, ttl_seconds, json_value)
        else:
            self._client.set(key, json_value)

    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Args:
            key: Cache key to delete

        Returns:
            True if key was deleted, False if not found
        """
        return self._client.delete(key) > 0

    def exists(self, key: str) -> bool:
        """Check whether a key is present (and not expired)."""
        return self._client.exists(key) > 0

    def increment(self, key: str, amount: int = 1) -> int:
        """
        Atomically increment a counter. Creates key with value if it doesn't exist.

        Args:
            key: Cache key
            amount: Amount to increment by (default: 1)

        Returns:
            New value after increment
        """
        return self._client.incrby(key, amount)

    def expire(self, key: str, ttl_seconds: int) -> bool:
        """
        Set or refresh the time-to-live of a key.

        Args:
            key: Cache key
            ttl_seconds: Time-to-live in seconds

        Returns:
            True if the TTL was set, False if the key does not exist
        """
        return bool(self._client.expire(key, ttl_seconds))

    def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a pattern.

        Args:
            pattern: Pattern to match (e.g., "sessiontracker:*")

        Returns:
            Count of keys deleted
        """
        keys = list(self._client.scan_iter(pattern))
        if keys:
            return self._client.delete(*keys)
        return 0

    def ping(self) -> bool:
        """
        Check if the cache is reachable.

        Returns:
            True if ping succeeds, False otherwise
        """
        try:
            return bool(self._client.ping())
        except (RedisConnectionError, RedisTimeoutError):
            return False

    def close(self) -> None:
        """Close the connection."""
        self._client.close()


def check_valkey_connection(url: str | None = None) -> bool:
    """
    Check if Valkey is reachable.

    Uses a shorter timeout (5 seconds) since this is just a health check.

    Returns:
        True if Valkey responds to ping, False otherwise
    """
    client = create_valkey_client(url, socket_timeout=5, retries=0)
    try:
        client.ping()
        return True
    except (RedisConnectionError, RedisTimeoutError):
        return False
    finally:
        client.close()
