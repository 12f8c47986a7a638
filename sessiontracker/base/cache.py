# ==============================================================================
# Cache Abstract Base Class
# ==============================================================================
"""
Abstract interface for key-value storage with TTL support.

This is the store half of the capability contract the session tracker needs
from its host: an atomic counter, expiry refresh, and plain get/set where
setting None deletes the key.

Implementations: Valkey, Redis, etc.
"""

from abc import ABC, abstractmethod
from typing import Any


class Cache(ABC):
    """
    Generic cache interface for key-value storage with TTL support.

    Values are JSON-serializable (str, int, float, dict, list). Counters
    created by increment() read back as int.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a cached value.

        Args:
            key: Cache key
            default: Value returned when the key is absent

        Returns:
            Cached value, or default if not found
        """
        ...

    @abstractmethod
    def set(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """
        Set a cached value with optional TTL.

        Args:
            key: Cache key
            value: Value to cache (JSON-serializable). None deletes the key.
            ttl_seconds: Optional time-to-live in seconds
        """
        ...

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Args:
            key: Cache key to delete

        Returns:
            True if key was deleted, False if not found
        """
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check whether a key is present (and not expired)."""
        ...

    @abstractmethod
    def increment(self, key: str, amount: int = 1) -> int:
        """
        Atomically increment a counter. Creates key with value if it doesn't exist.

        Must be a single atomic store operation, never read-modify-write.

        Args:
            key: Cache key
            amount: Amount to increment by (default: 1)

        Returns:
            New value after increment
        """
        ...

    @abstractmethod
    def expire(self, key: str, ttl_seconds: int) -> bool:
        """
        Set or refresh the time-to-live of a key.

        Args:
            key: Cache key
            ttl_seconds: Time-to-live in seconds

        Returns:
            True if the TTL was set, False if the key does not exist
        """
        ...

    @abstractmethod
    def delete_pattern(self, pattern: str) -> int:
        """
        Delete all keys matching a pattern.

        Args:
            pattern: Pattern to match (e.g., "sessiontracker:*")

        Returns:
            Count of keys deleted
        """
        ...
