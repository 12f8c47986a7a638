# ==============================================================================
# Cache Infrastructure
# ==============================================================================
"""
Cache implementations for the ports-and-adapters architecture.

Available implementations:
- ValkeyCache: Valkey/Redis-based cache with JSON serialization
"""

from sessiontracker.infrastructure.cache.valkey import (
    ValkeyCache,
    check_valkey_connection,
    create_valkey_client,
)

__all__ = [
    "ValkeyCache",
    "check_valkey_connection",
    "create_valkey_client",
]
