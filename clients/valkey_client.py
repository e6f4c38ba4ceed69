"""
Valkey (Redis-compatible) key-value store for request persistence.

Simple wrapper around redis-py implementing the KeyValueStore port.
Fail-fast: raises on connection failure, never returns fallback values.
"""

import logging

import redis

logger = logging.getLogger(__name__)


class ValkeyKeyValueStore:
    """
    Redis-compatible byte store for Valkey.

    Usage:
        store = ValkeyKeyValueStore("redis://localhost:6379/0")
        store.save("active_request:cust-1", b"{...}")
        value = store.load("active_request:cust-1")  # Returns None if missing
    """

    def __init__(self, url: str, key_prefix: str = "marketplace:"):
        """
        Initialize Valkey connection.

        Args:
            url: Redis-compatible connection URL (e.g., redis://localhost:6379/0)
            key_prefix: Namespace prepended to every key

        Raises:
            redis.ConnectionError: If connection fails
        """
        self._client = redis.from_url(url)
        self._prefix = key_prefix
        # Verify connectivity immediately (fail-fast)
        self._client.ping()
        logger.info("ValkeyKeyValueStore connected")

    def ping(self) -> bool:
        """
        Health check.

        Returns True if Valkey responds.
        Raises redis.ConnectionError if unreachable.
        """
        self._client.ping()
        return True

    def load(self, key: str) -> bytes | None:
        """
        Get value by key.

        Returns None if key doesn't exist (not an error).
        """
        return self._client.get(self._prefix + key)

    def save(self, key: str, value: bytes) -> None:
        """Set key to value. Last write wins."""
        self._client.set(self._prefix + key, value)

    def delete(self, key: str) -> None:
        """Delete key. Deleting a missing key is not an error."""
        self._client.delete(self._prefix + key)

    def close(self) -> None:
        """Close the connection."""
        self._client.close()
        logger.info("ValkeyKeyValueStore closed")
