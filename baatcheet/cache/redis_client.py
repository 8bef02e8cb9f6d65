"""
Ephemeral key-value store backed by Redis.

Holds short-lived state: staged registrations, reset tickets, rate-limit
markers and refresh-token hashes. One instance is shared process-wide;
``init()`` opens the connection pool and ``close()`` releases it.

The underlying ``redis.Redis`` client is thread safe and checks out a pooled
connection per command, so a single store can serve concurrent requests.
"""

import json
import logging
from typing import Any, Optional

import redis

logger = logging.getLogger(__name__)


class StoreUnavailableError(RuntimeError):
    """The ephemeral store could not be reached or rejected a command."""


class EphemeralStore:
    """
    Thin wrapper around a Redis client.

    Every command is a single round trip and therefore atomic on its own;
    sequences of commands are not.
    """

    def __init__(self, url: Optional[str] = None, client: Optional[redis.Redis] = None):
        """
        Args:
            url: Redis URL (``redis://`` or ``rediss://`` for TLS)
            client: Pre-built client (tests pass a fakeredis instance)
        """
        self.url = url
        self._client = client

    def init(self) -> "EphemeralStore":
        """Open the connection (no-op when a client was injected)."""
        if self._client is None:
            if not self.url:
                raise StoreUnavailableError("No Redis URL configured")
            self._client = redis.Redis.from_url(self.url, decode_responses=True)
            logger.info("Redis client initialized")
        return self

    def close(self):
        """Release pooled connections."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Redis client closed")

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            raise StoreUnavailableError("Ephemeral store not initialized. Call init() first.")
        return self._client

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.exceptions.RedisError as e:
            raise StoreUnavailableError(f"Ping failed: {e}") from e

    def get(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(key)
        except redis.exceptions.RedisError as e:
            raise StoreUnavailableError(f"GET {key} failed: {e}") from e
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    def set(self, key: str, value: str, ttl: int) -> None:
        """Set a value that expires after ``ttl`` seconds."""
        try:
            self.client.set(key, value, ex=ttl)
        except redis.exceptions.RedisError as e:
            raise StoreUnavailableError(f"SET {key} failed: {e}") from e

    def delete(self, *keys: str) -> int:
        try:
            return int(self.client.delete(*keys))
        except redis.exceptions.RedisError as e:
            raise StoreUnavailableError(f"DEL {keys} failed: {e}") from e

    def exists(self, key: str) -> bool:
        try:
            return bool(self.client.exists(key))
        except redis.exceptions.RedisError as e:
            raise StoreUnavailableError(f"EXISTS {key} failed: {e}") from e

    def ttl(self, key: str) -> int:
        """Remaining lifetime in seconds (-2 when absent, -1 when persistent)."""
        try:
            return int(self.client.ttl(key))
        except redis.exceptions.RedisError as e:
            raise StoreUnavailableError(f"TTL {key} failed: {e}") from e

    def get_json(self, key: str) -> Optional[Any]:
        """
        Load a JSON document.

        Raises:
            ValueError: If the stored value is not valid JSON
        """
        raw = self.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any, ttl: int) -> None:
        self.set(key, json.dumps(value), ttl)
