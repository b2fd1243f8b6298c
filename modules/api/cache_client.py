"""
Cache client wrapper (Redis/KeyDB, same protocol) used for read-through caching.
Every operation checks reachability first and degrades to a miss/no-op; errors are logged, never raised.
"""

from __future__ import annotations

import logging

import redis.asyncio as aioredis  # redis-py works with KeyDB (same protocol)

logger = logging.getLogger(__name__)


class CacheClient:
    """
    Async Redis/KeyDB client. Not connected until connect() succeeds;
    until then (or after a failed ping) every call is a miss/no-op.
    """

    def __init__(
        self,
        url: str,
        socket_timeout_sec: float = 5.0,
        client: aioredis.Redis | None = None,
    ) -> None:
        """
        Args:
            url: redis://[:password@]host:port/db
            socket_timeout_sec: Connect and command timeout
            client: Prebuilt redis.asyncio client (tests)
        """
        self._url = url
        self._client = client or aioredis.from_url(
            url,
            decode_responses=True,
            socket_connect_timeout=socket_timeout_sec,
            socket_timeout=socket_timeout_sec,
        )
        self._open = False

    @property
    def is_open(self) -> bool:
        """True once connect() has reached the server."""
        return self._open

    async def connect(self) -> bool:
        """Ping the server and mark the client open. Returns reachability."""
        try:
            self._open = bool(await self._client.ping())
        except Exception as e:
            logger.warning("Cache unreachable at %s: %s", self._safe_url(), e)
            self._open = False
        if self._open:
            logger.info("Cache connected at %s", self._safe_url())
        return self._open

    async def ping(self) -> bool:
        """Check if the cache is available."""
        try:
            return bool(await self._client.ping())
        except Exception as e:
            logger.warning("Cache ping failed: %s", e)
            return False

    async def get(self, key: str) -> str | None:
        """
        Get a value by key.

        Returns:
            Value string, or None on miss, when closed, or on error
        """
        if not self._open:
            return None
        try:
            return await self._client.get(key)
        except Exception as e:
            logger.warning("Cache get failed for key %s: %s", key, e)
            return None

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        """
        Set a key-value pair.

        Args:
            key: Key name
            value: Value string
            ex: Expiration time in seconds

        Returns:
            True if stored
        """
        if not self._open:
            return False
        try:
            return bool(await self._client.set(key, value, ex=ex))
        except Exception as e:
            logger.warning("Cache set failed for key %s: %s", key, e)
            return False

    async def close(self) -> None:
        """Close the connection."""
        self._open = False
        try:
            await self._client.aclose()
        except Exception as e:
            logger.debug("Cache close failed: %s", e)

    def _safe_url(self) -> str:
        # strip credentials from logs
        return self._url.rsplit("@", 1)[-1]


class NoOpCacheClient:
    """Stand-in when no cache URL is configured: always closed, every call a miss."""

    is_open = False

    async def connect(self) -> bool:
        logger.warning("Cache is disabled. Set REDIS_URL to enable caching.")
        return False

    async def ping(self) -> bool:
        return False

    async def get(self, key: str) -> str | None:
        return None

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        return False

    async def close(self) -> None:
        return None


def create_cache_client(url: str | None, socket_timeout_sec: float = 5.0):
    """CacheClient for a configured URL, otherwise NoOpCacheClient."""
    if not url:
        return NoOpCacheClient()
    return CacheClient(url, socket_timeout_sec=socket_timeout_sec)
