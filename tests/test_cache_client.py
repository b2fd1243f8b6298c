"""Tests for modules.api.cache_client: connect gating, fail-open behaviour, no-op client."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

from modules.api.cache_client import CacheClient, NoOpCacheClient, create_cache_client


def _client(**overrides) -> tuple[CacheClient, AsyncMock]:
    redis = AsyncMock()
    redis.ping.return_value = True
    redis.get.return_value = '{"a": 1}'
    redis.set.return_value = True
    for name, value in overrides.items():
        setattr(redis, name, value)
    return CacheClient("redis://user:pw@cache:6379/0", client=redis), redis


def test_closed_until_connected() -> None:
    cache, redis = _client()
    assert cache.is_open is False
    assert asyncio.run(cache.get("k")) is None
    assert asyncio.run(cache.set("k", "v", ex=10)) is False
    redis.get.assert_not_called()
    redis.set.assert_not_called()


def test_connect_opens_and_passes_through() -> None:
    cache, redis = _client()

    async def main():
        assert await cache.connect() is True
        assert await cache.get("k") == '{"a": 1}'
        assert await cache.set("k", "v", ex=30) is True

    asyncio.run(main())
    assert cache.is_open is True
    redis.set.assert_awaited_once_with("k", "v", ex=30)


def test_connect_failure_stays_closed() -> None:
    cache, _ = _client(ping=AsyncMock(side_effect=ConnectionError("refused")))
    assert asyncio.run(cache.connect()) is False
    assert cache.is_open is False
    assert asyncio.run(cache.ping()) is False


def test_command_errors_are_swallowed() -> None:
    cache, _ = _client(
        get=AsyncMock(side_effect=TimeoutError("slow")),
        set=AsyncMock(side_effect=ConnectionError("gone")),
    )

    async def main():
        await cache.connect()
        assert await cache.get("k") is None
        assert await cache.set("k", "v") is False

    asyncio.run(main())


def test_close_marks_closed() -> None:
    cache, redis = _client()

    async def main():
        await cache.connect()
        await cache.close()

    asyncio.run(main())
    assert cache.is_open is False
    redis.aclose.assert_awaited_once()


def test_safe_url_hides_credentials() -> None:
    cache, _ = _client()
    assert cache._safe_url() == "cache:6379/0"


def test_noop_cache_always_misses() -> None:
    cache = NoOpCacheClient()

    async def main():
        assert await cache.connect() is False
        assert await cache.set("k", "v", ex=5) is False
        assert await cache.get("k") is None
        await cache.close()

    asyncio.run(main())
    assert cache.is_open is False


def test_create_cache_client_without_url_is_noop() -> None:
    assert isinstance(create_cache_client(None), NoOpCacheClient)
    assert isinstance(create_cache_client(""), NoOpCacheClient)
