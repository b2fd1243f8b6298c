"""Shared fixtures: in-memory cache stand-in, temp database, base config."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from persistence.database import Database


class FakeCache:
    """In-memory cache with the CacheClient interface. Closed caches miss and ignore writes."""

    def __init__(self, is_open: bool = True) -> None:
        self.is_open = is_open
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int | None] = {}
        self.get_calls = 0
        self.set_calls = 0
        self.closed = False

    async def connect(self) -> bool:
        return self.is_open

    async def ping(self) -> bool:
        return self.is_open

    async def get(self, key: str) -> str | None:
        self.get_calls += 1
        if not self.is_open:
            return None
        return self.store.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        self.set_calls += 1
        if not self.is_open:
            return False
        self.store[key] = value
        self.ttls[key] = ex
        return True

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def closed_cache() -> FakeCache:
    return FakeCache(is_open=False)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "kickoffhub.db"


@pytest.fixture
def database(db_path: Path) -> Database:
    return Database(str(db_path))


@pytest.fixture
def base_config(db_path: Path) -> dict[str, Any]:
    return {
        "server": {"host": "localhost", "port": 3000, "api_prefix": "/api"},
        "auth": {"api_key": "secret-key"},
        "database": {"path": str(db_path)},
        "cache": {"url": ""},
        "api_football": {"api_key": "test-key", "cache_ttl_sec": 60},
        "modules": {},
    }
