"""
Outbound API infrastructure: circuit breaker, cache client, API-Football client.
"""

from __future__ import annotations

from modules.api.cache_client import CacheClient, NoOpCacheClient, create_cache_client
from modules.api.circuit_breaker import CircuitBreaker, CircuitState
from modules.api.client import ApiFootballClient, build_cache_key

__all__ = [
    "ApiFootballClient",
    "CacheClient",
    "CircuitBreaker",
    "CircuitState",
    "NoOpCacheClient",
    "build_cache_key",
    "create_cache_client",
]
