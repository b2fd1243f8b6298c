"""
API-Football client: outbound calls to the third-party football-data provider with
a circuit breaker and read-through (cache-aside) caching.

Only GET calls are cached. Cache hits bypass the breaker entirely; an unreachable cache
is treated as a permanent miss. Provider JSON is returned unmodified.
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from typing import Any, Mapping, Sequence, Union

import httpx

from app.errors import ApiFootballError, ValidationException
from modules.api.cache_client import NoOpCacheClient
from modules.api.circuit_breaker import CircuitBreaker, CircuitState

logger = logging.getLogger(__name__)

API_HOST_HEADER = "v3.football.api-sports.io"
READ_METHODS = frozenset({"get"})

# A mapping, or a sequence of (key, value) pairs when a key repeats.
QueryParams = Union[Mapping[str, Any], Sequence[tuple[str, Any]], None]


def build_cache_key(
    path: str,
    params: QueryParams = None,
    method: str = "get",
    namespace: str = "api-football",
) -> str:
    """
    Deterministic cache key for a request shape: namespace:sha1(method:path + JSON(params)).
    Params are serialized with sorted keys, so dict ordering does not matter; None == {}.
    Pair sequences keep their order, so callers sort them first.
    """
    digest = hashlib.sha1()
    digest.update(f"{method.lower()}:{path}".encode("utf-8"))
    digest.update(
        json.dumps(params or {}, sort_keys=True, separators=(",", ":"), default=str).encode(
            "utf-8"
        )
    )
    return f"{namespace}:{digest.hexdigest()}"


def _is_client_error(exc: BaseException) -> bool:
    """Provider 4xx responses are caller problems; they do not count toward the breaker."""
    status = getattr(exc, "provider_status", None)
    return status is not None and 400 <= status < 500


def _log_breaker_transition(old_state: CircuitState, new_state: CircuitState) -> None:
    if new_state == CircuitState.OPEN:
        logger.warning(
            "API-Football circuit %s -> %s; provider calls fail fast until it recovers",
            old_state.value,
            new_state.value,
        )
    else:
        logger.info("API-Football circuit %s -> %s", old_state.value, new_state.value)


class ApiFootballClient:
    """
    Client for the API-Football provider.
    Construct from config with from_config(); share one instance via the container.
    """

    def __init__(
        self,
        base_url: str = "https://v3.football.api-sports.io",
        api_key: str = "",
        http_timeout_sec: float = 10.0,
        cache: Any = None,
        cache_ttl_sec: int = 300,
        cache_namespace: str = "api-football",
        breaker: CircuitBreaker | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            base_url: Provider base URL
            api_key: Static key sent as x-apisports-key
            http_timeout_sec: Transport timeout for each request
            cache: CacheClient-like object (get/set/is_open); None disables caching
            cache_ttl_sec: Default TTL; 0 disables caching
            cache_namespace: Prefix for cache keys
            breaker: Circuit breaker (a default one is built when omitted)
            http_client: Prebuilt httpx.AsyncClient (tests pass one with MockTransport)
        """
        self._base_url = base_url.rstrip("/")
        self._cache = cache if cache is not None else NoOpCacheClient()
        self._cache_ttl = max(0, int(cache_ttl_sec))
        self._namespace = cache_namespace
        if breaker is None:
            breaker = CircuitBreaker(name="api_football", is_ignored_error=_is_client_error)
            breaker.on_state_change(_log_breaker_transition)
        self._breaker = breaker
        if not api_key:
            logger.warning("API-Football key is not set; provider calls will be rejected")
        self._http = http_client or httpx.AsyncClient(
            base_url=self._base_url,
            timeout=http_timeout_sec,
            headers={
                "x-apisports-key": api_key,
                "x-rapidapi-host": API_HOST_HEADER,
            },
        )
        self._pending_writes: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, cfg: dict[str, Any], cache: Any = None) -> ApiFootballClient:
        """Build from a normalized sdk.config.get_api_football_section() dict."""
        breaker = CircuitBreaker(
            timeout_sec=cfg["breaker_timeout_sec"],
            error_threshold_percentage=cfg["breaker_error_threshold_percentage"],
            reset_timeout_sec=cfg["breaker_reset_timeout_sec"],
            rolling_window_sec=cfg["breaker_rolling_window_sec"],
            volume_threshold=cfg["breaker_volume_threshold"],
            name="api_football",
            is_ignored_error=_is_client_error,
        )
        breaker.on_state_change(_log_breaker_transition)
        return cls(
            base_url=cfg["base_url"],
            api_key=cfg["api_key"],
            http_timeout_sec=cfg["http_timeout_sec"],
            cache=cache,
            cache_ttl_sec=cfg["cache_ttl_sec"],
            cache_namespace=cfg["cache_namespace"],
            breaker=breaker,
        )

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    @property
    def cache_ttl(self) -> int:
        return self._cache_ttl

    def cache_key(
        self, path: str, params: QueryParams = None, method: str = "get"
    ) -> str:
        return build_cache_key(path, params, method, self._namespace)

    async def _send(
        self,
        method: str,
        path: str,
        params: QueryParams,
        data: Any,
    ) -> Any:
        """Single provider round trip. Raises ApiFootballError on HTTP errors."""
        try:
            response = await self._http.request(
                method.upper(), path, params=params or None, json=data
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise ApiFootballError(
                f"API-Football responded {status} for {method.upper()} {path}",
                status=502 if status >= 500 else status,
                provider_status=status,
            ) from e
        except httpx.TimeoutException as e:
            raise ApiFootballError(
                f"API-Football timed out for {method.upper()} {path}", status=504
            ) from e
        except httpx.HTTPError as e:
            raise ApiFootballError(
                f"API-Football request failed for {method.upper()} {path}: {e}"
            ) from e
        except ValueError as e:
            raise ApiFootballError(
                f"API-Football returned invalid JSON for {method.upper()} {path}"
            ) from e

    async def _cache_lookup(self, key: str) -> tuple[bool, Any]:
        if not self._cache.is_open:
            return False, None
        cached = await self._cache.get(key)
        if cached is None:
            return False, None
        try:
            return True, json.loads(cached)
        except (TypeError, ValueError):
            logger.debug("Ignoring undecodable cache entry %s", key)
            return False, None

    def _cache_store(self, key: str, payload: Any, ttl: int) -> None:
        """Fire-and-forget cache write; failures are logged only."""
        if not self._cache.is_open:
            return
        try:
            value = json.dumps(payload)
        except (TypeError, ValueError) as e:
            logger.debug("Not caching unserializable payload for %s: %s", key, e)
            return

        async def _write() -> None:
            try:
                await self._cache.set(key, value, ex=ttl)
            except Exception as e:
                logger.warning("Cache write failed for %s: %s", key, e)

        task = asyncio.get_running_loop().create_task(_write())
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def request(
        self,
        method: str = "get",
        path: str | None = None,
        params: QueryParams = None,
        data: Any = None,
        *,
        cache: bool = True,
        ttl: int | None = None,
        cache_key: str | None = None,
    ) -> Any:
        """
        Call the provider through the breaker, with cache-aside for GET.

        Args:
            method: HTTP method
            path: Provider path, e.g. "/leagues" (required)
            params: Query parameters
            data: JSON body for write methods
            cache: Set False to skip the cache for this call
            ttl: TTL override in seconds
            cache_key: Explicit cache key (defaults to build_cache_key)

        Returns:
            Provider JSON body, unmodified

        Raises:
            ValidationException: path missing (no breaker or cache involvement)
            CircuitOpenError: breaker open
            CircuitTimeoutError: breaker timeout exceeded
            ApiFootballError: provider or transport failure
        """
        if not path:
            raise ValidationException(
                "API_FOOTBALL_PATH_REQUIRED", code="API_FOOTBALL_PATH_REQUIRED"
            )
        method = (method or "get").lower()
        resolved_ttl = self._cache_ttl if ttl is None else max(0, int(ttl))
        should_cache = (
            cache and self._cache_ttl > 0 and resolved_ttl > 0 and method in READ_METHODS
        )
        key = cache_key or self.cache_key(path, params, method)

        if should_cache:
            hit, payload = await self._cache_lookup(key)
            if hit:
                logger.debug("Cache hit for %s %s", method.upper(), path)
                return payload

        payload = await self._breaker.call(self._send, method, path, params, data)

        if should_cache:
            self._cache_store(key, payload, resolved_ttl)
        return payload

    async def get(
        self,
        path: str,
        params: QueryParams = None,
        *,
        cache_key: str | None = None,
        ttl: int | None = None,
    ) -> Any:
        """GET with cache-aside."""
        return await self.request(
            "get", path, params, cache_key=cache_key, ttl=ttl
        )

    async def flush_cache_writes(self) -> None:
        """Await outstanding fire-and-forget cache writes (shutdown and tests)."""
        if self._pending_writes:
            await asyncio.gather(*list(self._pending_writes), return_exceptions=True)

    async def aclose(self) -> None:
        await self.flush_cache_writes()
        await self._http.aclose()
