"""
Normalized config section access for KickOffHub.
Provides get_section() and section-specific getters (server, database, cache, API-Football, modules)
so config normalization lives in one place; bootstrap and modules use these instead of duplicating logic.
"""

from __future__ import annotations

from typing import Any, Callable
from urllib.parse import urlparse


def get_section(
    raw_config: dict,
    section: str,
    defaults: dict[str, Any],
    validators: dict[str, Callable[[Any], Any]] | None = None,
) -> dict[str, Any]:
    """
    Return a normalized config section by merging raw section with defaults and applying validators.

    Args:
        raw_config: Full merged config dict (e.g. from load_config()).
        section: Top-level key (e.g. "server", "cache").
        defaults: Default values for the section; merged with raw_config.get(section, {}).
        validators: Optional dict mapping section key -> callable(value) -> value (e.g. clamp int).

    Returns:
        New dict with all keys from defaults, overridden by raw section, then validated.
        A value whose validator raises TypeError/ValueError falls back to the default.
    """
    validators = validators or {}
    raw_section = dict(raw_config.get(section) or {})
    out = dict(defaults)
    for k, v in raw_section.items():
        if k in defaults:
            out[k] = v
    for k, validator in validators.items():
        if k in out:
            try:
                out[k] = validator(out[k])
            except (TypeError, ValueError):
                out[k] = defaults[k]
    return out


def _clamp_int(lo: int, hi: int) -> Callable[[Any], int]:
    return lambda v: max(lo, min(hi, int(v)))


def _clamp_float(lo: float, hi: float) -> Callable[[Any], float]:
    return lambda v: max(lo, min(hi, float(v)))


def _api_prefix(value: Any) -> str:
    prefix = "/" + str(value or "").strip().strip("/")
    return "" if prefix == "/" else prefix


def get_server_section(raw_config: dict) -> dict[str, Any]:
    """Return normalized HTTP server config."""
    cfg = get_section(
        raw_config,
        "server",
        {
            "host": "localhost",
            "port": 3000,
            "api_prefix": "/api",
            "cors_origins": ["*"],
        },
        {
            "host": lambda v: str(v).strip() or "localhost",
            "port": _clamp_int(1, 65535),
            "api_prefix": _api_prefix,
        },
    )
    if not isinstance(cfg["cors_origins"], list):
        cfg["cors_origins"] = ["*"]
    auth = raw_config.get("auth") or {}
    cfg["api_key"] = str(auth.get("api_key") or "").strip() or None
    return cfg


def get_database_section(raw_config: dict) -> dict[str, Any]:
    """Return normalized SQLite config."""
    return get_section(
        raw_config,
        "database",
        {"path": "data/kickoffhub.db"},
        {"path": lambda v: str(v).strip() or "data/kickoffhub.db"},
    )


def get_cache_section(raw_config: dict) -> dict[str, Any]:
    """Return normalized cache (Redis/KeyDB) config. url is None when caching is disabled."""
    cfg = get_section(
        raw_config,
        "cache",
        {"url": "", "socket_timeout_sec": 5.0},
        {"socket_timeout_sec": _clamp_float(0.1, 60.0)},
    )
    url = str(cfg["url"] or "").strip()
    cfg["url"] = url or None
    return cfg


def get_api_football_section(raw_config: dict) -> dict[str, Any]:
    """
    Return normalized API-Football provider config.
    A TTL of 0 disables caching; breaker values are clamped to positive ranges.
    """
    cfg = get_section(
        raw_config,
        "api_football",
        {
            "base_url": "https://v3.football.api-sports.io",
            "api_key": "",
            "http_timeout_sec": 10.0,
            "cache_ttl_sec": 300,
            "cache_namespace": "api-football",
            "breaker_timeout_sec": 12.0,
            "breaker_error_threshold_percentage": 50,
            "breaker_reset_timeout_sec": 30.0,
            "breaker_rolling_window_sec": 10.0,
            "breaker_volume_threshold": 1,
        },
        {
            "http_timeout_sec": _clamp_float(0.1, 300.0),
            "cache_ttl_sec": _clamp_int(0, 7 * 24 * 3600),
            "breaker_timeout_sec": _clamp_float(0.1, 300.0),
            "breaker_error_threshold_percentage": _clamp_int(1, 100),
            "breaker_reset_timeout_sec": _clamp_float(0.1, 3600.0),
            "breaker_rolling_window_sec": _clamp_float(0.1, 3600.0),
            "breaker_volume_threshold": _clamp_int(1, 10000),
        },
    )
    cfg["base_url"] = (
        str(cfg["base_url"] or "").strip().rstrip("/")
        or "https://v3.football.api-sports.io"
    )
    cfg["api_key"] = str(cfg["api_key"] or "").strip()
    cfg["cache_namespace"] = (
        str(cfg["cache_namespace"] or "").strip() or "api-football"
    )
    return cfg


def get_modules_section(raw_config: dict, module_name: str) -> dict[str, Any]:
    """Return the raw per-module config dict with "enabled" defaulting to True."""
    modules = raw_config.get("modules") or {}
    module = modules.get(module_name) if isinstance(modules, dict) else None
    out = dict(module) if isinstance(module, dict) else {}
    out["enabled"] = out.get("enabled", True) is not False
    return out


def is_valid_http_url(value: str) -> bool:
    """True for http(s) URLs with a host."""
    parsed = urlparse(value or "")
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
