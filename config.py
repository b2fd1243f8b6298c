"""
Configuration loading for KickOffHub.
Defaults live in config.yaml (see default_config_path); an optional user file (KICKOFFHUB_CONFIG)
is deep-merged over them, then environment variables override individual keys.
Section normalization (clamping, defaults) lives in sdk.config.
"""

from __future__ import annotations

import copy
import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).resolve().parent
DEFAULT_CONFIG_PATH = _ROOT / "config.yaml"
# Wheel installs place the defaults here (see data-files in pyproject.toml).
INSTALLED_CONFIG_PATH = Path(sys.prefix) / "share" / "kickoffhub" / "config.yaml"
CONFIG_ENV_VAR = "KICKOFFHUB_CONFIG"

# env var -> (section, key, cast)
_ENV_OVERRIDES: dict[str, tuple[str, str, Any]] = {
    "API_FOOTBALL_KEY": ("api_football", "api_key", str),
    "API_FOOTBALL_BASE_URL": ("api_football", "base_url", str),
    "API_FOOTBALL_CACHE_TTL": ("api_football", "cache_ttl_sec", int),
    "API_FOOTBALL_TIMEOUT": ("api_football", "http_timeout_sec", float),
    "API_FOOTBALL_BREAKER_TIMEOUT": ("api_football", "breaker_timeout_sec", float),
    "API_FOOTBALL_BREAKER_THRESHOLD": (
        "api_football",
        "breaker_error_threshold_percentage",
        int,
    ),
    "API_FOOTBALL_BREAKER_RESET_TIMEOUT": (
        "api_football",
        "breaker_reset_timeout_sec",
        float,
    ),
    "REDIS_URL": ("cache", "url", str),
    "DATABASE_PATH": ("database", "path", str),
    "LOG_LEVEL": ("logging", "level", str),
    "HOST": ("server", "host", str),
    "PORT": ("server", "port", int),
    "API_KEY": ("auth", "api_key", str),
}


def load_yaml_file(path: Path | str) -> dict[str, Any]:
    """Load a YAML mapping from path. Returns {} if the file is missing, empty or invalid."""
    path = Path(path)
    if not path.is_file():
        return {}
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Could not read config file %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict with override merged into base (nested dicts merged, other values replaced)."""
    out = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = deep_merge(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def apply_env_overrides(
    config: dict[str, Any], environ: dict[str, str] | None = None
) -> dict[str, Any]:
    """Apply known environment variables onto config. Returns a new dict."""
    environ = os.environ if environ is None else environ
    out = copy.deepcopy(config)
    for env_name, (section, key, cast) in _ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue
        try:
            value = cast(raw)
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid %s=%r", env_name, raw)
            continue
        out.setdefault(section, {})
        if not isinstance(out[section], dict):
            out[section] = {}
        out[section][key] = value
    return out


def default_config_path() -> Path | None:
    """
    Locate the defaults file: next to this module (source checkout), then the working
    directory, then the copy installed under sys.prefix. None when none exists.
    """
    for candidate in (DEFAULT_CONFIG_PATH, Path.cwd() / "config.yaml", INSTALLED_CONFIG_PATH):
        if candidate.is_file():
            return candidate
    return None


def load_config(
    path: Path | str | None = None, environ: dict[str, str] | None = None
) -> dict[str, Any]:
    """
    Load the merged configuration dict.

    Args:
        path: Optional user config file; defaults to $KICKOFFHUB_CONFIG when set.
        environ: Environment mapping (defaults to os.environ).

    Returns:
        Defaults from config.yaml, overridden by the user file, then by env vars.
    """
    environ = os.environ if environ is None else environ
    defaults_path = default_config_path()
    if defaults_path is None:
        logger.warning("No default config.yaml found; using built-in section defaults")
        config: dict[str, Any] = {}
    else:
        config = load_yaml_file(defaults_path)
    user_path = path or environ.get(CONFIG_ENV_VAR)
    if user_path:
        user_config = load_yaml_file(user_path)
        if not user_config:
            logger.warning("User config %s is missing or empty", user_path)
        config = deep_merge(config, user_config)
    return apply_env_overrides(config, environ)
