"""Tests for config loading (YAML layers, env overrides) and sdk.config section getters."""

from __future__ import annotations

from pathlib import Path

import pytest

import config
from config import apply_env_overrides, deep_merge, default_config_path, load_config, load_yaml_file
from sdk.config import (
    get_api_football_section,
    get_cache_section,
    get_database_section,
    get_modules_section,
    get_section,
    get_server_section,
    is_valid_http_url,
)


def test_load_config_defaults() -> None:
    cfg = load_config(environ={})
    assert cfg["server"]["port"] == 3000
    assert cfg["api_football"]["cache_ttl_sec"] == 300
    assert [name for name in cfg["modules"]] == ["api_football", "leagues", "football"]


def test_default_config_path_falls_back_to_working_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATH", tmp_path / "missing" / "config.yaml")
    monkeypatch.setattr(config, "INSTALLED_CONFIG_PATH", tmp_path / "share" / "config.yaml")
    (tmp_path / "config.yaml").write_text("server:\n  port: 4000\n")
    monkeypatch.chdir(tmp_path)
    assert default_config_path() == tmp_path / "config.yaml"
    assert load_config(environ={})["server"]["port"] == 4000


def test_default_config_path_uses_installed_copy(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    installed = tmp_path / "share" / "kickoffhub" / "config.yaml"
    installed.parent.mkdir(parents=True)
    installed.write_text("server:\n  port: 5000\n")
    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
    monkeypatch.setattr(config, "INSTALLED_CONFIG_PATH", installed)
    monkeypatch.chdir(tmp_path / "share")
    assert load_config(environ={})["server"]["port"] == 5000


def test_load_config_without_defaults_file_uses_section_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATH", tmp_path / "missing.yaml")
    monkeypatch.setattr(config, "INSTALLED_CONFIG_PATH", tmp_path / "also-missing.yaml")
    monkeypatch.chdir(tmp_path)
    assert default_config_path() is None
    cfg = load_config(environ={"PORT": "8081"})
    assert get_server_section(cfg)["port"] == 8081
    assert get_api_football_section(cfg)["cache_ttl_sec"] == 300


def test_load_config_user_file_overrides(tmp_path: Path) -> None:
    user = tmp_path / "user.yaml"
    user.write_text("server:\n  port: 8080\napi_football:\n  cache_ttl_sec: 0\n")
    cfg = load_config(user, environ={})
    assert cfg["server"]["port"] == 8080
    assert cfg["server"]["host"] == "localhost"
    assert cfg["api_football"]["cache_ttl_sec"] == 0


def test_load_config_env_file_and_env_vars(tmp_path: Path) -> None:
    user = tmp_path / "user.yaml"
    user.write_text("server:\n  port: 8080\n")
    cfg = load_config(
        environ={
            "KICKOFFHUB_CONFIG": str(user),
            "PORT": "9090",
            "API_FOOTBALL_KEY": "abc",
            "REDIS_URL": "redis://cache:6379/0",
        }
    )
    assert cfg["server"]["port"] == 9090
    assert cfg["api_football"]["api_key"] == "abc"
    assert cfg["cache"]["url"] == "redis://cache:6379/0"


def test_apply_env_overrides_ignores_invalid_and_empty() -> None:
    base = {"server": {"port": 3000}}
    out = apply_env_overrides(base, {"PORT": "abc", "HOST": ""})
    assert out == {"server": {"port": 3000}}
    assert apply_env_overrides(base, {"API_FOOTBALL_CACHE_TTL": "30"})["api_football"] == {
        "cache_ttl_sec": 30
    }


def test_deep_merge_does_not_mutate() -> None:
    base = {"a": {"b": 1, "c": 2}, "d": [1]}
    out = deep_merge(base, {"a": {"b": 10}, "d": [2]})
    assert out == {"a": {"b": 10, "c": 2}, "d": [2]}
    assert base == {"a": {"b": 1, "c": 2}, "d": [1]}


def test_load_yaml_file_missing_or_invalid(tmp_path: Path) -> None:
    assert load_yaml_file(tmp_path / "missing.yaml") == {}
    bad = tmp_path / "bad.yaml"
    bad.write_text("- just\n- a list\n")
    assert load_yaml_file(bad) == {}


def test_get_section_validator_falls_back_to_default() -> None:
    cfg = get_section({"s": {"n": "x", "extra": 1}}, "s", {"n": 5}, {"n": int})
    assert cfg == {"n": 5}


def test_server_section_normalizes() -> None:
    cfg = get_server_section(
        {"server": {"port": 99999, "api_prefix": "v1/"}, "auth": {"api_key": "  "}}
    )
    assert cfg["port"] == 65535
    assert cfg["api_prefix"] == "/v1"
    assert cfg["api_key"] is None
    assert get_server_section({"server": {"api_prefix": "/"}})["api_prefix"] == ""


def test_cache_and_database_sections() -> None:
    assert get_cache_section({})["url"] is None
    assert get_cache_section({"cache": {"url": " redis://x "}})["url"] == "redis://x"
    assert get_database_section({})["path"] == "data/kickoffhub.db"


def test_api_football_section_clamps() -> None:
    cfg = get_api_football_section(
        {
            "api_football": {
                "cache_ttl_sec": -5,
                "breaker_error_threshold_percentage": 500,
                "breaker_volume_threshold": "many",
                "base_url": "",
            }
        }
    )
    assert cfg["cache_ttl_sec"] == 0
    assert cfg["breaker_error_threshold_percentage"] == 100
    assert cfg["breaker_volume_threshold"] == 1
    assert cfg["base_url"] == "https://v3.football.api-sports.io"


def test_modules_section_enabled_default() -> None:
    assert get_modules_section({}, "leagues") == {"enabled": True}
    cfg = {"modules": {"leagues": {"enabled": False, "sync_on_startup": True}}}
    assert get_modules_section(cfg, "leagues") == {"enabled": False, "sync_on_startup": True}


@pytest.mark.parametrize(
    "url,ok",
    [("https://v3.football.api-sports.io", True), ("http://localhost:8080", True), ("ftp://x", False), ("", False)],
)
def test_is_valid_http_url(url: str, ok: bool) -> None:
    assert is_valid_http_url(url) is ok
