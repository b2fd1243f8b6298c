"""Tests for run.validate_config and run.main argument handling."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

# Import run after path is set (tests run from project root)
import run as run_module  # noqa: E402


def _valid_config() -> dict:
    return {
        "server": {"host": "localhost", "port": 3000},
        "api_football": {"base_url": "https://v3.football.api-sports.io", "api_key": "k"},
        "cache": {"url": "redis://localhost:6379/0"},
    }


def test_validate_config_empty_raises() -> None:
    with pytest.raises(ValueError, match="Config is empty"):
        run_module.validate_config({})


def test_validate_config_invalid_port_raises() -> None:
    cfg = _valid_config()
    cfg["server"]["port"] = "not_a_port"
    with pytest.raises(ValueError, match="port must be an integer"):
        run_module.validate_config(cfg)


@pytest.mark.parametrize("port", [0, 70000])
def test_validate_config_port_out_of_range_raises(port: int) -> None:
    cfg = _valid_config()
    cfg["server"]["port"] = port
    with pytest.raises(ValueError, match="between 1 and 65535"):
        run_module.validate_config(cfg)


def test_validate_config_bad_base_url_raises() -> None:
    cfg = _valid_config()
    cfg["api_football"]["base_url"] = "ftp://example"
    with pytest.raises(ValueError, match="base_url must be an http"):
        run_module.validate_config(cfg)


def test_validate_config_missing_key_and_cache_only_warn(caplog: pytest.LogCaptureFixture) -> None:
    cfg = _valid_config()
    cfg["api_football"]["api_key"] = ""
    cfg["cache"]["url"] = ""
    with caplog.at_level(logging.WARNING, logger="run"):
        run_module.validate_config(cfg)
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "API_FOOTBALL_KEY" in messages
    assert "REDIS_URL" in messages


def test_validate_config_valid_passes() -> None:
    run_module.validate_config(_valid_config())


def test_main_exits_on_invalid_config() -> None:
    with patch.object(run_module, "load_config", return_value={}), patch.object(
        run_module, "configure_logging"
    ):
        with pytest.raises(SystemExit) as excinfo:
            run_module.main([])
    assert excinfo.value.code == 2


def test_main_applies_cli_overrides_and_serves() -> None:
    cfg = _valid_config()
    with patch.object(run_module, "load_config", return_value=cfg) as load, patch.object(
        run_module, "configure_logging"
    ), patch("uvicorn.run") as uvicorn_run:
        run_module.main(["--config", "my.yaml", "--host", "0.0.0.0", "--port", "8080"])
    load.assert_called_once_with("my.yaml")
    _, kwargs = uvicorn_run.call_args
    assert kwargs["host"] == "0.0.0.0"
    assert kwargs["port"] == 8080
