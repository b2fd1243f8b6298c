"""Tests for sdk.logging: named loggers and idempotent handler installation."""

from __future__ import annotations

import logging
from pathlib import Path

from sdk.logging import configure_logging, get_logger


def _remove_installed(root: logging.Logger) -> None:
    for handler in [h for h in root.handlers if getattr(h, "_kickoffhub", False)]:
        root.removeHandler(handler)
        handler.close()


def test_get_logger_names() -> None:
    assert get_logger().name == "kickoffhub"
    assert get_logger("leagues").name == "kickoffhub.leagues"


def test_configure_logging_is_idempotent(tmp_path: Path) -> None:
    root = logging.getLogger()
    previous_level = root.level
    try:
        configure_logging("debug", tmp_path / "logs" / "app.log")
        configure_logging("warning")
        installed = [h for h in root.handlers if getattr(h, "_kickoffhub", False)]
        assert len(installed) == 2
        assert root.level == logging.WARNING
        assert (tmp_path / "logs" / "app.log").exists()
    finally:
        _remove_installed(root)
        root.setLevel(previous_level)


def test_configure_logging_unknown_level_falls_back() -> None:
    root = logging.getLogger()
    previous_level = root.level
    try:
        configure_logging("chatty")
        assert root.level == logging.INFO
    finally:
        _remove_installed(root)
        root.setLevel(previous_level)
