"""
Logging helpers: one "kickoffhub" root logger with a single stream handler.
Modules keep using logging.getLogger(__name__); get_logger() is for named app loggers.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

ROOT_LOGGER_NAME = "kickoffhub"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the app root logger, or a child of it (e.g. get_logger("leagues"))."""
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(
    level: str | int = "INFO", log_path: str | Path | None = None
) -> logging.Logger:
    """
    Install a stream handler (and optional file handler) on the root logger and set the level.
    Idempotent. Unknown level names fall back to INFO.
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.strip().upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    else:
        resolved = level
    root = logging.getLogger()
    installed = [h for h in root.handlers if getattr(h, "_kickoffhub", False)]
    if not installed:
        handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        if log_path:
            path = Path(log_path)
            path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(path, encoding="utf-8"))
        for handler in handlers:
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            handler._kickoffhub = True  # type: ignore[attr-defined]
            root.addHandler(handler)
    root.setLevel(resolved)
    return get_logger()
