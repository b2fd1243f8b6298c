"""
KickOffHub SDK: common library for the app and feature modules.
Use for config section access and logging.

Example:
    from sdk import get_api_football_section, get_cache_section
    cfg = get_api_football_section(raw_config)

    from sdk import get_logger
"""

from __future__ import annotations

from sdk.config import (
    get_api_football_section,
    get_cache_section,
    get_database_section,
    get_modules_section,
    get_section,
    get_server_section,
    is_valid_http_url,
)
from sdk.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_api_football_section",
    "get_cache_section",
    "get_database_section",
    "get_logger",
    "get_modules_section",
    "get_section",
    "get_server_section",
    "is_valid_http_url",
]
