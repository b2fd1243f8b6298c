#!/usr/bin/env python3
"""
KickOffHub entry point: load and validate config, configure logging, serve the API with uvicorn.
Usage:
    python run.py
    python run.py --config my.yaml --port 8080
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on path
_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from config import load_config  # noqa: E402
from sdk.config import (  # noqa: E402
    get_api_football_section,
    get_cache_section,
    get_server_section,
    is_valid_http_url,
)
from sdk.logging import configure_logging  # noqa: E402

logger = logging.getLogger(__name__)


def validate_config(config: dict) -> None:
    """Validate required config values. Raises ValueError with a clear message if invalid."""
    if not config:
        raise ValueError("Config is empty")
    server = config.get("server") or {}
    port = server.get("port", 3000)
    try:
        port = int(port)
    except (TypeError, ValueError):
        raise ValueError("config.server.port must be an integer") from None
    if not (1 <= port <= 65535):
        raise ValueError("config.server.port must be between 1 and 65535")
    provider = config.get("api_football") or {}
    base_url = str(provider.get("base_url", "https://v3.football.api-sports.io"))
    if not is_valid_http_url(base_url):
        raise ValueError("config.api_football.base_url must be an http(s) URL")
    if not get_api_football_section(config)["api_key"]:
        logger.warning(
            "API_FOOTBALL_KEY is not set; provider-backed endpoints will fail"
        )
    if not get_cache_section(config)["url"]:
        logger.warning("REDIS_URL is not set; provider responses will not be cached")


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Run the KickOffHub API server")
    parser.add_argument("--config", help="Path to a YAML config overriding config.yaml")
    parser.add_argument("--host", help="Host to bind to")
    parser.add_argument("--port", type=int, help="Port to bind to")
    args = parser.parse_args(argv)

    raw = load_config(args.config)
    if args.host:
        raw.setdefault("server", {})["host"] = args.host
    if args.port is not None:
        raw.setdefault("server", {})["port"] = args.port

    log_cfg = raw.get("logging") or {}
    configure_logging(log_cfg.get("level", "INFO"), log_cfg.get("path"))
    try:
        validate_config(raw)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    import uvicorn

    from app.server import create_app

    server_cfg = get_server_section(raw)
    try:
        uvicorn.run(
            create_app(raw),
            host=server_cfg["host"],
            port=server_cfg["port"],
            log_level="info",
        )
    except KeyboardInterrupt:
        logger.info("Server stopped by user")


if __name__ == "__main__":
    main()
