"""
Bootstrap pipeline: infrastructure registrar -> cache connect -> module loader -> router composer.
Runs strictly in that order before the server accepts requests.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, NamedTuple

from fastapi import APIRouter

from app.container import Container
from app.errors import InfrastructureError
from app.loader import load_modules
from app.manifest import ModuleManifest, ModuleRegistration
from app.router import compose_router
from app.tokens import REQUIRED_INFRA_TOKENS, TOKENS
from modules.api.cache_client import create_cache_client
from persistence.database import Database
from sdk.config import get_cache_section, get_database_section
from sdk.logging import get_logger

logger = logging.getLogger(__name__)


class Application(NamedTuple):
    """Result of bootstrap(): the populated container, manifests and composed router."""

    container: Container
    manifests: list[ModuleManifest]
    router: APIRouter


def _build(token: str, factory):
    try:
        return factory()
    except InfrastructureError:
        raise
    except Exception as e:
        raise InfrastructureError(token, str(e) or type(e).__name__) from e


def register_infrastructure(
    container: Container,
    config: dict[str, Any],
    *,
    database: Any = None,
    cache: Any = None,
    app_logger: logging.Logger | None = None,
) -> Container:
    """
    Place process-wide singletons (config, database, cache, logger) in the container.
    Injected values win over ones built from config. The cache is created but not connected.

    Raises:
        InfrastructureError: a singleton could not be built or is missing afterwards
    """
    if not isinstance(config, dict):
        raise InfrastructureError(TOKENS.infra.config, "config must be a dict")
    container.set(TOKENS.infra.config, config)

    if database is None:
        db_cfg = get_database_section(config)
        database = _build(TOKENS.infra.database, lambda: Database(db_cfg["path"]))
    container.set(TOKENS.infra.database, database)

    if cache is None:
        cache_cfg = get_cache_section(config)
        cache = _build(
            TOKENS.infra.cache,
            lambda: create_cache_client(cache_cfg["url"], cache_cfg["socket_timeout_sec"]),
        )
    container.set(TOKENS.infra.cache, cache)

    container.set(TOKENS.infra.logger, app_logger or get_logger())

    for token in REQUIRED_INFRA_TOKENS:
        if not container.has(token) or container.get(token) is None:
            raise InfrastructureError(token, "not registered")
    logger.info("Infrastructure registered: %s", ", ".join(REQUIRED_INFRA_TOKENS))
    return container


async def bootstrap(
    config: dict[str, Any],
    *,
    container: Container | None = None,
    registrations: Iterable[ModuleRegistration] | None = None,
    database: Any = None,
    cache: Any = None,
    connect_cache: bool = True,
) -> Application:
    """
    Run the startup pipeline and return the composed Application.
    Cache connection failures are logged and tolerated (fail-open); registrar and
    module failures propagate and must abort startup.
    """
    container = container if container is not None else Container()
    register_infrastructure(container, config, database=database, cache=cache)

    try:
        if connect_cache:
            cache_client = container.get(TOKENS.infra.cache)
            if not await cache_client.connect():
                logger.warning("Continuing without cache")

        manifests = await load_modules(container, registrations, config=config)
        router = compose_router(manifests)
    except BaseException:
        logger.error("Bootstrap aborted; releasing acquired resources")
        await release_resources(container)
        raise
    logger.info("Bootstrap complete: %d modules", len(manifests))
    return Application(container, manifests, router)


async def release_resources(container: Container) -> None:
    """Close the provider HTTP client and the cache if they were registered."""
    if container.has(TOKENS.services.api_football):
        try:
            await container.get(TOKENS.services.api_football).aclose()
        except Exception as e:
            logger.warning("Failed to close API-Football client: %s", e)
    if container.has(TOKENS.infra.cache):
        await container.get(TOKENS.infra.cache).close()
