"""
Leagues module: league CRUD over SQLite with public/private routes, plus an optional
startup task that syncs leagues from API-Football.
"""

from __future__ import annotations

from app.container import Container, register_if_missing
from app.manifest import ModuleManifest, SplitRoutes
from app.tokens import TOKENS
from modules.leagues.repo import LeagueRepo
from modules.leagues.routes import build_routers
from modules.leagues.service import LeaguesService
from sdk.config import get_modules_section, get_server_section
from sdk.logging import get_logger

logger = get_logger("leagues")


async def register(container: Container) -> ModuleManifest:
    config = container.get(TOKENS.infra.config)
    module_cfg = get_modules_section(config, "leagues")
    database = container.get(TOKENS.infra.database)

    repo = register_if_missing(container, TOKENS.models.league, LeagueRepo(database.connect))
    service = container.set(TOKENS.services.leagues, LeaguesService(repo))
    public, private = build_routers(service, get_server_section(config)["api_key"])

    tasks = []
    if module_cfg.get("sync_on_startup"):
        codes = [str(c) for c in module_cfg.get("sync_country_codes") or [] if c]

        async def sync_leagues() -> None:
            # provider client is published by the api_football module
            client = container.get(TOKENS.services.api_football)
            count = await service.sync_from_provider(client, codes)
            logger.info("League sync wrote %d rows", count)

        tasks.append(sync_leagues)

    return ModuleManifest(
        name="leagues",
        base_path="/leagues",
        routes=SplitRoutes(public=public, private=private),
        tasks=tuple(tasks),
        public_api={"repo": repo, "service": service},
    )
