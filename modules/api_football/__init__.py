"""
API-Football integration module: publishes the resilient provider client for other modules.
No HTTP surface of its own.
"""

from __future__ import annotations

from app.container import Container
from app.manifest import ModuleManifest, NoRoutes
from app.tokens import TOKENS
from modules.api.client import ApiFootballClient
from sdk.config import get_api_football_section


def _build_client(container: Container) -> ApiFootballClient:
    cfg = get_api_football_section(container.get(TOKENS.infra.config))
    return ApiFootballClient.from_config(cfg, cache=container.get(TOKENS.infra.cache))


async def register(container: Container) -> ModuleManifest:
    client = container.resolve(TOKENS.services.api_football, _build_client)
    return ModuleManifest(
        name="api_football",
        base_path=None,
        routes=NoRoutes(),
        public_api=client,
    )
