"""
Football proxy module: read-only pass-through to API-Football under /football.

    GET /football/_status             breaker state and cache settings
    GET /football/{resource}?a=b      provider GET /{resource}?a=b (cached)

Provider paths never start with an underscore, so /_status cannot hide one. Repeated
query keys are forwarded as-is.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request

from app.container import Container
from app.manifest import ModuleManifest, SingleRoutes
from app.tokens import TOKENS


def build_router(container: Container) -> APIRouter:
    router = APIRouter(tags=["football"])

    def _client():
        # resolved per request so the api_football module stays the only owner
        return container.get(TOKENS.services.api_football)

    @router.get("/_status")
    async def status() -> dict[str, Any]:
        client = _client()
        return {
            "breaker": client.breaker.stats(),
            "cache_ttl_sec": client.cache_ttl,
        }

    @router.get("/{resource:path}")
    async def proxy(resource: str, request: Request) -> Any:
        params = sorted(request.query_params.multi_items())
        return await _client().get(f"/{resource.strip('/')}", params)

    return router


async def register(container: Container) -> ModuleManifest:
    return ModuleManifest(
        name="football",
        base_path="/football",
        routes=SingleRoutes(build_router(container)),
    )
