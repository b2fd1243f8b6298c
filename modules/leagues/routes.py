"""
League routes: public reads, private (API key) writes. Mounted at /leagues.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends

from app import responses
from app.auth import require_api_key
from modules.leagues.service import LeaguesService


def build_routers(
    service: LeaguesService, api_key: str | None
) -> tuple[APIRouter, APIRouter]:
    """Return (public_router, private_router)."""
    public = APIRouter(tags=["leagues"])
    private = APIRouter(tags=["leagues"], dependencies=[Depends(require_api_key(api_key))])

    @public.get("")
    def list_leagues(country_code: str | None = None) -> dict[str, Any]:
        leagues = service.list_leagues(country_code)
        return responses.success({"leagues": leagues}, "Leagues fetched")

    @public.get("/{league_id}")
    def get_league(league_id: str) -> dict[str, Any]:
        return responses.success({"league": service.get_league(league_id)}, "League fetched")

    @private.post("")
    def create_league(payload: dict[str, Any] = Body(...)):
        return responses.created({"league": service.create_league(payload)}, "League created")

    @private.delete("/{league_id}")
    def delete_league(league_id: str) -> dict[str, Any]:
        service.delete_league(league_id)
        return responses.success(None, "League deleted")

    return public, private
