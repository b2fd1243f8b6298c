"""
League business logic: validation on top of LeagueRepo, and sync from API-Football.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Any

from app.errors import ConflictException, NotFoundException, ValidationException
from modules.leagues.repo import LeagueRepo

logger = logging.getLogger(__name__)


SQLITE_MAX_INTEGER = 2**63 - 1


def normalize_league_id(raw_id: Any) -> int:
    try:
        league_id = int(raw_id)
    except (TypeError, ValueError):
        league_id = 0
    if league_id <= 0 or league_id > SQLITE_MAX_INTEGER:
        raise ValidationException("LEAGUE_ID_INVALID", code="LEAGUE_ID_INVALID")
    return league_id


def _provider_league(item: dict[str, Any]) -> dict[str, Any] | None:
    """Map one API-Football /leagues item to a leagues row; None when unusable."""
    league = item.get("league") or {}
    country = item.get("country") or {}
    if not league.get("id") or not league.get("name"):
        return None
    return {
        "id": int(league["id"]),
        "name": str(league["name"]).strip(),
        "type": league.get("type"),
        "logo": league.get("logo"),
        "country_code": country.get("code"),
    }


class LeaguesService:
    def __init__(self, repo: LeagueRepo) -> None:
        self._repo = repo

    def list_leagues(self, country_code: str | None = None) -> list[dict[str, Any]]:
        return self._repo.list_leagues(country_code)

    def get_league(self, raw_id: Any) -> dict[str, Any]:
        league = self._repo.get(normalize_league_id(raw_id))
        if league is None:
            raise NotFoundException("LEAGUE_NOT_FOUND", code="LEAGUE_NOT_FOUND")
        return league

    def create_league(self, payload: dict[str, Any]) -> dict[str, Any]:
        name = payload.get("name")
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            raise ValidationException("LEAGUE_NAME_REQUIRED", code="LEAGUE_NAME_REQUIRED")
        league = {
            "id": normalize_league_id(payload["id"]) if payload.get("id") is not None else None,
            "name": name,
            "type": payload.get("type"),
            "logo": payload.get("logo"),
            "country_code": payload.get("country_code"),
        }
        try:
            return self._repo.create(league)
        except sqlite3.IntegrityError as e:
            raise ConflictException("LEAGUE_EXISTS", code="LEAGUE_EXISTS") from e

    def delete_league(self, raw_id: Any) -> None:
        if not self._repo.delete(normalize_league_id(raw_id)):
            raise NotFoundException("LEAGUE_NOT_FOUND", code="LEAGUE_NOT_FOUND")

    async def sync_from_provider(self, client: Any, country_codes: list[str]) -> int:
        """
        Pull /leagues for each country code through the provider client and upsert rows.
        Returns the number of leagues written. Provider errors propagate.
        """
        written = 0
        for code in country_codes:
            body = await client.get("/leagues", {"code": code})
            rows = [
                row
                for row in (_provider_league(item) for item in (body or {}).get("response") or [])
                if row is not None
            ]
            for row in rows:
                await asyncio.to_thread(self._repo.upsert, row)
            written += len(rows)
            logger.info("Synced %d leagues for %s", len(rows), code)
        return written
