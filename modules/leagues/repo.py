"""
League repository over SQLite. Uses the connector from the shared Database handle.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Any, Callable

from persistence.database import with_connection

logger = logging.getLogger(__name__)

LEAGUE_COLUMNS = ("id", "name", "type", "logo", "country_code")


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_dict(row: Any) -> dict[str, Any]:
    return {col: row[i] for i, col in enumerate(LEAGUE_COLUMNS)}


class LeagueRepo:
    """CRUD over the leagues table."""

    def __init__(self, connector: Callable[[], sqlite3.Connection]) -> None:
        self._connector = connector

    def list_leagues(self, country_code: str | None = None) -> list[dict[str, Any]]:
        sql = f"SELECT {', '.join(LEAGUE_COLUMNS)} FROM leagues"
        args: tuple[Any, ...] = ()
        if country_code:
            sql += " WHERE country_code = ?"
            args = (country_code,)
        sql += " ORDER BY name"

        def do_list(conn: sqlite3.Connection) -> list[dict[str, Any]]:
            return [_row_to_dict(r) for r in conn.execute(sql, args).fetchall()]

        return with_connection(self._connector, do_list)

    def get(self, league_id: int) -> dict[str, Any] | None:
        def do_get(conn: sqlite3.Connection) -> dict[str, Any] | None:
            row = conn.execute(
                f"SELECT {', '.join(LEAGUE_COLUMNS)} FROM leagues WHERE id = ?",
                (league_id,),
            ).fetchone()
            return _row_to_dict(row) if row else None

        return with_connection(self._connector, do_get)

    def create(self, league: dict[str, Any]) -> dict[str, Any]:
        """Insert a league. Raises sqlite3.IntegrityError on duplicate id or name."""
        now = _now_iso()

        def do_insert(conn: sqlite3.Connection) -> int:
            cur = conn.execute(
                """
                INSERT INTO leagues (id, name, type, logo, country_code, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    league.get("id"),
                    league["name"],
                    league.get("type"),
                    league.get("logo"),
                    league.get("country_code"),
                    now,
                    now,
                ),
            )
            return cur.lastrowid

        new_id = with_connection(self._connector, do_insert, commit=True)
        return self.get(new_id) or {}

    def upsert(self, league: dict[str, Any]) -> None:
        """Insert or update by id (provider sync)."""
        now = _now_iso()

        def do_upsert(conn: sqlite3.Connection) -> None:
            conn.execute(
                """
                INSERT INTO leagues (id, name, type, logo, country_code, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    type = excluded.type,
                    logo = excluded.logo,
                    country_code = excluded.country_code,
                    updated_at = excluded.updated_at
                """,
                (
                    league["id"],
                    league["name"],
                    league.get("type"),
                    league.get("logo"),
                    league.get("country_code"),
                    now,
                    now,
                ),
            )

        with_connection(self._connector, do_upsert, commit=True)

    def delete(self, league_id: int) -> bool:
        def do_delete(conn: sqlite3.Connection) -> int:
            return conn.execute("DELETE FROM leagues WHERE id = ?", (league_id,)).rowcount

        return with_connection(self._connector, do_delete, commit=True) > 0
