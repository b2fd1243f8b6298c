"""
SQLite connection and schema initialization for KickOffHub.

Repositories (e.g. modules.leagues.repo) use with_connection to run a function inside a
connection. The Database handle is what the infrastructure registrar places in the
container under the "database" token; modules call handle.connect as their connector.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Callable, TypeVar

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


def with_connection(
    connector: Callable[[], sqlite3.Connection],
    fn: Callable[[sqlite3.Connection], _T],
    *,
    commit: bool = False,
) -> _T:
    """
    Obtain a connection, call fn(conn), and close in finally.
    If commit=True, commit on success and rollback on exception.
    """
    conn = connector()
    try:
        result = fn(conn)
        if commit:
            conn.commit()
        return result
    except Exception:
        if commit:
            conn.rollback()
        raise
    finally:
        conn.close()


_SCHEMA_PATH = Path(__file__).resolve().parent / "schema.sql"


def _apply_pragmas(conn: sqlite3.Connection) -> None:
    """Apply performance and robustness PRAGMAs. Safe to call on every connection."""
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.execute("PRAGMA foreign_keys=ON")


def _run_migrations(conn: sqlite3.Connection) -> None:
    """Run idempotent migrations for existing DBs (e.g. add new columns)."""
    cur = conn.execute("PRAGMA table_info(leagues)")
    columns = {row[1] for row in cur.fetchall()}
    for column in ("type", "logo", "country_code"):
        if column not in columns:
            conn.execute(f"ALTER TABLE leagues ADD COLUMN {column} TEXT")
            logger.debug("Added %s to leagues", column)
    conn.execute(
        "CREATE INDEX IF NOT EXISTS idx_leagues_country_code ON leagues(country_code)"
    )


def init_database(db_path: str) -> None:
    """
    Create the database file if needed and apply schema.
    Idempotent; safe to call on every startup.
    """
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    schema_sql = _SCHEMA_PATH.read_text()
    with sqlite3.connect(db_path) as conn:
        _apply_pragmas(conn)
        conn.executescript(schema_sql)
        _run_migrations(conn)
    logger.info("Schema applied to %s", db_path)


def get_connection(db_path: str) -> sqlite3.Connection:
    """
    Return a new SQLite connection with dict-like rows. Caller must close it.
    Applies WAL and busy_timeout for concurrent use and lock robustness.
    """
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    _apply_pragmas(conn)
    return conn


class Database:
    """Process-wide database handle: a path plus a connector. Does not hold a connection open."""

    def __init__(self, path: str, *, initialize: bool = True) -> None:
        self._path = str(path)
        if initialize:
            init_database(self._path)

    @property
    def path(self) -> str:
        return self._path

    def connect(self) -> sqlite3.Connection:
        return get_connection(self._path)
