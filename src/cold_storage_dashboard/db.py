from __future__ import annotations

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path


SOURCE_TABLE = "Cold_Storage"

DEFAULT_DB_PATH = "./cold_storage.sqlite"

_DB_ENV_VARS = ("COLD_STORAGE_SQLITE_PATH", "COLD_STORAGE_DB")


def get_db_path() -> str:
    for name in _DB_ENV_VARS:
        path = (os.getenv(name) or "").strip()
        if path:
            return path
    return DEFAULT_DB_PATH


def connect(path: str | None = None) -> sqlite3.Connection:
    db_path = Path(path or get_db_path())
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def open_conn(path: str | None = None):
    conn = connect(path)
    try:
        yield conn
    finally:
        try:
            conn.close()
        except Exception:
            pass


def table_exists(conn: sqlite3.Connection, table: str = SOURCE_TABLE) -> bool:
    row = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' AND name=?",
        (table,),
    ).fetchone()
    return row is not None


def get_columns(conn: sqlite3.Connection, table: str = SOURCE_TABLE) -> list[str]:
    """Column names of `table` in ordinal order, or [] when it does not exist.

    Survey exports name columns after the question text, so names may hold
    spaces, punctuation and question marks.
    """

    if not table_exists(conn, table):
        return []
    rows = conn.execute(f"PRAGMA table_info({quote_identifier(table)})").fetchall()
    # PRAGMA table_info returns: cid, name, type, notnull, dflt_value, pk
    return [str(r[1]) for r in rows]


def quote_identifier(name: str) -> str:
    """Bracket-quote an identifier; `]` is escaped by doubling."""

    return "[" + str(name).replace("]", "]]") + "]"
