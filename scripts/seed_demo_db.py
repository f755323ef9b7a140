#!/usr/bin/env python3
"""Seed a demo SQLite Cold_Storage table for UI development.

This script is deterministic so screenshots/demos are stable.

DB path resolution order:
  COLD_STORAGE_SQLITE_PATH -> COLD_STORAGE_DB -> ./cold_storage.sqlite

Idempotent behavior:
  If the table already holds rows, do nothing.
"""

from __future__ import annotations

from cold_storage_dashboard.db import get_db_path, open_conn
from cold_storage_dashboard.demo import seed_demo


def main() -> int:
    db_path = get_db_path()
    with open_conn(db_path) as conn:
        inserted = seed_demo(conn)
    if not inserted:
        print(f"Cold_Storage already has rows; leaving {db_path} unchanged")
        return 0
    print(f"seeded {inserted} demo facilities into {db_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
