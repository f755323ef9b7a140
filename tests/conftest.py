import os
import socket
import sqlite3
import sys
import urllib.request
from pathlib import Path

import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
SRC = REPO_ROOT / "src"

# Prefer repo sources over any installed package.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


@pytest.fixture(autouse=True)
def block_network(monkeypatch):
    if os.getenv("LIVE") == "1":
        return

    real_connect = socket.socket.connect

    def guarded_connect(sock, address):
        host = address[0]
        if host not in ("127.0.0.1", "localhost"):
            raise RuntimeError("Network access blocked in tests")
        return real_connect(sock, address)

    monkeypatch.setattr(socket.socket, "connect", guarded_connect)
    monkeypatch.setattr(
        urllib.request,
        "urlopen",
        lambda *args, **kwargs: (_ for _ in ()).throw(
            RuntimeError("Network access blocked in tests")
        ),
    )


@pytest.fixture(autouse=True)
def isolated_flags(monkeypatch):
    from cold_storage_dashboard.feature_flags import reset_flags_cache

    for name in (
        "CSD_FEATURE_UTILIZATION_SCHEMA",
        "CSD_FEATURE_LOG_DECODE_FALLBACKS",
        "CSD_FEATURE_QUERY_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_flags_cache()
    yield
    reset_flags_cache()


@pytest.fixture
def make_db(tmp_path):
    """Create a Cold_Storage table with the given columns and rows.

    Columns are untyped, like a survey export; returns the db path.
    """

    from cold_storage_dashboard.demo import DEMO_COLUMNS, create_source_table, insert_rows

    def _make(rows, columns=None, name="cold_storage.sqlite"):
        path = tmp_path / name
        conn = sqlite3.connect(str(path))
        try:
            create_source_table(conn, columns or DEMO_COLUMNS)
            insert_rows(conn, rows)
        finally:
            conn.close()
        return path

    return _make
