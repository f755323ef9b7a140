"""Deterministic demo data for the Cold_Storage survey table.

The table is created without declared column types, the way survey exports
arrive, and the demo rows deliberately mix storage types (numbers as text,
blank states, missing QC dates) so the dashboard's fallbacks are visible.
"""

from __future__ import annotations

import random
import sqlite3
from typing import Any, Dict, Iterable, List, Sequence

from .db import SOURCE_TABLE, quote_identifier, table_exists
from .summary import schema as s


DEMO_COLUMNS: List[str] = [
    s.SURVEY_ID,
    s.STATE,
    s.DISTRICT,
    s.CITY,
    s.FACILITY_TYPE,
    s.OWNER_NAME,
    s.CONTACT_NUMBER,
    s.ACTUAL_CAPACITY,
    s.TOTAL_AREA,
    s.NUMBER_OF_CHAMBERS,
    s.YEAR_ESTABLISHED,
    s.USED_CAPACITY,
    s.AVAILABLE_CAPACITY,
    s.TEMPERATURE,
    s.QC_STATUS,
    s.QC_DATE,
    s.OBSERVATION_DATE,
    s.LATITUDE,
    s.LONGITUDE,
]

_PLACES = [
    ("Maharashtra", "Pune", "Pune", 18.52, 73.85),
    ("Maharashtra", "Nagpur", "Nagpur", 21.15, 79.09),
    ("Uttar Pradesh", "Lucknow", "Lucknow", 26.85, 80.95),
    ("Uttar Pradesh", "Agra", "Agra", 27.18, 78.01),
    ("Gujarat", "Ahmedabad", "Ahmedabad", 23.02, 72.57),
    ("Gujarat", "Rajkot", "Rajkot", 22.30, 70.80),
    ("Punjab", "Ludhiana", "Ludhiana", 30.90, 75.85),
    ("West Bengal", "Hooghly", "Chinsurah", 22.90, 88.39),
]

_FACILITY_TYPES = ["Single commodity", "Multi commodity", "Controlled atmosphere", "Ripening chamber"]
_QC_STATUSES = ["Approved", "Pending", "Rejected", ""]


def create_source_table(conn: sqlite3.Connection, columns: Sequence[str] = DEMO_COLUMNS) -> None:
    cols = ", ".join(quote_identifier(c) for c in columns)
    conn.execute(f"CREATE TABLE IF NOT EXISTS {quote_identifier(SOURCE_TABLE)} ({cols})")
    conn.commit()


def insert_rows(conn: sqlite3.Connection, rows: Iterable[Dict[str, Any]]) -> int:
    count = 0
    for row in rows:
        names = list(row)
        placeholders = ", ".join(["?"] * len(names))
        conn.execute(
            f"INSERT INTO {quote_identifier(SOURCE_TABLE)} "
            f"({', '.join(quote_identifier(n) for n in names)}) VALUES ({placeholders})",
            tuple(row[n] for n in names),
        )
        count += 1
    conn.commit()
    return count


def build_demo_rows(count: int = 120, seed: int = 1337) -> List[Dict[str, Any]]:
    rng = random.Random(seed)
    rows: List[Dict[str, Any]] = []
    for i in range(count):
        state, district, city, lat, lng = _PLACES[i % len(_PLACES)]
        capacity = rng.randint(500, 20000)
        used = rng.randint(0, capacity)

        # Mixed storage: some exports keep numbers as formatted text.
        capacity_cell: Any = capacity if rng.random() < 0.7 else f"{capacity:,}"
        area_cell: Any = round(rng.uniform(300, 9000), 2)
        if rng.random() < 0.1:
            area_cell = "n/a"

        month = rng.randint(1, 12)
        day = rng.randint(1, 28)
        qc_date = f"2024-{month:02d}-{day:02d}"
        observation_date = f"2023-{month:02d}-{day:02d}"
        roll = rng.random()
        if roll < 0.2:
            qc_date = None
        elif roll < 0.25:
            qc_date = ""
        elif roll < 0.35:
            # Some field teams typed dates day-first.
            qc_date = f"{day:02d}/{month:02d}/2024"

        rows.append(
            {
                s.SURVEY_ID: f"CS-{i + 1:05d}" if rng.random() < 0.8 else 10000 + i,
                s.STATE: state if rng.random() < 0.95 else "",
                s.DISTRICT: district,
                s.CITY: city,
                s.FACILITY_TYPE: rng.choice(_FACILITY_TYPES),
                s.OWNER_NAME: f"{city} Cold Chain {rng.randint(1, 40)}",
                s.CONTACT_NUMBER: rng.randint(7000000000, 9999999999),
                s.ACTUAL_CAPACITY: capacity_cell,
                s.TOTAL_AREA: area_cell,
                s.NUMBER_OF_CHAMBERS: str(rng.randint(1, 12)),
                s.YEAR_ESTABLISHED: rng.randint(1975, 2023),
                s.USED_CAPACITY: used,
                s.AVAILABLE_CAPACITY: capacity - used,
                s.TEMPERATURE: round(rng.uniform(-25, 8), 1),
                s.QC_STATUS: rng.choice(_QC_STATUSES),
                s.QC_DATE: qc_date,
                s.OBSERVATION_DATE: observation_date,
                s.LATITUDE: round(lat + rng.uniform(-0.2, 0.2), 5),
                s.LONGITUDE: f"{lng + rng.uniform(-0.2, 0.2):.5f}",
            }
        )
    return rows


def seed_demo(conn: sqlite3.Connection, count: int = 120) -> int:
    """Create and fill the demo table. Leaves an already populated table alone."""

    if table_exists(conn):
        row = conn.execute(f"SELECT COUNT(1) FROM {quote_identifier(SOURCE_TABLE)}").fetchone()
        if row and int(row[0] or 0) > 0:
            return 0
    create_source_table(conn)
    return insert_rows(conn, build_demo_rows(count))
