from __future__ import annotations

import json
import logging
import sqlite3
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..db import get_columns
from ..feature_flags import get_flags, resolve_schema
from .decode import decode
from .filters import FilterCriteria
from .query import build_summary_query
from .schema import RecordSchema, get_schema


logger = logging.getLogger("csd.summary")


@dataclass(frozen=True)
class FacetSet:
    states: Tuple[str, ...] = ()
    cities: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, List[str]]:
        return {"states": list(self.states), "cities": list(self.cities)}


@dataclass(frozen=True)
class DashboardResult:
    records: Tuple[Any, ...]
    facets: FacetSet
    schema: str
    criteria: FilterCriteria = field(default_factory=FilterCriteria)
    defaulted_fields: int = 0


def _distinct_sorted(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted({v for v in values if v}))


def derive_facets(records: Sequence[Any]) -> FacetSet:
    """Distinct non-empty states and cities, ascending."""

    return FacetSet(
        states=_distinct_sorted(getattr(r, "state", "") for r in records),
        cities=_distinct_sorted(getattr(r, "city", "") for r in records),
    )


def decode_record(row: Any, schema: RecordSchema, now: datetime) -> Tuple[Any, List[Tuple[str, str]]]:
    """Decode one row into the schema's record type.

    Returns the record plus (field, reason) pairs for every defaulted field.
    """

    values: Dict[str, Any] = {}
    fallbacks: List[Tuple[str, str]] = []
    for spec in schema.fields:
        result = decode(row, spec.name, spec.kind, now=now)
        values[spec.name] = result.value
        if result.defaulted:
            fallbacks.append((spec.name, result.reason))
    return schema.record_type(**values), fallbacks


def _as_schema(schema: Union[RecordSchema, str, None]) -> RecordSchema:
    if isinstance(schema, RecordSchema):
        return schema
    return get_schema(resolve_schema(schema))


def aggregate(
    rows: Iterable[Any],
    schema: Union[RecordSchema, str, None] = None,
    *,
    now: Optional[datetime] = None,
    criteria: Optional[FilterCriteria] = None,
) -> DashboardResult:
    """Decode rows in delivery order and derive facets from the records.

    `now` is the decode time used for datetime fields without a source value;
    it is captured once so a single pass reports a single timestamp.
    """

    record_schema = _as_schema(schema)
    now = now or datetime.now()
    log_fallbacks = get_flags().log_decode_fallbacks

    records: List[Any] = []
    defaulted = 0
    for index, row in enumerate(rows):
        record, fallbacks = decode_record(row, record_schema, now)
        records.append(record)
        defaulted += len(fallbacks)
        if log_fallbacks and fallbacks:
            logger.debug(
                json.dumps(
                    {"event": "decode_fallback", "row": index, "fields": dict(fallbacks)},
                    sort_keys=True,
                )
            )

    return DashboardResult(
        records=tuple(records),
        facets=derive_facets(records),
        schema=record_schema.name,
        criteria=criteria or FilterCriteria(),
        defaulted_fields=defaulted,
    )


def load_dashboard(
    conn: sqlite3.Connection,
    criteria: Optional[FilterCriteria] = None,
    schema: Union[RecordSchema, str, None] = None,
    *,
    now: Optional[datetime] = None,
) -> DashboardResult:
    """Build, execute and aggregate the summary query for one request.

    Storage errors (missing table, locked database, ...) propagate.
    """

    criteria = criteria or FilterCriteria()
    record_schema = _as_schema(schema)
    columns = get_columns(conn)
    built = build_summary_query(criteria, record_schema, columns)

    if get_flags().query_debug:
        logger.info(
            json.dumps(
                {"event": "summary_query", "sql": built.sql, "params": sorted(built.params)},
                ensure_ascii=False,
            )
        )

    start = time.perf_counter()
    rows = conn.execute(built.sql, built.params).fetchall()
    result = aggregate(rows, record_schema, now=now, criteria=criteria)

    logger.info(
        json.dumps(
            {
                "event": "dashboard_loaded",
                "schema": result.schema,
                "filters": criteria.applied(),
                "records": len(result.records),
                "states": len(result.facets.states),
                "cities": len(result.facets.cities),
                "defaulted_fields": result.defaulted_fields,
                "seconds": round(time.perf_counter() - start, 6),
            }
        )
    )
    return result
