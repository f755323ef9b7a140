from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, FrozenSet, Iterable, List, Optional

from ..db import SOURCE_TABLE, quote_identifier
from .filters import FilterCriteria
from .schema import CITY, EFFECTIVE_DATE_SOURCES, STATE, FieldSpec, RecordSchema


@dataclass(frozen=True)
class BuiltQuery:
    sql: str
    params: Dict[str, Any]
    predicates: List[str] = field(default_factory=list)


BASE_PREDICATE = "1=1"


def _available(spec: FieldSpec, columns: Optional[FrozenSet[str]]) -> List[str]:
    if columns is None:
        # Without introspection only the columns every export carries are used.
        return [] if spec.optional else list(spec.sources)
    return [c for c in spec.sources if c in columns]


def _cell_ref(spec: FieldSpec, column: str) -> str:
    ref = quote_identifier(column)
    if spec.as_text:
        ref = f"CAST({ref} AS TEXT)"
    if spec.blank_as_null:
        ref = f"NULLIF(TRIM({ref}), '')"
    return ref


def _coalesce(parts: List[str]) -> str:
    if not parts:
        return "NULL"
    if len(parts) == 1:
        return parts[0]
    return "COALESCE(" + ", ".join(parts) + ")"


def source_expr(spec: FieldSpec, columns: Optional[FrozenSet[str]] = None) -> str:
    """SQL expression coalescing a field's source columns into its fallback."""

    parts = [_cell_ref(spec, column) for column in _available(spec, columns)]
    if spec.fallback is not None:
        parts.append(spec.fallback)
    return _coalesce(parts)


def iso_date_sql(ref: str) -> str:
    """Rewrite dd/mm/yyyy and dd-mm-yyyy text (any trailing time kept) to ISO.

    Other text passes through unchanged, so ISO dates compare as they are.
    """

    day_first = " OR ".join(
        f"{ref} GLOB '[0-9][0-9]{sep}[0-9][0-9]{sep}[0-9][0-9][0-9][0-9]*'" for sep in ("/", "-")
    )
    return (
        f"CASE WHEN {day_first} "
        f"THEN substr({ref}, 7, 4) || '-' || substr({ref}, 4, 2) || '-' || substr({ref}, 1, 2) || substr({ref}, 11) "
        f"ELSE {ref} END"
    )


_EFFECTIVE_DATE = FieldSpec(
    name="effective_date", kind="datetime", sources=EFFECTIVE_DATE_SOURCES, blank_as_null=True
)


def effective_date_expr(columns: Optional[FrozenSet[str]] = None) -> str:
    """The date used both for range filtering and as the reported record date.

    Blank cells fall through to the next source; every source is normalized to
    ISO text before coalescing so range bounds compare in calendar order.
    """

    parts = [
        iso_date_sql(_cell_ref(_EFFECTIVE_DATE, column))
        for column in _available(_EFFECTIVE_DATE, columns)
    ]
    return _coalesce(parts)


def _location_expr(columns: Optional[FrozenSet[str]]) -> str:
    def _raw(column: str) -> str:
        if columns is not None and column not in columns:
            return "''"
        return f"COALESCE({quote_identifier(column)}, '')"

    return f"TRIM({_raw(CITY)} || ', ' || {_raw(STATE)}, ', ')"


def _field(schema: RecordSchema, name: str) -> FieldSpec:
    for spec in schema.fields:
        if spec.name == name:
            return spec
    raise LookupError(f"{schema.name} has no field {name}")


def _bind_date(value: date) -> str:
    # Dates live in SQLite as ISO text; bind the same representation.
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    return value.isoformat()


def build_summary_query(
    criteria: Optional[FilterCriteria],
    schema: RecordSchema,
    columns: Optional[Iterable[str]] = None,
) -> BuiltQuery:
    criteria = criteria or FilterCriteria()
    cols = frozenset(columns) if columns is not None else None

    state_expr = source_expr(_field(schema, "state"), cols)
    city_expr = source_expr(_field(schema, "city"), cols)
    date_expr = effective_date_expr(cols)
    # rowid breaks state/city ties so ids and output order agree.
    order_by = f"{state_expr}, {city_expr}, rowid"

    projection: List[str] = []
    for spec in schema.fields:
        if spec.computed == "row_number":
            expr = f"ROW_NUMBER() OVER (ORDER BY {order_by})"
        elif spec.computed == "location":
            expr = _location_expr(cols)
        elif spec.computed == "effective_date":
            expr = date_expr
        else:
            expr = source_expr(spec, cols)
        projection.append(f"    {expr} AS {spec.name}")

    predicates: List[str] = []
    params: Dict[str, Any] = {}
    if criteria.state:
        predicates.append(f"{state_expr} = :state")
        params["state"] = criteria.state
    if criteria.city:
        predicates.append(f"{city_expr} = :city")
        params["city"] = criteria.city
    if criteria.start_date is not None:
        predicates.append(f"{date_expr} >= :start_date")
        params["start_date"] = _bind_date(criteria.start_date)
    if criteria.end_date is not None:
        predicates.append(f"{date_expr} <= :end_date")
        params["end_date"] = _bind_date(criteria.end_date)

    sql = "SELECT\n" + ",\n".join(projection) + "\n"
    sql += f"FROM {quote_identifier(SOURCE_TABLE)}\n"
    sql += f"WHERE {BASE_PREDICATE}"
    for predicate in predicates:
        sql += f"\n  AND {predicate}"
    sql += f"\nORDER BY {order_by}"

    return BuiltQuery(sql=sql, params=params, predicates=predicates)
