"""Type-tolerant cell decoding.

Survey exports land in the store with whatever column types the importing
tool guessed, and those guesses differ per deployment. Every decoder here
returns a `Decoded` holding either the coerced value or the target type's
default; none of them raise.

A stored value is first classified into a small closed set of stored kinds,
then each decoder matches explicitly on that kind.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Generic, Literal, Optional, Tuple, TypeVar


T = TypeVar("T")

StoredKind = Literal["null", "integer", "text", "decimal", "double", "date", "unsupported"]

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# dd/mm/yyyy or dd-mm-yyyy, optionally followed by a time. Must stay in step
# with the SQL rewrite in `query.iso_date_sql` so filters see the same date.
_DAY_FIRST = re.compile(r"^([0-9]{2})([/-])([0-9]{2})\2([0-9]{4})(.*)$", re.DOTALL)
# Only text led by an ISO date orders correctly as text in SQL.
_ISO_DATE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}")

# Larger magnitudes cannot round into the 32-bit range.
_INT32_MAX_ADJUSTED = 9


@dataclass(frozen=True)
class Decoded(Generic[T]):
    value: T
    defaulted: bool = False
    reason: str = ""


_MISSING = object()


def read_cell(row: Any, column: str) -> Any:
    """Return the raw cell, or `_MISSING` when the row has no such column."""

    try:
        keys = row.keys()
    except AttributeError:
        return _MISSING
    if column not in keys:
        return _MISSING
    return row[column]


def classify(value: Any) -> StoredKind:
    if value is None:
        return "null"
    # bool is an int subclass; stores that surface booleans mean 0/1.
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "double"
    if isinstance(value, Decimal):
        return "decimal"
    if isinstance(value, str):
        return "text"
    if isinstance(value, (datetime, date)):
        return "date"
    return "unsupported"


def _default(value: T, reason: str) -> Decoded[T]:
    return Decoded(value=value, defaulted=True, reason=reason)


def _parse_decimal(text: str) -> Optional[Decimal]:
    cleaned = text.strip().replace(",", "")
    if not cleaned:
        return None
    try:
        number = Decimal(cleaned)
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def _parse_datetime(text: str) -> Optional[datetime]:
    cleaned = text.strip()
    if not cleaned:
        return None
    match = _DAY_FIRST.match(cleaned)
    if match:
        day, _, month, year, rest = match.groups()
        cleaned = f"{year}-{month}-{day}{rest}"
    if not _ISO_DATE.match(cleaned):
        return None
    try:
        return datetime.fromisoformat(cleaned)
    except ValueError:
        return None


def _lookup(row: Any, column: str) -> Tuple[Any, StoredKind, str]:
    raw = read_cell(row, column)
    if raw is _MISSING:
        return None, "null", "missing column"
    kind = classify(raw)
    if kind == "null":
        return None, kind, "null"
    return raw, kind, ""


def decode_int(row: Any, column: str) -> Decoded[int]:
    raw, kind, reason = _lookup(row, column)
    if reason:
        return _default(0, reason)

    number: Optional[Decimal] = None
    if kind == "integer":
        number = Decimal(int(raw))
    elif kind == "text":
        number = _parse_decimal(raw)
        if number is None:
            return _default(0, "unparseable text")
    elif kind == "decimal":
        number = raw if raw.is_finite() else None
    elif kind == "double":
        number = Decimal(repr(raw)) if math.isfinite(raw) else None
    else:
        return _default(0, f"unsupported kind: {kind}")

    if number is None:
        return _default(0, "non-finite number")
    if number.adjusted() > _INT32_MAX_ADJUSTED:
        return _default(0, "out of range")
    # Ties go to the even neighbour.
    value = int(number.to_integral_value())
    if not INT32_MIN <= value <= INT32_MAX:
        return _default(0, "out of range")
    return Decoded(value=value)


def decode_str(row: Any, column: str) -> Decoded[str]:
    raw, kind, reason = _lookup(row, column)
    if reason:
        return _default("", reason)
    if kind == "text":
        return Decoded(value=raw)
    return _default("", f"unsupported kind: {kind}")


def decode_decimal(row: Any, column: str) -> Decoded[Decimal]:
    raw, kind, reason = _lookup(row, column)
    zero = Decimal(0)
    if reason:
        return _default(zero, reason)

    if kind == "decimal":
        return Decoded(value=raw) if raw.is_finite() else _default(zero, "non-finite number")
    if kind == "double":
        if not math.isfinite(raw):
            return _default(zero, "non-finite number")
        # repr() is the shortest string that round-trips the double.
        return Decoded(value=Decimal(repr(raw)))
    if kind == "integer":
        return Decoded(value=Decimal(int(raw)))
    if kind == "text":
        number = _parse_decimal(raw)
        if number is None:
            return _default(zero, "unparseable text")
        return Decoded(value=number)
    return _default(zero, f"unsupported kind: {kind}")


def decode_float(row: Any, column: str) -> Decoded[float]:
    raw, kind, reason = _lookup(row, column)
    if reason:
        return _default(0.0, reason)

    if kind == "double":
        return Decoded(value=raw) if math.isfinite(raw) else _default(0.0, "non-finite number")
    if kind == "decimal":
        if not raw.is_finite():
            return _default(0.0, "non-finite number")
        value = float(raw)
        return Decoded(value=value) if math.isfinite(value) else _default(0.0, "out of range")
    if kind == "integer":
        try:
            return Decoded(value=float(raw))
        except OverflowError:
            return _default(0.0, "out of range")
    if kind == "text":
        number = _parse_decimal(raw)
        if number is None:
            return _default(0.0, "unparseable text")
        value = float(number)
        if not math.isfinite(value):
            return _default(0.0, "out of range")
        return Decoded(value=value)
    return _default(0.0, f"unsupported kind: {kind}")


def decode_datetime(row: Any, column: str, now: Optional[datetime] = None) -> Decoded[datetime]:
    raw, kind, reason = _lookup(row, column)
    fallback = now if now is not None else datetime.now()
    if reason:
        return _default(fallback, reason)

    if kind == "date":
        if isinstance(raw, datetime):
            return Decoded(value=raw)
        return Decoded(value=datetime(raw.year, raw.month, raw.day))
    if kind == "text":
        parsed = _parse_datetime(raw)
        if parsed is None:
            return _default(fallback, "unparseable text")
        return Decoded(value=parsed)
    return _default(fallback, f"unsupported kind: {kind}")


_DECODERS: Dict[str, Callable[[Any, str], Decoded[Any]]] = {
    "int": decode_int,
    "str": decode_str,
    "decimal": decode_decimal,
    "float": decode_float,
}


def decode(row: Any, column: str, kind: str, *, now: Optional[datetime] = None) -> Decoded[Any]:
    if kind == "datetime":
        return decode_datetime(row, column, now=now)
    try:
        decoder = _DECODERS[kind]
    except KeyError:
        raise ValueError(f"Unknown field kind: {kind}") from None
    return decoder(row, column)
