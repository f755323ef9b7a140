from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union


DateLike = Union[date, datetime]


def _clean_text(value: Optional[str]) -> Optional[str]:
    text = (value or "").strip()
    return text or None


def parse_date(raw: Any) -> Optional[date]:
    """Parse a request date. Blank means absent; anything else must be ISO."""

    if raw is None:
        return None
    if isinstance(raw, (date, datetime)):
        return raw
    text = str(raw).strip()
    if not text:
        return None
    try:
        if "T" in text or " " in text:
            return datetime.fromisoformat(text)
        return date.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Invalid date: {text!r} (expected YYYY-MM-DD)") from None


@dataclass(frozen=True)
class FilterCriteria:
    state: Optional[str] = None
    city: Optional[str] = None
    start_date: Optional[DateLike] = None
    end_date: Optional[DateLike] = None

    def __post_init__(self) -> None:
        # Blank text filters mean "no filter".
        object.__setattr__(self, "state", _clean_text(self.state))
        object.__setattr__(self, "city", _clean_text(self.city))

    @classmethod
    def from_params(
        cls,
        state: Optional[str] = None,
        city: Optional[str] = None,
        start_date: Any = None,
        end_date: Any = None,
    ) -> "FilterCriteria":
        return cls(
            state=state,
            city=city,
            start_date=parse_date(start_date),
            end_date=parse_date(end_date),
        )

    def applied(self) -> List[str]:
        """Names of the filters in effect, without their values."""

        return [name for name, value in self.to_dict().items() if value is not None]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state,
            "city": self.city,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }
