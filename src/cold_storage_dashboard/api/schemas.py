from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class FacetsOut(BaseModel):
    states: List[str] = Field(default_factory=list)
    cities: List[str] = Field(default_factory=list)


class FiltersOut(BaseModel):
    state: Optional[str] = None
    city: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class DashboardOut(BaseModel):
    """Filtered cold storage summary.

    `records` follow the configured record schema; every field is always
    present, defaulted fields carry zero/empty values rather than null.
    """

    record_schema: str
    count: int = 0
    filters: FiltersOut = Field(default_factory=FiltersOut)
    facets: FacetsOut = Field(default_factory=FacetsOut)
    records: List[Dict[str, Any]] = Field(default_factory=list)
