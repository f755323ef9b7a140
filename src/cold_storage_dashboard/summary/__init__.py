"""Cold storage survey summary: query building, safe decoding, facets.

Core rule: a report always renders. Cells that cannot be decoded take the
zero/empty default of their field type; only storage errors fail a request.
"""

from .aggregate import DashboardResult, FacetSet, aggregate, derive_facets, load_dashboard
from .decode import Decoded
from .filters import FilterCriteria
from .query import BuiltQuery, build_summary_query
from .schema import RECORD_SCHEMAS, get_schema

__all__ = [
    "BuiltQuery",
    "DashboardResult",
    "Decoded",
    "FacetSet",
    "FilterCriteria",
    "RECORD_SCHEMAS",
    "aggregate",
    "build_summary_query",
    "derive_facets",
    "get_schema",
    "load_dashboard",
]
