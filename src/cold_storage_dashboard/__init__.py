"""Package initializer for `cold_storage_dashboard`."""

from .summary import DashboardResult, FacetSet, FilterCriteria, load_dashboard

__all__ = ["DashboardResult", "FacetSet", "FilterCriteria", "load_dashboard"]
