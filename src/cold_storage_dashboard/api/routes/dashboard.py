try:
    from fastapi import APIRouter
    from fastapi import HTTPException
    from fastapi.responses import Response

    FASTAPI_AVAILABLE = True
except Exception:  # pragma: no cover - optional dependency
    APIRouter = None
    HTTPException = None
    Response = None
    FASTAPI_AVAILABLE = False

import io
from typing import Optional

from cold_storage_dashboard.api.schemas import DashboardOut, FacetsOut, FiltersOut
from cold_storage_dashboard.db import open_conn
from cold_storage_dashboard.feature_flags import resolve_schema
from cold_storage_dashboard.security import write_csv
from cold_storage_dashboard.summary import DashboardResult, FilterCriteria, get_schema, load_dashboard


router = APIRouter(tags=["dashboard"]) if FASTAPI_AVAILABLE else None


def _criteria(
    state: Optional[str],
    city: Optional[str],
    start_date: Optional[str],
    end_date: Optional[str],
) -> FilterCriteria:
    try:
        return FilterCriteria.from_params(
            state=state, city=city, start_date=start_date, end_date=end_date
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _schema_name(schema: Optional[str]) -> str:
    try:
        return resolve_schema(schema)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def _load(criteria: FilterCriteria, schema: Optional[str]) -> DashboardResult:
    schema_name = _schema_name(schema)
    with open_conn() as conn:
        return load_dashboard(conn, criteria, schema_name)


def to_dashboard_out(result: DashboardResult) -> DashboardOut:
    return DashboardOut(
        record_schema=result.schema,
        count=len(result.records),
        filters=FiltersOut(**result.criteria.to_dict()),
        facets=FacetsOut(**result.facets.to_dict()),
        records=[r.to_dict() for r in result.records],
    )


if router:

    @router.get("/dashboard", response_model=DashboardOut)
    def dashboard(
        state: Optional[str] = None,
        city: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> DashboardOut:
        criteria = _criteria(state, city, start_date, end_date)
        return to_dashboard_out(_load(criteria, schema))

    @router.get("/dashboard/facets", response_model=FacetsOut)
    def dashboard_facets(
        state: Optional[str] = None,
        city: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        schema: Optional[str] = None,
    ) -> FacetsOut:
        criteria = _criteria(state, city, start_date, end_date)
        return FacetsOut(**_load(criteria, schema).facets.to_dict())

    @router.get("/dashboard.csv")
    def dashboard_csv(
        state: Optional[str] = None,
        city: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        schema: Optional[str] = None,
    ):
        criteria = _criteria(state, city, start_date, end_date)
        result = _load(criteria, schema)
        fieldnames = [spec.name for spec in get_schema(result.schema).fields]
        buf = io.StringIO()
        write_csv(buf, fieldnames, (r.to_dict() for r in result.records))
        return Response(
            content=buf.getvalue(),
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="cold_storage.csv"'},
        )
