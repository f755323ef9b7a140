import logging
import os

from fastapi import FastAPI

from cold_storage_dashboard.db import get_db_path
from cold_storage_dashboard.feature_flags import get_flags


def health():
    return {"status": "ok"}


app = FastAPI(title="Cold Storage Dashboard")


if app:
    from cold_storage_dashboard.api.routes.dashboard import router as dashboard_router

    assert dashboard_router is not None

    app.include_router(dashboard_router, prefix="/api")

    @app.get("/health")
    def health_route():
        return health()

    @app.on_event("startup")
    def _log_startup():
        logger = logging.getLogger("csd.startup")
        logger.warning(
            "startup env: db=%s record_schema=%s APP_GIT_SHA=%s",
            get_db_path(),
            get_flags().record_schema,
            os.getenv("APP_GIT_SHA", ""),
        )
