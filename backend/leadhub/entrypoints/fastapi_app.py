# leadhub/entrypoints/fastapi_app.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..config import settings
from ..db import init_models
from ..domain.errors import LeadHubError
from ..service_layer.bootstrap import Services, build_services
from .api.routers import connectors, health, leads

_STATUS_BY_KIND = {
    "configuration": 400,
    "transport": 400,
    "not_found": 404,
    "already_running": 409,
}


def create_app(
    services: Services | None = None,
    *,
    start_scheduler: bool | None = None,
    create_tables: bool | None = None,
) -> FastAPI:
    """
    `services` defaults to the SQLAlchemy-backed wiring; tests pass their own
    (in-memory store, fake transports) and usually leave the scheduler off.
    """
    app = FastAPI(title="LeadHub - Lead Ingestion Pipeline")
    app.state.services = services or build_services()

    run_scheduler = settings.SCHEDULER_ENABLED if start_scheduler is None else start_scheduler
    make_tables = services is None if create_tables is None else create_tables

    @app.on_event("startup")
    async def _startup() -> None:
        # Single place where DB tables are created in dev.
        if make_tables:
            await init_models()
        if run_scheduler:
            app.state.services.scheduler.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        app.state.services.scheduler.shutdown()

    @app.exception_handler(LeadHubError)
    async def _lead_hub_error(_: Request, exc: LeadHubError) -> JSONResponse:
        return JSONResponse(
            status_code=_STATUS_BY_KIND.get(exc.kind, 400),
            content={"ok": False, "error": exc.message, "kind": exc.kind},
        )

    # Routers
    app.include_router(health.router)
    app.include_router(connectors.router)
    app.include_router(leads.router)

    return app
