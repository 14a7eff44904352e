"""Main FastAPI application for the LifePilot backend."""
from fastapi import FastAPI, Request

from lifepilot.api.routes.analysis import router as analysis_router
from lifepilot.api.routes.jobs import router as jobs_router
from lifepilot.api.routes.profiles import router as profiles_router
from lifepilot.api.routes.schedule import router as schedule_router
from lifepilot.core.config import settings
from lifepilot.core.logging import configure_logging
from lifepilot.core.middleware import RequestContextMiddleware
from lifepilot.db.session import init_db
from lifepilot.observability.client import init_opik
from lifepilot.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestContextMiddleware)
app.include_router(profiles_router)
app.include_router(analysis_router)
app.include_router(schedule_router)
app.include_router(jobs_router)


@app.on_event("startup")
async def startup() -> None:
    """Initialize observability (and tables, when enabled) after the event loop starts."""
    init_opik()
    if settings.auto_create_tables:
        init_db()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    with trace("http.health_check", metadata={"route": "/health"}, request_id=request.state.request_id):
        return {"status": "ok"}
