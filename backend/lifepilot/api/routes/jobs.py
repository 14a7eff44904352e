"""Operational endpoints for scheduler jobs."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from lifepilot.api.schemas.jobs import JobRunRequest, JobRunResponse
from lifepilot.core.config import settings
from lifepilot.db.deps import get_db
from lifepilot.observability.metrics import log_metric
from lifepilot.observability.tracing import trace
from lifepilot.services.job_runner import expire_stale_tickets

router = APIRouter()


@router.get("/jobs", tags=["jobs"])
def get_jobs_config(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    with trace("jobs.config", metadata={"request_id": request_id}, request_id=request_id):
        data = {
            "scheduler_enabled": settings.scheduler_enabled,
            "jobs": {
                "ticket_sweep": {
                    "interval_minutes": settings.ticket_sweep_interval_minutes,
                    "ticket_ttl_seconds": settings.generation_ticket_ttl_seconds,
                },
            },
            "timezone": settings.scheduler_timezone,
        }
    return {**data, "request_id": request_id or ""}


@router.post("/jobs/run-now", response_model=JobRunResponse, tags=["jobs"])
def run_job_now(
    request: Request,
    payload: JobRunRequest,
    db: Session = Depends(get_db),
) -> JobRunResponse:
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Run-now only allowed in debug mode")

    request_id = getattr(request.state, "request_id", None)
    start = perf_counter()
    with trace("jobs.run_now", metadata={"job": payload.job}, request_id=request_id):
        result = expire_stale_tickets(db, ttl_seconds=payload.ttl_seconds)

    log_metric("jobs.run_now.success", 1, metadata={"job": payload.job})
    log_metric("jobs.run_now.latency_ms", (perf_counter() - start) * 1000, metadata={"job": payload.job})

    return JobRunResponse(
        job=payload.job,
        tickets_checked=result.tickets_checked,
        tickets_expired=result.tickets_expired,
        request_id=request_id or "",
    )
