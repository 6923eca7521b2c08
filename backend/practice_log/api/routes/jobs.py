"""Operational endpoints for scheduler jobs."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from practice_log.api.schemas.jobs import JobRunRequest, JobRunResponse
from practice_log.core.config import settings
from practice_log.db.deps import get_db
from practice_log.observability.metrics import log_metric
from practice_log.observability.tracing import trace
from practice_log.services.notifications.dispatcher import dispatch_reminders

router = APIRouter()


@router.get("/jobs", tags=["jobs"])
def get_jobs_config(request: Request) -> dict:
    request_id = getattr(request.state, "request_id", None)
    with trace("jobs.config", metadata={"request_id": request_id}, request_id=request_id):
        data = {
            "scheduler_enabled": settings.scheduler_enabled,
            "schedule": {
                "timezone": settings.scheduler_timezone,
                "reminder_day": settings.reminder_job_day,
                "reminder_time": f"{settings.reminder_job_hour:02d}:{settings.reminder_job_minute:02d}",
            },
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
        result = dispatch_reminders(db, request_id=request_id)

    latency_ms = (perf_counter() - start) * 1000
    log_metric("jobs.run_now.success", 1, metadata={"job": payload.job})
    log_metric("jobs.run_now.latency_ms", latency_ms, metadata={"job": payload.job})

    return JobRunResponse(
        job=payload.job,
        sent=result.sent,
        failed=result.failed,
        request_id=request_id or "",
    )
