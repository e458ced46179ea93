"""Operational endpoints for the daily adjustment sweep."""
from __future__ import annotations

from time import perf_counter

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.deps import get_strategy
from app.api.schemas.jobs import JobRunRequest, JobRunResponse, JobSchedule, JobsConfigResponse
from app.core.clock import Clock, get_clock
from app.core.config import settings
from app.db.deps import get_db
from app.observability.metrics import log_latency, log_metric
from app.observability.tracing import trace
from app.services.adjustment_sweep import run_adjustment_sweep
from app.services.planning.strategy import PlanningStrategy

router = APIRouter()


@router.get("/jobs", response_model=JobsConfigResponse, tags=["jobs"])
def get_jobs_config(request: Request) -> JobsConfigResponse:
    request_id = getattr(request.state, "request_id", None)
    with trace("jobs.config", metadata={"scheduler_enabled": settings.scheduler_enabled}, request_id=request_id):
        return JobsConfigResponse(
            scheduler_enabled=settings.scheduler_enabled,
            schedule=JobSchedule(
                timezone=settings.scheduler_timezone,
                adjustment_time=f"{settings.adjustment_job_hour:02d}:{settings.adjustment_job_minute:02d}",
            ),
            planning_strategy=settings.planning_strategy,
            minimum_adjustment_days=settings.minimum_adjustment_days,
            request_id=request_id or "",
        )


@router.post("/jobs/run-now", response_model=JobRunResponse, tags=["jobs"])
def run_job_now(
    request: Request,
    payload: JobRunRequest,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    strategy: PlanningStrategy = Depends(get_strategy),
) -> JobRunResponse:
    """Run the adjustment sweep inline, optionally for a single goal (debug builds only)."""
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Run-now only allowed in debug mode")

    request_id = getattr(request.state, "request_id", None)
    targets = [payload.goal_id] if payload.goal_id else None
    start = perf_counter()
    with trace(
        "jobs.run_now",
        metadata={"job": payload.job, "goal_id": str(payload.goal_id) if payload.goal_id else None},
        request_id=request_id,
    ):
        result = run_adjustment_sweep(db, goal_ids=targets, clock=clock, strategy=strategy)

    log_metric("jobs.run_now.adjusted", result.goals_adjusted, metadata={"job": payload.job})
    log_latency("jobs.run_now.latency_ms", start, metadata={"job": payload.job})
    return JobRunResponse(
        job=payload.job,
        goals_checked=result.goals_checked,
        goals_adjusted=result.goals_adjusted,
        failures=result.failures,
        request_id=request_id or "",
    )
