"""Map planning exceptions onto HTTP responses."""
from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from app.core.errors import (
    GoalNotFoundError,
    MilestoneNotFoundError,
    NoExistingScheduleError,
    NoUserProfileError,
    PlanningError,
    RateLimitedError,
    RemoteStrategyError,
    RemoteTimeoutError,
    TaskNotFoundError,
)
from app.observability.metrics import log_metric

logger = logging.getLogger(__name__)


def status_for(exc: PlanningError) -> int:
    if isinstance(exc, (GoalNotFoundError, TaskNotFoundError, MilestoneNotFoundError)):
        return status.HTTP_404_NOT_FOUND
    if isinstance(exc, NoExistingScheduleError):
        return status.HTTP_409_CONFLICT
    if isinstance(exc, NoUserProfileError):
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if isinstance(exc, RateLimitedError):
        return status.HTTP_429_TOO_MANY_REQUESTS
    if isinstance(exc, RemoteTimeoutError):
        return status.HTTP_504_GATEWAY_TIMEOUT
    if isinstance(exc, RemoteStrategyError):
        return status.HTTP_502_BAD_GATEWAY
    return status.HTTP_400_BAD_REQUEST


async def planning_error_handler(request: Request, exc: PlanningError) -> JSONResponse:
    request_id = getattr(request.state, "request_id", None)
    status_code = status_for(exc)
    body = {
        "detail": str(exc),
        "error": type(exc).__name__,
        "request_id": request_id or "",
    }
    if isinstance(exc, RemoteStrategyError):
        body["retry_hint"] = exc.retry_hint
        logger.warning("Remote planner error on %s: %s", request.url.path, exc)
    log_metric("http.planning_error", 1, metadata={"error": type(exc).__name__, "status": status_code})
    return JSONResponse(status_code=status_code, content=body)
