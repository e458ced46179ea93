"""Main FastAPI application for the goal planner backend."""
from fastapi import FastAPI, Request

from app.api.errors import planning_error_handler
from app.api.routes.commitments import router as commitments_router
from app.api.routes.goals import router as goals_router
from app.api.routes.jobs import router as jobs_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.planning import router as planning_router
from app.api.routes.profile import router as profile_router
from app.core.config import settings
from app.core.errors import PlanningError
from app.core.logging import configure_logging
from app.core.middleware import RequestIDMiddleware
from app.observability.client import init_opik
from app.observability.tracing import trace

configure_logging(log_level=settings.log_level)

app = FastAPI(title=settings.app_name, version="0.1.0")
app.add_middleware(RequestIDMiddleware)
app.add_exception_handler(PlanningError, planning_error_handler)
app.include_router(profile_router)
app.include_router(commitments_router)
app.include_router(goals_router)
app.include_router(planning_router)
app.include_router(jobs_router)
app.include_router(notifications_router)


@app.on_event("startup")
async def startup_observability() -> None:
    """Initialize observability backends after the event loop starts."""
    init_opik()


@app.get("/health", tags=["health"], summary="Readiness probe")
async def health_check(request: Request) -> dict[str, str]:
    """Return a simple status payload so automation can probe the API."""
    with trace(
        "http.health_check",
        metadata={"route": "/health", "strategy": settings.planning_strategy},
        request_id=request.state.request_id,
    ):
        return {"status": "ok"}
