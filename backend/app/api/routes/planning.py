"""Plan generation, schedule tracking and progress API routes."""
from __future__ import annotations

import asyncio
from time import perf_counter
from typing import Any, Dict, List
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_planning_service
from app.api.routes.goals import serialize_goal
from app.api.schemas.goal import GoalResponse, MilestoneToggleRequest
from app.api.schemas.planning import (
    AdjustResponse,
    ProgressResponse,
    ScheduleResponse,
    SuggestionsResponse,
    TaskUpdateRequest,
    TaskUpdateResponse,
)
from app.core.errors import GoalNotFoundError, NoExistingScheduleError
from app.observability.metrics import log_latency, log_metric
from app.observability.tracing import trace
from app.services.planning.models import Adjustment, Goal
from app.services.planning.service import PlanningService

router = APIRouter()

# Planner operations are coroutines over a synchronous session; these routes
# stay plain `def` so FastAPI runs them in its threadpool.


@router.post("/goals/{goal_id}/plan", response_model=ScheduleResponse, tags=["planning"])
def generate_plan(
    goal_id: UUID,
    http_request: Request,
    service: PlanningService = Depends(get_planning_service),
) -> ScheduleResponse:
    """Generate (or regenerate) the schedule for a goal."""
    request_id = getattr(http_request.state, "request_id", None)
    start = perf_counter()
    with trace(
        "http.plan.generate",
        metadata={"route": f"/goals/{goal_id}/plan", "request_id": request_id},
        request_id=request_id,
    ):
        goal = asyncio.run(service.generate_plan(goal_id))
    log_latency("plan.generate.http_latency_ms", start)
    return _schedule_response(goal, service, request_id)


@router.get("/goals/{goal_id}/schedule", response_model=ScheduleResponse, tags=["planning"])
def get_schedule(
    goal_id: UUID,
    http_request: Request,
    service: PlanningService = Depends(get_planning_service),
) -> ScheduleResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("http.schedule.get", metadata={"route": f"/goals/{goal_id}/schedule"}, request_id=request_id):
        goal = service.repository.get_goal(goal_id)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return _schedule_response(goal, service, request_id)


@router.patch("/goals/{goal_id}/tasks/{task_id}", response_model=TaskUpdateResponse, tags=["planning"])
def update_task_completion(
    goal_id: UUID,
    task_id: UUID,
    payload: TaskUpdateRequest,
    http_request: Request,
    service: PlanningService = Depends(get_planning_service),
) -> TaskUpdateResponse:
    """Mark a scheduled task complete or incomplete."""
    request_id = getattr(http_request.state, "request_id", None)
    metadata: Dict[str, Any] = {
        "route": f"/goals/{goal_id}/tasks/{task_id}",
        "goal_id": str(goal_id),
        "task_id": str(task_id),
        "completed": payload.completed,
        "request_id": request_id,
    }
    start = perf_counter()
    with trace("task.complete", metadata=metadata, request_id=request_id):
        if payload.completed:
            result = service.mark_task_complete(goal_id, task_id)
        else:
            result = service.mark_task_incomplete(goal_id, task_id)

    log_metric("task.complete.success", 1, metadata={"goal_id": str(goal_id), "task_id": str(task_id)})
    log_latency("task.complete.latency_ms", start, metadata={"task_id": str(task_id)})
    return TaskUpdateResponse(
        id=result.task.id,
        goal_id=goal_id,
        completed=result.task.is_completed,
        completed_at=result.task.completed_at,
        changed=result.changed,
        goal_progress=result.goal.progress_percentage,
        request_id=request_id or "",
    )


@router.post("/goals/{goal_id}/adjust", response_model=AdjustResponse, tags=["planning"])
def adjust_schedule(
    goal_id: UUID,
    http_request: Request,
    service: PlanningService = Depends(get_planning_service),
) -> AdjustResponse:
    """Reschedule missed tasks and record the adjustment."""
    request_id = getattr(http_request.state, "request_id", None)
    before = service.repository.load_schedule(goal_id)
    with trace("http.schedule.adjust", metadata={"route": f"/goals/{goal_id}/adjust"}, request_id=request_id):
        goal = asyncio.run(service.adjust_schedule(goal_id))
    previous_count = len(before.adjustment_history) if before else 0
    applied: List[Adjustment] = goal.schedule.adjustment_history[previous_count:]
    base = _schedule_response(goal, service, request_id)
    return AdjustResponse(**base.model_dump(), applied=applied)


@router.get("/goals/{goal_id}/progress", response_model=ProgressResponse, tags=["planning"])
def analyze_progress(
    goal_id: UUID,
    http_request: Request,
    service: PlanningService = Depends(get_planning_service),
) -> ProgressResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("http.progress.analyze", metadata={"route": f"/goals/{goal_id}/progress"}, request_id=request_id):
        analysis = asyncio.run(service.analyze_progress(goal_id))
    return ProgressResponse(
        goal_id=goal_id,
        analyzed_at=analysis.analyzed_at,
        overall_score=analysis.overall_score,
        score_description=analysis.score_description,
        on_track=analysis.on_track,
        strengths=analysis.strengths,
        areas_for_improvement=analysis.areas_for_improvement,
        recommendations=analysis.recommendations,
        estimated_new_completion_date=analysis.estimated_new_completion_date,
        request_id=request_id or "",
    )


@router.get("/goals/{goal_id}/suggestions", response_model=SuggestionsResponse, tags=["planning"])
def get_suggestions(
    goal_id: UUID,
    http_request: Request,
    service: PlanningService = Depends(get_planning_service),
) -> SuggestionsResponse:
    request_id = getattr(http_request.state, "request_id", None)
    suggestions = asyncio.run(service.get_suggestions(goal_id))
    return SuggestionsResponse(goal_id=goal_id, suggestions=suggestions, request_id=request_id or "")


@router.post("/goals/{goal_id}/milestones/{milestone_id}", response_model=GoalResponse, tags=["planning"])
def toggle_milestone(
    goal_id: UUID,
    milestone_id: UUID,
    payload: MilestoneToggleRequest,
    http_request: Request,
    service: PlanningService = Depends(get_planning_service),
) -> GoalResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "milestone.toggle",
        metadata={"goal_id": str(goal_id), "milestone_id": str(milestone_id), "completed": payload.completed},
        request_id=request_id,
    ):
        goal = service.set_milestone_completion(goal_id, milestone_id, payload.completed)
    log_metric("milestone.toggle.success", 1, metadata={"goal_id": str(goal_id)})
    return serialize_goal(goal, request_id)


def _schedule_response(goal: Goal, service: PlanningService, request_id: str | None) -> ScheduleResponse:
    schedule = goal.schedule
    if schedule is None:
        raise NoExistingScheduleError(goal.id)
    now = service.clock()
    return ScheduleResponse(
        goal_id=goal.id,
        schedule=schedule,
        total_tasks=schedule.total_tasks,
        completed_tasks=schedule.completed_tasks,
        overall_progress=schedule.overall_progress,
        current_phase=schedule.current_phase,
        next_task=schedule.next_task,
        tasks_for_today=schedule.tasks_for_today(now),
        upcoming_tasks=schedule.upcoming_tasks(now),
        overdue_tasks=schedule.overdue_tasks(now),
        is_on_track=schedule.is_on_track(now),
        days_remaining=schedule.days_remaining(now),
        request_id=request_id or "",
    )
