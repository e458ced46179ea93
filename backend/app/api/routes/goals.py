"""Goal management API routes."""
from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.goal import GoalCreateRequest, GoalDeleteResponse, GoalResponse
from app.core.clock import Clock, get_clock
from app.core.errors import GoalNotFoundError
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.goal_repository import SqlGoalRepository
from app.services.planning.models import Goal, Milestone

router = APIRouter()


@router.post("/goals", response_model=GoalResponse, status_code=status.HTTP_201_CREATED, tags=["goals"])
def create_goal(
    payload: GoalCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> GoalResponse:
    """Create a goal with optional manual milestones."""
    request_id = getattr(http_request.state, "request_id", None)
    now = clock()
    goal = Goal(
        title=payload.title.strip(),
        description=payload.description,
        target_date=payload.target_date,
        category=payload.category,
        milestones=[
            Milestone(title=item.title, target_date=item.target_date, order_index=index)
            for index, item in enumerate(payload.milestones)
        ],
        created_at=now,
        updated_at=now,
    )
    with trace(
        "goal.create",
        metadata={"route": "/goals", "category": goal.category.value, "request_id": request_id},
        request_id=request_id,
    ):
        SqlGoalRepository(db).add_goal(goal)

    log_metric("goal.create.success", 1, metadata={"category": goal.category.value})
    return serialize_goal(goal, request_id)


@router.get("/goals", response_model=List[GoalResponse], tags=["goals"])
def list_goals(
    http_request: Request,
    active_only: bool = Query(False, description="Only return active goals"),
    db: Session = Depends(get_db),
) -> List[GoalResponse]:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("goal.list", metadata={"route": "/goals", "active_only": active_only}, request_id=request_id):
        goals = SqlGoalRepository(db).list_goals(active_only=active_only)
    log_metric("goal.list.count", len(goals))
    return [serialize_goal(goal, request_id) for goal in goals]


@router.get("/goals/{goal_id}", response_model=GoalResponse, tags=["goals"])
def get_goal(goal_id: UUID, http_request: Request, db: Session = Depends(get_db)) -> GoalResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("goal.get", metadata={"route": f"/goals/{goal_id}"}, request_id=request_id):
        goal = SqlGoalRepository(db).get_goal(goal_id)
    if goal is None:
        raise GoalNotFoundError(goal_id)
    return serialize_goal(goal, request_id)


@router.delete("/goals/{goal_id}", response_model=GoalDeleteResponse, tags=["goals"])
def delete_goal(goal_id: UUID, http_request: Request, db: Session = Depends(get_db)) -> GoalDeleteResponse:
    """Delete a goal together with its milestones and schedule."""
    request_id = getattr(http_request.state, "request_id", None)
    with trace("goal.delete", metadata={"route": f"/goals/{goal_id}"}, request_id=request_id):
        deleted = SqlGoalRepository(db).delete_goal(goal_id)
    if not deleted:
        raise GoalNotFoundError(goal_id)
    log_metric("goal.delete.success", 1)
    return GoalDeleteResponse(id=goal_id, deleted=True, request_id=request_id or "")


def serialize_goal(goal: Goal, request_id: str | None) -> GoalResponse:
    return GoalResponse(
        id=goal.id,
        title=goal.title,
        description=goal.description,
        target_date=goal.target_date,
        category=goal.category,
        is_active=goal.is_active,
        is_completed=goal.is_completed,
        progress_percentage=goal.progress_percentage,
        has_schedule=goal.schedule is not None,
        milestones=goal.milestones,
        created_at=goal.created_at,
        updated_at=goal.updated_at,
        last_plan_update_at=goal.last_plan_update_at,
        request_id=request_id or "",
    )
