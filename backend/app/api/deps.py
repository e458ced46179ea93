"""Request-scoped planning dependencies."""
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.clock import Clock, get_clock
from app.core.config import get_settings
from app.db.deps import get_db
from app.services.planning.factory import build_planning_service, get_planning_strategy
from app.services.planning.service import PlanningService
from app.services.planning.strategy import PlanningStrategy


def get_strategy(clock: Clock = Depends(get_clock)) -> PlanningStrategy:
    return get_planning_strategy(get_settings(), clock)


def get_planning_service(
    request: Request,
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    strategy: PlanningStrategy = Depends(get_strategy),
) -> PlanningService:
    return build_planning_service(
        db,
        clock=clock,
        settings=get_settings(),
        strategy=strategy,
        request_id=getattr(request.state, "request_id", None),
    )
