"""Batch job that re-plans active goals whose schedules have drifted."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.clock import Clock, utc_now
from app.core.config import Settings
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.planning.factory import build_planning_service
from app.services.planning.service import PlanningService
from app.services.planning.strategy import PlanningStrategy


logger = logging.getLogger(__name__)


@dataclass
class SweepResult:
    goals_checked: int
    goals_adjusted: int
    failures: int = 0


def run_adjustment_sweep(
    db: Session,
    *,
    goal_ids: Optional[Iterable[UUID]] = None,
    clock: Clock = utc_now,
    settings: Settings | None = None,
    strategy: PlanningStrategy | None = None,
) -> SweepResult:
    service = build_planning_service(db, clock=clock, settings=settings, strategy=strategy)
    with trace("jobs.adjustment_sweep", metadata={"strategy": service.strategy.name}):
        result = asyncio.run(_sweep(service, goal_ids))
    log_metric("jobs.adjustment_sweep.checked", result.goals_checked)
    log_metric("jobs.adjustment_sweep.adjusted", result.goals_adjusted)
    if result.failures:
        log_metric("jobs.adjustment_sweep.failures", result.failures)
    return result


async def _sweep(service: PlanningService, goal_ids: Optional[Iterable[UUID]]) -> SweepResult:
    wanted = set(goal_ids) if goal_ids is not None else None
    goals = [
        goal
        for goal in service.repository.list_goals(active_only=True)
        if goal.schedule is not None and (wanted is None or goal.id in wanted)
    ]
    now = service.clock()
    adjusted: List[UUID] = []
    failures = 0
    for goal in goals:
        if not service.should_adjust_schedule(goal, now):
            logger.debug("Goal %s does not need adjustment", goal.id)
            continue
        try:
            await service.adjust_schedule(goal.id)
        except Exception:
            logger.exception("Adjustment failed for goal %s", goal.id)
            failures += 1
            continue
        adjusted.append(goal.id)
    return SweepResult(goals_checked=len(goals), goals_adjusted=len(adjusted), failures=failures)
