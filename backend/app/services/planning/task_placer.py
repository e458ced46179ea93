"""Place blueprint tasks on weekdays inside a phase's date range."""
from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Iterable, List, Set

from app.services.planning.models import ExistingCommitment, ScheduledTask
from app.services.planning.templates import PhaseBlueprint

HOURS_PER_TASK = 1.0
MIN_TASKS_PER_WEEK = 2
MIN_TASKS_PER_PHASE = 4


def tasks_per_week_for(hours_per_week: float) -> int:
    return max(MIN_TASKS_PER_WEEK, math.floor(max(0.0, hours_per_week) / HOURS_PER_TASK))


def cadence_days(tasks_per_week: int) -> int:
    return max(1, 7 // tasks_per_week)


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def place_tasks(
    blueprint: PhaseBlueprint,
    start: date,
    end: date,
    hours_per_week: float,
    commitments: Iterable[ExistingCommitment] = (),
) -> List[ScheduledTask]:
    """Return tasks for one phase, cycling through the blueprint's task pool.

    The task count is a target: placement stops once the cursor passes
    ``end``. Tasks never land on a weekend or on a commitment day.
    """
    pool = blueprint.tasks
    if not pool:
        return []

    per_week = tasks_per_week_for(hours_per_week)
    target = max(MIN_TASKS_PER_PHASE, ((end - start).days // 7 + 1) * per_week)
    step = timedelta(days=cadence_days(per_week))
    busy: Set[date] = {commitment.day for commitment in commitments}

    placed: List[ScheduledTask] = []
    cursor = start
    for index in range(target):
        while cursor <= end and (is_weekend(cursor) or cursor in busy):
            cursor += timedelta(days=1)
        if cursor > end:
            break
        task_blueprint = pool[index % len(pool)]
        placed.append(
            ScheduledTask(
                title=task_blueprint.title,
                description=task_blueprint.description,
                scheduled_date=cursor,
                duration_minutes=task_blueprint.duration_minutes,
                resources=list(task_blueprint.resources) if task_blueprint.resources else None,
            )
        )
        cursor += step
    return placed
