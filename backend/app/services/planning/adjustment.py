"""Greedy re-plan of missed tasks onto consecutive upcoming days."""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Dict, List, Sequence, Tuple
from uuid import UUID

from app.services.planning.models import (
    Adjustment,
    AdjustmentReason,
    Schedule,
    ScheduledTask,
    add_adjustment,
    reschedule_tasks,
)
from app.services.planning.progress_analyzer import expected_progress

AHEAD_MARGIN = 0.2


def adjust(
    schedule: Schedule,
    completed: Sequence[ScheduledTask],
    missed: Sequence[ScheduledTask],
    now: datetime,
) -> Tuple[Schedule, List[Adjustment]]:
    """Return the adjusted schedule and the adjustment entries appended to it.

    Missed tasks move to tomorrow, the day after, and so on in input order.
    Tasks that are not part of ``schedule`` are ignored. Only scheduled
    dates change.
    """
    task_ids = {task.id for task in schedule.all_tasks}
    new_dates: Dict[UUID, date] = {}
    next_day = now.date()
    for task in missed:
        if task.id not in task_ids or task.id in new_dates:
            continue
        next_day += timedelta(days=1)
        new_dates[task.id] = next_day

    applied: List[Adjustment] = []
    if missed:
        applied.append(
            Adjustment(
                timestamp=now,
                reason=AdjustmentReason.MISSED_TASKS,
                description=f"Rescheduled {len(new_dates)} missed task(s)",
                changes="Tasks moved to upcoming days",
            )
        )

    if schedule.overall_progress > expected_progress(schedule, now) + AHEAD_MARGIN:
        applied.append(
            Adjustment(
                timestamp=now,
                reason=AdjustmentReason.AHEAD_OF_SCHEDULE,
                description="Great progress! You're ahead of schedule",
                changes="Keep up the good work",
            )
        )

    adjusted = reschedule_tasks(schedule, new_dates)
    for entry in applied:
        adjusted = add_adjustment(adjusted, entry)
    return adjusted, applied
