"""Split a plan's duration into consecutive, non-overlapping phases."""
from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Optional, Tuple

from app.services.planning.templates import GoalTemplate, PhaseBlueprint

DEFAULT_HORIZON_MONTHS = 3
MIN_TOTAL_DAYS = 7


@dataclass(frozen=True)
class PlannedPhase:
    title: str
    description: str
    start_date: date
    end_date: date
    blueprint: PhaseBlueprint


def add_months(day: date, months: int) -> date:
    """Calendar month arithmetic, clamping to the last day of shorter months."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def plan_duration(today: date, target_date: Optional[date]) -> Tuple[int, date]:
    """Return ``(total_weeks, target)`` for a goal starting ``today``.

    Goals without a target date get a three month horizon. Past or near
    targets are floored to one week of planning.
    """
    target = target_date or add_months(today, DEFAULT_HORIZON_MONTHS)
    total_days = max(MIN_TOTAL_DAYS, (target - today).days)
    total_weeks = max(1, total_days // 7)
    return total_weeks, target


def phase_count_for(total_weeks: int) -> int:
    if total_weeks <= 2:
        return 2
    if total_weeks <= 6:
        return 3
    return 4


def planning_horizon(today: date, target_date: Optional[date]) -> date:
    """Last day any phase of a plan starting ``today`` can reach.

    Phases are whole weeks joined by one-day gaps, so the layout can run a
    few days past ``target``. Commitments must be known up to this day.
    """
    total_weeks, target = plan_duration(today, target_date)
    phase_count = phase_count_for(total_weeks)
    weeks_per_phase = max(1, total_weeks // phase_count)
    layout_end = today + timedelta(weeks=weeks_per_phase * phase_count, days=phase_count - 1)
    return max(target, layout_end)


def plan_phases(template: GoalTemplate, total_weeks: int, start_date: date) -> List[PlannedPhase]:
    """Lay out ``template`` phases back to back starting at ``start_date``."""
    phase_count = min(len(template.phases), phase_count_for(total_weeks))
    if phase_count == 0:
        return []
    weeks_per_phase = max(1, total_weeks // phase_count)

    planned: List[PlannedPhase] = []
    cursor = start_date
    for blueprint in template.phases[:phase_count]:
        end = cursor + timedelta(weeks=weeks_per_phase)
        planned.append(
            PlannedPhase(
                title=blueprint.title,
                description=blueprint.description,
                start_date=cursor,
                end_date=end,
                blueprint=blueprint,
            )
        )
        cursor = end + timedelta(days=1)
    return planned
