"""Score a schedule against a linear expected-progress baseline."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import List, Optional

from app.services.planning.models import ProgressAnalysis, Schedule

OVERDUE_PENALTY = 30.0
AHEAD_BONUS = 10.0
ON_TRACK_TOLERANCE = 0.9


def _completion_instant(schedule: Schedule) -> datetime:
    return datetime.combine(schedule.estimated_completion_date, time.min, tzinfo=schedule.generated_at.tzinfo)


def expected_progress(schedule: Schedule, now: datetime) -> float:
    """Fraction of the planned duration that has elapsed, clamped to [0, 1]."""
    total = (_completion_instant(schedule) - schedule.generated_at).total_seconds()
    if total <= 0:
        return 1.0
    elapsed = (now - schedule.generated_at).total_seconds()
    return min(1.0, max(0.0, elapsed / total))


def score(progress: float, overdue: int, total: int, expected: float) -> float:
    value = progress * 100
    if total > 0:
        value -= (overdue / total) * OVERDUE_PENALTY
    if progress > expected:
        value += AHEAD_BONUS
    return max(0.0, min(100.0, value))


def estimate_completion(schedule: Schedule, progress: float, now: datetime) -> Optional[date]:
    """Extrapolate the current pace; only defined while the plan is underway."""
    if not 0 < progress < 1:
        return None
    elapsed_days = max(0, (now - schedule.generated_at).days)
    estimated_total_days = elapsed_days / progress
    return (schedule.generated_at + timedelta(days=int(estimated_total_days))).date()


def analyze(schedule: Schedule, now: datetime) -> ProgressAnalysis:
    progress = schedule.overall_progress
    expected = expected_progress(schedule, now)
    completed = schedule.completed_tasks
    overdue = len(schedule.overdue_tasks(now))

    strengths: List[str] = []
    improvements: List[str] = []
    recommendations: List[str] = []

    if progress >= expected:
        strengths.append("You're on track with your goal")
    if completed > 0:
        strengths.append(f"You've completed {completed} task(s) so far")

    if overdue > 0:
        improvements.append(f"{overdue} task(s) are overdue")
        recommendations.append("Try to catch up on overdue tasks this week")
    if progress < expected:
        improvements.append("Progress is slightly behind schedule")
        recommendations.append("Consider dedicating extra time this week")

    if not strengths:
        strengths.append("Starting your journey toward this goal")
    if not recommendations:
        recommendations.append("Keep up the consistent effort")
        recommendations.append("Review upcoming tasks at the start of each week")

    return ProgressAnalysis(
        analyzed_at=now,
        overall_score=score(progress, overdue, schedule.total_tasks, expected),
        on_track=overdue == 0 and progress >= expected * ON_TRACK_TOLERANCE,
        strengths=strengths,
        areas_for_improvement=improvements,
        recommendations=recommendations,
        estimated_new_completion_date=estimate_completion(schedule, progress, now),
    )
