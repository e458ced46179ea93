from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from app.services.planning import models
from app.services.planning.models import Phase, Schedule, ScheduledTask
from app.services.planning.progress_analyzer import analyze, estimate_completion, expected_progress, score

GENERATED = datetime(2025, 1, 1, tzinfo=timezone.utc)
MIDPOINT = datetime(2025, 1, 11, tzinfo=timezone.utc)


def _ten_task_schedule() -> Schedule:
    """3 done, 2 overdue and 5 upcoming as of MIDPOINT."""
    days = [2, 3, 4, 5, 6, 12, 13, 14, 15, 16]
    tasks = [ScheduledTask(title=f"Task {day}", scheduled_date=date(2025, 1, day)) for day in days]
    schedule = Schedule(
        generated_at=GENERATED,
        phases=[Phase(title="All", start_date=date(2025, 1, 1), end_date=date(2025, 1, 21), tasks=tasks)],
        weekly_commitment_hours=5,
        estimated_completion_date=date(2025, 1, 21),
    )
    for task in tasks[:3]:
        schedule = models.mark_task_complete(schedule, task.id, GENERATED + timedelta(days=3))
    return schedule


def test_behind_with_overdue_tasks() -> None:
    schedule = _ten_task_schedule()
    assert expected_progress(schedule, MIDPOINT) == 0.5

    analysis = analyze(schedule, MIDPOINT)

    assert analysis.overall_score == pytest.approx(24.0)
    assert analysis.on_track is False
    assert analysis.analyzed_at == MIDPOINT
    assert "2 task(s) are overdue" in analysis.areas_for_improvement
    assert "Progress is slightly behind schedule" in analysis.areas_for_improvement
    assert "Try to catch up on overdue tasks this week" in analysis.recommendations
    assert analysis.strengths == ["You've completed 3 task(s) so far"]
    assert analysis.estimated_new_completion_date == date(2025, 2, 3)
    assert analysis.score_description == "Critical"


def test_score_formula() -> None:
    assert score(0.3, 2, 10, 0.5) == pytest.approx(24.0)
    assert score(0.6, 0, 10, 0.5) == pytest.approx(70.0)
    assert score(1.0, 0, 10, 0.0) == 100.0
    assert score(0.0, 5, 5, 0.5) == 0.0
    assert score(0.0, 0, 0, 0.0) == 0.0


def test_expected_progress_is_clamped() -> None:
    schedule = _ten_task_schedule()
    assert expected_progress(schedule, GENERATED - timedelta(days=3)) == 0.0
    assert expected_progress(schedule, datetime(2025, 3, 1, tzinfo=timezone.utc)) == 1.0

    collapsed = schedule.model_copy(update={"estimated_completion_date": date(2024, 12, 31)})
    assert expected_progress(collapsed, MIDPOINT) == 1.0


def test_fresh_schedule_uses_default_texts() -> None:
    schedule = Schedule(
        generated_at=GENERATED,
        phases=[
            Phase(
                title="All",
                start_date=date(2025, 1, 1),
                end_date=date(2025, 1, 21),
                tasks=[ScheduledTask(title="Later", scheduled_date=date(2025, 1, 15))],
            )
        ],
        weekly_commitment_hours=5,
        estimated_completion_date=date(2025, 1, 21),
    )

    at_start = analyze(schedule, GENERATED)
    assert at_start.strengths == ["You're on track with your goal"]
    assert at_start.recommendations == [
        "Keep up the consistent effort",
        "Review upcoming tasks at the start of each week",
    ]
    assert at_start.on_track is True
    assert at_start.estimated_new_completion_date is None

    later = analyze(schedule, MIDPOINT)
    assert later.strengths == ["Starting your journey toward this goal"]
    assert later.on_track is False


def test_estimate_only_while_underway() -> None:
    schedule = _ten_task_schedule()
    assert estimate_completion(schedule, 0.0, MIDPOINT) is None
    assert estimate_completion(schedule, 1.0, MIDPOINT) is None
    assert estimate_completion(schedule, 0.5, MIDPOINT) == date(2025, 1, 21)
