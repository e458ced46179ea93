from __future__ import annotations

from datetime import date, datetime, timezone

from app.services.planning.models import ExistingCommitment
from app.services.planning.task_placer import cadence_days, is_weekend, place_tasks, tasks_per_week_for
from app.services.planning.templates import PhaseBlueprint, _phase, _task

MONDAY = date(2025, 1, 6)
END = date(2025, 1, 27)


def _blueprint() -> PhaseBlueprint:
    return _phase(
        "Foundations",
        "Basics",
        _task("Read chapter", 30, resources=["Textbook"]),
        _task("Practice drills", 45),
        _task("Review notes", 20),
    )


def test_tasks_per_week_and_cadence() -> None:
    assert tasks_per_week_for(10) == 10
    assert tasks_per_week_for(3.5) == 3
    assert tasks_per_week_for(1) == 2
    assert tasks_per_week_for(0) == 2
    assert tasks_per_week_for(-4) == 2

    assert cadence_days(10) == 1
    assert cadence_days(7) == 1
    assert cadence_days(3) == 2
    assert cadence_days(2) == 3


def test_ten_hours_places_one_task_per_weekday() -> None:
    tasks = place_tasks(_blueprint(), MONDAY, END, 10)

    days = [task.scheduled_date for task in tasks]
    assert len(tasks) == 16
    assert days[:5] == [date(2025, 1, d) for d in (6, 7, 8, 9, 10)]
    assert days[5] == date(2025, 1, 13)
    assert days[-1] == END
    assert len(set(days)) == len(days)
    assert not any(is_weekend(day) for day in days)


def test_pool_is_used_cyclically() -> None:
    pool = _blueprint().tasks
    tasks = place_tasks(_blueprint(), MONDAY, END, 10)

    for index, task in enumerate(tasks):
        blueprint = pool[index % len(pool)]
        assert task.title == blueprint.title
        assert task.duration_minutes == blueprint.duration_minutes
    assert tasks[0].resources == ["Textbook"]
    assert tasks[1].resources is None


def test_commitment_days_are_skipped() -> None:
    busy = ExistingCommitment(start=datetime(2025, 1, 8, 18, 0, tzinfo=timezone.utc), title="Dinner")
    tasks = place_tasks(_blueprint(), MONDAY, END, 10, [busy])

    days = [task.scheduled_date for task in tasks]
    assert date(2025, 1, 8) not in days
    assert len(tasks) == 15


def test_low_hours_spread_tasks_and_shift_off_weekends() -> None:
    tasks = place_tasks(_blueprint(), MONDAY, END, 2)

    assert [task.scheduled_date.day for task in tasks] == [6, 9, 13, 16, 20, 23, 27]


def test_placement_stops_at_phase_end() -> None:
    tasks = place_tasks(_blueprint(), MONDAY, date(2025, 1, 8), 10)
    assert [task.scheduled_date.day for task in tasks] == [6, 7, 8]


def test_weekend_start_moves_to_monday() -> None:
    tasks = place_tasks(_blueprint(), date(2025, 1, 4), END, 10)
    assert tasks[0].scheduled_date == MONDAY


def test_empty_pool_or_fully_blocked_range() -> None:
    assert place_tasks(_phase("Empty", ""), MONDAY, END, 10) == []
    # Saturday to Sunday has no weekday to use
    assert place_tasks(_blueprint(), date(2025, 1, 4), date(2025, 1, 5), 10) == []
