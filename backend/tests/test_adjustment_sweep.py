from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone

from apscheduler.events import EVENT_JOB_ERROR, JobExecutionEvent
from apscheduler.schedulers.background import BackgroundScheduler
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings
from app.db.models.commitment import Commitment
from app.db.models.goal import Goal as GoalRow
from app.db.models.goal_schedule import GoalSchedule
from app.db.models.milestone import Milestone
from app.db.models.user_profile import UserProfile as UserProfileRow
from app.services.adjustment_sweep import SweepResult, run_adjustment_sweep
from app.services.goal_repository import SqlGoalRepository
from app.services.planning.factory import build_planning_service
from app.services.planning.models import AdjustmentReason, Goal, GoalCategory, UserProfile
from app.services.planning.rule_based import RuleBasedPlanningStrategy
from app.services.profile_service import SqlProfileProvider
from app.worker import scheduler_main

START = datetime(2025, 1, 6, 8, 0, tzinfo=timezone.utc)
SETTINGS = Settings(minimum_adjustment_days=7, notifications_enabled=False)


def _session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_fk(conn, record):  # pragma: no cover
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    GoalRow.__table__.create(bind=engine)
    Milestone.__table__.create(bind=engine)
    GoalSchedule.__table__.create(bind=engine)
    Commitment.__table__.create(bind=engine)
    UserProfileRow.__table__.create(bind=engine)
    return TestingSession


def _seed_planned_goal(session_factory, title: str, **kwargs) -> Goal:
    session = session_factory()
    try:
        if SqlProfileProvider(session).current_profile() is None:
            SqlProfileProvider(session).save_profile(UserProfile(weekly_available_hours=5))
        goal = SqlGoalRepository(session).add_goal(
            Goal(title=title, category=GoalCategory.PERSONAL, created_at=START, updated_at=START, **kwargs)
        )
        service = build_planning_service(session, clock=lambda: START, settings=SETTINGS)
        return asyncio.run(service.generate_plan(goal.id))
    finally:
        session.close()


def _run(session_factory, now: datetime, **kwargs):
    session = session_factory()
    try:
        return run_adjustment_sweep(
            session,
            clock=lambda: now,
            settings=SETTINGS,
            strategy=RuleBasedPlanningStrategy(clock=lambda: now),
            **kwargs,
        )
    finally:
        session.close()


def _load(session_factory, goal_id) -> Goal:
    session = session_factory()
    try:
        return SqlGoalRepository(session).get_goal(goal_id)
    finally:
        session.close()


def test_sweep_adjusts_goals_with_overdue_tasks() -> None:
    session_factory = _session()
    planned = _seed_planned_goal(session_factory, "Build a journaling habit")
    later = START + timedelta(days=3)

    result = _run(session_factory, later)

    assert result.goals_checked == 1
    assert result.goals_adjusted == 1
    assert result.failures == 0
    stored = _load(session_factory, planned.id)
    assert stored.schedule.overdue_tasks(later) == []
    assert stored.schedule.adjustment_history[-1].reason == AdjustmentReason.MISSED_TASKS
    assert stored.last_plan_update_at == later


def test_sweep_skips_fresh_inactive_and_unplanned_goals() -> None:
    session_factory = _session()
    _seed_planned_goal(session_factory, "Fresh plan")
    paused = _seed_planned_goal(session_factory, "Paused plan", is_active=False)
    session = session_factory()
    try:
        SqlGoalRepository(session).add_goal(Goal(title="No plan yet", created_at=START, updated_at=START))
    finally:
        session.close()

    result = _run(session_factory, START + timedelta(hours=1))

    assert result.goals_checked == 1
    assert result.goals_adjusted == 0
    assert _load(session_factory, paused.id).schedule.adjustment_history == []


def test_sweep_can_target_one_goal() -> None:
    session_factory = _session()
    first = _seed_planned_goal(session_factory, "First")
    second = _seed_planned_goal(session_factory, "Second")

    result = _run(session_factory, START + timedelta(days=3), goal_ids=[second.id])

    assert result.goals_checked == 1
    assert result.goals_adjusted == 1
    assert _load(session_factory, first.id).schedule.adjustment_history == []


def test_sweep_counts_failures_and_continues() -> None:
    session_factory = _session()
    _seed_planned_goal(session_factory, "One")
    _seed_planned_goal(session_factory, "Two")
    later = START + timedelta(days=3)

    class _Flaky(RuleBasedPlanningStrategy):
        calls = 0

        async def adjust_schedule(self, schedule, goal, completed, missed):
            type(self).calls += 1
            if type(self).calls == 1:
                raise RuntimeError("temporary outage")
            return await super().adjust_schedule(schedule, goal, completed, missed)

    session = session_factory()
    try:
        result = run_adjustment_sweep(session, clock=lambda: later, settings=SETTINGS, strategy=_Flaky(clock=lambda: later))
    finally:
        session.close()

    assert result.goals_checked == 2
    assert result.goals_adjusted == 1
    assert result.failures == 1


def test_worker_registers_daily_job(monkeypatch) -> None:
    monkeypatch.setattr(scheduler_main.settings, "adjustment_job_hour", 5)
    monkeypatch.setattr(scheduler_main.settings, "adjustment_job_minute", 30)
    scheduler = BackgroundScheduler(timezone="UTC")

    scheduler_main.register_jobs(scheduler)

    job = scheduler.get_job("adjustment_sweep_job")
    assert job is not None
    assert job.func is scheduler_main.run_adjustment_job
    fields = {field.name: str(field) for field in job.trigger.fields}
    assert fields["hour"] == "5"
    assert fields["minute"] == "30"
    assert job.misfire_grace_time == 3600


def test_worker_scheduler_coalesces_runs() -> None:
    scheduler = scheduler_main.build_scheduler()
    scheduler_main.register_jobs(scheduler)

    job = scheduler.get_job(scheduler_main.ADJUSTMENT_JOB_ID)
    assert job.coalesce is True
    assert job.max_instances == 1


def test_worker_job_closes_session(monkeypatch) -> None:
    closed = []

    class _Session:
        def close(self) -> None:
            closed.append(True)

    monkeypatch.setattr(scheduler_main, "SessionLocal", _Session)
    monkeypatch.setattr(scheduler_main, "run_adjustment_sweep", lambda session: SweepResult(3, 1))

    result = scheduler_main.run_adjustment_job()

    assert (result.goals_checked, result.goals_adjusted, result.failures) == (3, 1, 0)
    assert closed == [True]


def test_worker_logs_failed_jobs(caplog) -> None:
    failure = JobExecutionEvent(
        EVENT_JOB_ERROR,
        scheduler_main.ADJUSTMENT_JOB_ID,
        "default",
        START,
        exception=RuntimeError("db down"),
    )

    scheduler_main._on_job_problem(failure)

    assert "adjustment_sweep_job failed" in caplog.text
