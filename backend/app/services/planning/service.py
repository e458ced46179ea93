"""Planning orchestrator: loads goals, runs the active strategy, persists results."""
from __future__ import annotations

import functools
import inspect
import logging
from dataclasses import dataclass
from datetime import date, datetime
from time import perf_counter
from typing import List, Optional, Protocol, Sequence
from uuid import UUID

from app.core.clock import Clock, utc_now
from app.core.config import Settings, get_settings
from app.core.context import goal_context
from app.core.errors import (
    GoalNotFoundError,
    MilestoneNotFoundError,
    NoExistingScheduleError,
    NoUserProfileError,
    TaskNotFoundError,
)
from app.observability.metrics import log_latency, log_metric
from app.observability.tracing import trace
from app.services.notifications.base import ReminderScheduler
from app.services.notifications.hooks import cancel_reminders, schedule_reminders
from app.services.planning import models
from app.services.planning.models import (
    ExistingCommitment,
    Goal,
    Milestone,
    ProgressAnalysis,
    Schedule,
    ScheduledTask,
    UserProfile,
)
from app.services.planning.phase_planner import planning_horizon
from app.services.planning.progress_analyzer import expected_progress
from app.services.planning.strategy import PlanningStrategy

logger = logging.getLogger(__name__)

DEVIATION_THRESHOLD = 0.2


class GoalRepository(Protocol):
    def get_goal(self, goal_id: UUID) -> Optional[Goal]:
        ...

    def list_goals(self, *, active_only: bool = False) -> List[Goal]:
        ...

    def add_goal(self, goal: Goal) -> Goal:
        ...

    def update_goal(self, goal: Goal) -> Goal:
        ...

    def delete_goal(self, goal_id: UUID) -> bool:
        ...

    def load_schedule(self, goal_id: UUID) -> Optional[Schedule]:
        ...

    def save_schedule(self, goal_id: UUID, schedule: Schedule) -> None:
        ...


class CommitmentSource(Protocol):
    def fetch(self, start: date, end: date) -> List[ExistingCommitment]:
        ...


class ProfileProvider(Protocol):
    def current_profile(self) -> Optional[UserProfile]:
        ...


def goal_scoped(func):
    """Run a service operation with its goal id bound to the logging context."""
    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(self, goal_id, *args, **kwargs):
            with goal_context(goal_id):
                return await func(self, goal_id, *args, **kwargs)

        return async_wrapper

    @functools.wraps(func)
    def wrapper(self, goal_id, *args, **kwargs):
        with goal_context(goal_id):
            return func(self, goal_id, *args, **kwargs)

    return wrapper


@dataclass
class TaskToggleResult:
    goal: Goal
    task: ScheduledTask
    changed: bool


class PlanningService:
    """Runs the planning strategy against stored goals.

    Every operation computes the complete new goal value before anything is
    written, so a strategy failure leaves stored state untouched.
    """

    def __init__(
        self,
        *,
        strategy: PlanningStrategy,
        repository: GoalRepository,
        profiles: ProfileProvider,
        commitments: CommitmentSource,
        reminders: ReminderScheduler,
        clock: Clock = utc_now,
        settings: Settings | None = None,
        request_id: str | None = None,
    ) -> None:
        self.strategy = strategy
        self.repository = repository
        self.profiles = profiles
        self.commitments = commitments
        self.reminders = reminders
        self.clock = clock
        self.settings = settings or get_settings()
        self.request_id = request_id

    # ------------------------------------------------------------------
    # Plan lifecycle
    # ------------------------------------------------------------------

    @goal_scoped
    async def generate_plan(self, goal_id: UUID) -> Goal:
        profile = self.profiles.current_profile()
        if profile is None:
            raise NoUserProfileError()
        goal = self._load_goal(goal_id)
        now = self.clock()
        commitments = self.commitments.fetch(now.date(), planning_horizon(now.date(), goal.target_date))

        start = perf_counter()
        with trace(
            "planning.generate",
            metadata={
                "goal_id": str(goal_id),
                "category": goal.category.value,
                "strategy": self.strategy.name,
                "commitments": len(commitments),
            },
            request_id=self.request_id,
        ):
            schedule = await self.strategy.generate_goal_plan(goal, profile, commitments)

        previous = goal.schedule
        if previous is not None and previous.adjustment_history:
            schedule = schedule.model_copy(
                update={"adjustment_history": [*previous.adjustment_history, *schedule.adjustment_history]}
            )
        milestones = _sync_milestones(
            [
                Milestone(title=phase.title, target_date=phase.end_date, is_generated=True, order_index=index)
                for index, phase in enumerate(schedule.phases)
            ],
            schedule,
            now,
        )
        updated = goal.model_copy(
            update={
                "schedule": schedule,
                "milestones": milestones,
                "progress_percentage": round(schedule.overall_progress * 100, 4),
                "last_plan_update_at": now,
                "updated_at": now,
            }
        )
        self.repository.update_goal(updated)

        if previous is not None:
            self._cancel(goal_id, [task.id for task in previous.all_tasks])
        self._schedule(goal_id, models.reminder_tasks(schedule), now)

        log_metric("plan.generate.success", 1, metadata={"strategy": self.strategy.name})
        log_metric("plan.tasks.count", schedule.total_tasks, metadata={"goal_id": str(goal_id)})
        log_latency("plan.generate.latency_ms", start, metadata={"strategy": self.strategy.name})
        logger.info(
            "Generated plan for goal %s: phases=%s tasks=%s",
            goal_id,
            len(schedule.phases),
            schedule.total_tasks,
        )
        return updated

    @goal_scoped
    async def adjust_schedule(self, goal_id: UUID) -> Goal:
        goal = self._load_goal(goal_id)
        current = self._require_schedule(goal)
        now = self.clock()
        completed = [task for task in current.all_tasks if task.is_completed]
        missed = current.overdue_tasks(now)

        with trace(
            "planning.adjust",
            metadata={"goal_id": str(goal_id), "missed": len(missed), "strategy": self.strategy.name},
            request_id=self.request_id,
        ):
            adjusted = await self.strategy.adjust_schedule(current, goal, completed, missed)

        updated = goal.model_copy(
            update={
                "schedule": adjusted,
                "progress_percentage": round(adjusted.overall_progress * 100, 4),
                "last_plan_update_at": now,
                "updated_at": now,
            }
        )
        self.repository.update_goal(updated)

        self._cancel(goal_id, [task.id for task in current.all_tasks])
        self._schedule(goal_id, models.reminder_tasks(adjusted), now)

        log_metric("schedule.adjust.moved", len(missed), metadata={"goal_id": str(goal_id)})
        log_metric(
            "schedule.adjust.entries",
            len(adjusted.adjustment_history) - len(current.adjustment_history),
            metadata={"goal_id": str(goal_id)},
        )
        return updated

    @goal_scoped
    async def analyze_progress(self, goal_id: UUID) -> ProgressAnalysis:
        goal = self._load_goal(goal_id)
        schedule = self._require_schedule(goal)
        with trace(
            "planning.analyze",
            metadata={"goal_id": str(goal_id), "strategy": self.strategy.name},
            request_id=self.request_id,
        ):
            analysis = await self.strategy.analyze_progress(goal, schedule)
        log_metric("progress.score", analysis.overall_score, metadata={"goal_id": str(goal_id)})
        return analysis

    @goal_scoped
    async def get_suggestions(self, goal_id: UUID) -> List[str]:
        """Suggestions for the goal; any failure degrades to an empty list."""
        goal = self._load_goal(goal_id)
        profile = self.profiles.current_profile()
        if goal.schedule is None or profile is None:
            return []
        try:
            with trace(
                "planning.suggestions",
                metadata={"goal_id": str(goal_id), "strategy": self.strategy.name},
                request_id=self.request_id,
            ):
                suggestions = await self.strategy.get_suggestions(goal, goal.schedule, profile)
        except Exception as exc:
            logger.warning("Suggestions unavailable for goal %s: %s", goal_id, exc)
            log_metric("planning.suggestions.failed", 1, metadata={"error": type(exc).__name__})
            return []
        log_metric("planning.suggestions.count", len(suggestions), metadata={"goal_id": str(goal_id)})
        return suggestions

    # ------------------------------------------------------------------
    # Completion tracking
    # ------------------------------------------------------------------

    @goal_scoped
    def mark_task_complete(self, goal_id: UUID, task_id: UUID) -> TaskToggleResult:
        return self._toggle_task(goal_id, task_id, completed=True)

    @goal_scoped
    def mark_task_incomplete(self, goal_id: UUID, task_id: UUID) -> TaskToggleResult:
        return self._toggle_task(goal_id, task_id, completed=False)

    @goal_scoped
    def set_milestone_completion(self, goal_id: UUID, milestone_id: UUID, completed: bool) -> Goal:
        goal = self._load_goal(goal_id)
        index = next((i for i, m in enumerate(goal.milestones) if m.id == milestone_id), None)
        if index is None:
            raise MilestoneNotFoundError(milestone_id)
        now = self.clock()
        milestone = goal.milestones[index]
        toggled = milestone.mark_complete(now) if completed else milestone.mark_incomplete()
        if toggled is milestone:
            return goal

        milestones = [*goal.milestones[:index], toggled, *goal.milestones[index + 1:]]
        updated = goal.model_copy(update={"milestones": milestones, "updated_at": now})
        updated = updated.model_copy(update={"progress_percentage": models.recompute_goal_progress(updated)})
        self.repository.update_goal(updated)
        return updated

    def should_adjust_schedule(self, goal: Goal, now: datetime | None = None) -> bool:
        schedule = goal.schedule
        if schedule is None:
            return False
        now = now or self.clock()
        if schedule.overdue_tasks(now):
            return True
        if goal.last_plan_update_at is None:
            return True
        days_since_update = (now - goal.last_plan_update_at).days
        if days_since_update >= self.settings.minimum_adjustment_days:
            return True
        return abs(expected_progress(schedule, now) - schedule.overall_progress) > DEVIATION_THRESHOLD

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _toggle_task(self, goal_id: UUID, task_id: UUID, *, completed: bool) -> TaskToggleResult:
        goal = self._load_goal(goal_id)
        schedule = self._require_schedule(goal)
        if schedule.find_task(task_id) is None:
            raise TaskNotFoundError(task_id)

        now = self.clock()
        if completed:
            updated_schedule = models.mark_task_complete(schedule, task_id, now)
        else:
            updated_schedule = models.mark_task_incomplete(schedule, task_id)
        task = updated_schedule.find_task(task_id)
        changed = updated_schedule is not schedule
        if not changed:
            return TaskToggleResult(goal=goal, task=task, changed=False)

        updated = goal.model_copy(
            update={
                "schedule": updated_schedule,
                "milestones": _sync_milestones(goal.milestones, updated_schedule, now),
                "progress_percentage": round(updated_schedule.overall_progress * 100, 4),
                "updated_at": now,
            }
        )
        self.repository.update_goal(updated)

        if completed:
            self._cancel(goal_id, [task_id])
        else:
            self._schedule(goal_id, [task], now)
        log_metric("task.complete.changed", 1, metadata={"goal_id": str(goal_id), "completed": completed})
        return TaskToggleResult(goal=updated, task=task, changed=True)

    def _load_goal(self, goal_id: UUID) -> Goal:
        goal = self.repository.get_goal(goal_id)
        if goal is None:
            raise GoalNotFoundError(goal_id)
        return goal

    @staticmethod
    def _require_schedule(goal: Goal) -> Schedule:
        if goal.schedule is None:
            raise NoExistingScheduleError(goal.id)
        return goal.schedule

    def _schedule(self, goal_id: UUID, tasks: Sequence[ScheduledTask], now: datetime) -> None:
        schedule_reminders(
            self.reminders,
            goal_id,
            tasks,
            now=now,
            hour=self.settings.reminder_hour,
            enabled=self.settings.notifications_enabled,
            request_id=self.request_id,
        )

    def _cancel(self, goal_id: UUID, task_ids: Sequence[UUID]) -> None:
        cancel_reminders(
            self.reminders,
            goal_id,
            task_ids,
            enabled=self.settings.notifications_enabled,
            request_id=self.request_id,
        )


def _sync_milestones(milestones: Sequence[Milestone], schedule: Schedule, now: datetime) -> List[Milestone]:
    """Milestone ``i`` follows phase ``i``; manual milestones are never reopened."""
    synced = list(milestones)
    for index, phase in enumerate(schedule.phases):
        if index >= len(synced):
            break
        milestone = synced[index]
        if phase.is_completed:
            synced[index] = milestone.mark_complete(now)
        elif milestone.is_generated:
            synced[index] = milestone.mark_incomplete()
    return synced
