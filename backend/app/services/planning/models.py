"""Goal, schedule and progress value types plus the task-completion transitions."""
from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from app.core.clock import utc_now


class GoalCategory(str, Enum):
    CAREER = "career"
    HEALTH = "health"
    EDUCATION = "education"
    FINANCE = "finance"
    PERSONAL = "personal"
    FITNESS = "fitness"
    CREATIVITY = "creativity"
    RELATIONSHIPS = "relationships"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class AdjustmentReason(str, Enum):
    MISSED_TASKS = "missed_tasks"
    AHEAD_OF_SCHEDULE = "ahead_of_schedule"
    USER_REQUESTED = "user_requested"
    TIME_CONFLICT = "time_conflict"
    GOAL_CHANGED = "goal_changed"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()


class UserProfile(BaseModel):
    """Planning inputs read from the user's profile."""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    occupation: Optional[str] = None
    weekly_available_hours: float = Field(default=10.0, ge=0)
    interests: List[str] = Field(default_factory=list)


class ExistingCommitment(BaseModel):
    """A calendar event; only the day of ``start`` matters for conflict checks."""

    model_config = ConfigDict(frozen=True)

    start: datetime
    title: Optional[str] = None

    @property
    def day(self) -> date:
        return self.start.date()


class ScheduledTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    description: Optional[str] = None
    scheduled_date: date
    duration_minutes: int = Field(default=60, ge=0)
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    resources: Optional[List[str]] = None

    def is_overdue(self, now: datetime) -> bool:
        return not self.is_completed and self.scheduled_date < now.date()

    def is_due_today(self, now: datetime) -> bool:
        return self.scheduled_date == now.date()

    @property
    def duration_formatted(self) -> str:
        hours, minutes = divmod(self.duration_minutes, 60)
        if hours and minutes:
            return f"{hours}h {minutes}m"
        if hours:
            return f"{hours}h"
        return f"{minutes}m"


class Phase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    description: str = ""
    start_date: date
    end_date: date
    tasks: List[ScheduledTask] = Field(default_factory=list)
    is_completed: bool = False

    @property
    def completed_tasks(self) -> List[ScheduledTask]:
        return [task for task in self.tasks if task.is_completed]

    @property
    def pending_tasks(self) -> List[ScheduledTask]:
        return [task for task in self.tasks if not task.is_completed]

    @property
    def progress(self) -> float:
        if not self.tasks:
            return 0.0
        return len(self.completed_tasks) / len(self.tasks)

    @property
    def duration_in_days(self) -> int:
        return (self.end_date - self.start_date).days

    def is_active(self, now: datetime) -> bool:
        return self.start_date <= now.date() <= self.end_date and not self.is_completed


class Adjustment(BaseModel):
    """Audit entry describing one re-plan event. Never edited once appended."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    timestamp: datetime = Field(default_factory=utc_now)
    reason: AdjustmentReason
    description: str
    changes: str


class Schedule(BaseModel):
    """Generated plan for a goal: ordered phases plus the adjustment log."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    generated_at: datetime = Field(default_factory=utc_now)
    phases: List[Phase] = Field(default_factory=list)
    weekly_commitment_hours: float
    estimated_completion_date: date
    adjustment_history: List[Adjustment] = Field(default_factory=list)

    @property
    def all_tasks(self) -> List[ScheduledTask]:
        return [task for phase in self.phases for task in phase.tasks]

    @property
    def total_tasks(self) -> int:
        return sum(len(phase.tasks) for phase in self.phases)

    @property
    def completed_tasks(self) -> int:
        return sum(len(phase.completed_tasks) for phase in self.phases)

    @property
    def overall_progress(self) -> float:
        total = self.total_tasks
        if total == 0:
            return 0.0
        return self.completed_tasks / total

    @property
    def current_phase(self) -> Optional[Phase]:
        return next((phase for phase in self.phases if not phase.is_completed), None)

    @property
    def next_task(self) -> Optional[ScheduledTask]:
        phase = self.current_phase
        if phase is None:
            return None
        return next((task for task in phase.tasks if not task.is_completed), None)

    def find_task(self, task_id: UUID) -> Optional[ScheduledTask]:
        return next((task for task in self.all_tasks if task.id == task_id), None)

    def overdue_tasks(self, now: datetime) -> List[ScheduledTask]:
        tasks = [task for task in self.all_tasks if task.is_overdue(now)]
        return sorted(tasks, key=lambda task: task.scheduled_date)

    def upcoming_tasks(self, now: datetime) -> List[ScheduledTask]:
        today = now.date()
        tasks = [task for task in self.all_tasks if not task.is_completed and task.scheduled_date >= today]
        return sorted(tasks, key=lambda task: task.scheduled_date)

    def tasks_for_today(self, now: datetime) -> List[ScheduledTask]:
        return [task for task in self.all_tasks if task.is_due_today(now)]

    def is_on_track(self, now: datetime) -> bool:
        return not self.overdue_tasks(now)

    def days_remaining(self, now: datetime) -> int:
        return (self.estimated_completion_date - now.date()).days


class ProgressAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    analyzed_at: datetime
    overall_score: float = Field(..., ge=0, le=100)
    on_track: bool
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    estimated_new_completion_date: Optional[date] = None

    @property
    def score_description(self) -> str:
        score = self.overall_score
        if score >= 90:
            return "Excellent"
        if score >= 75:
            return "Good"
        if score >= 50:
            return "Fair"
        if score >= 25:
            return "Needs Improvement"
        return "Critical"


class Milestone(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    target_date: date
    is_completed: bool = False
    completed_at: Optional[datetime] = None
    is_generated: bool = False
    order_index: int = 0

    def is_overdue(self, now: datetime) -> bool:
        return not self.is_completed and self.target_date < now.date()

    def mark_complete(self, now: datetime) -> "Milestone":
        if self.is_completed:
            return self
        return self.model_copy(update={"is_completed": True, "completed_at": now})

    def mark_incomplete(self) -> "Milestone":
        if not self.is_completed:
            return self
        return self.model_copy(update={"is_completed": False, "completed_at": None})


class Goal(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    title: str
    description: Optional[str] = None
    target_date: Optional[date] = None
    category: GoalCategory = GoalCategory.PERSONAL
    is_active: bool = True
    progress_percentage: float = Field(default=0.0, ge=0, le=100)
    schedule: Optional[Schedule] = None
    milestones: List[Milestone] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    last_plan_update_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.progress_percentage >= 100

    @property
    def next_milestone(self) -> Optional[Milestone]:
        return next((m for m in self.milestones if not m.is_completed), None)


# ---------------------------------------------------------------------------
# Transitions (copy-on-write; every function returns a new value)
# ---------------------------------------------------------------------------


def mark_task_complete(schedule: Schedule, task_id: UUID, now: datetime) -> Schedule:
    """Return ``schedule`` with the task completed and its phase flag restored."""
    return _set_task_completion(schedule, task_id, completed=True, now=now)


def mark_task_incomplete(schedule: Schedule, task_id: UUID) -> Schedule:
    """Return ``schedule`` with the task reopened and its phase flag restored."""
    return _set_task_completion(schedule, task_id, completed=False, now=None)


def add_adjustment(schedule: Schedule, adjustment: Adjustment) -> Schedule:
    return schedule.model_copy(update={"adjustment_history": [*schedule.adjustment_history, adjustment]})


def reschedule_tasks(schedule: Schedule, new_dates: Dict[UUID, date]) -> Schedule:
    """Return ``schedule`` with the given tasks moved; nothing else changes."""
    if not new_dates:
        return schedule
    phases: List[Phase] = []
    for phase in schedule.phases:
        tasks = [
            task.model_copy(update={"scheduled_date": new_dates[task.id]}) if task.id in new_dates else task
            for task in phase.tasks
        ]
        phases.append(phase.model_copy(update={"tasks": tasks}))
    return schedule.model_copy(update={"phases": phases})


def reminder_tasks(schedule: Schedule) -> List[ScheduledTask]:
    """Tasks that still need a reminder: every task not yet completed."""
    return [task for task in schedule.all_tasks if not task.is_completed]


def recompute_goal_progress(goal: Goal) -> float:
    """Progress percentage from schedule tasks, or from milestones without a plan."""
    schedule = goal.schedule
    if schedule is not None and schedule.total_tasks > 0:
        return round(schedule.overall_progress * 100, 4)
    if not goal.milestones:
        return 0.0
    completed = sum(1 for milestone in goal.milestones if milestone.is_completed)
    return round(completed / len(goal.milestones) * 100, 4)


def _set_task_completion(
    schedule: Schedule,
    task_id: UUID,
    *,
    completed: bool,
    now: Optional[datetime],
) -> Schedule:
    for index, phase in enumerate(schedule.phases):
        position = next((i for i, task in enumerate(phase.tasks) if task.id == task_id), None)
        if position is None:
            continue
        task = phase.tasks[position]
        if task.is_completed == completed:
            return schedule
        updated_task = task.model_copy(
            update={"is_completed": completed, "completed_at": now if completed else None}
        )
        tasks = [*phase.tasks[:position], updated_task, *phase.tasks[position + 1:]]
        updated_phase = phase.model_copy(
            update={"tasks": tasks, "is_completed": all(t.is_completed for t in tasks)}
        )
        phases = [*schedule.phases[:index], updated_phase, *schedule.phases[index + 1:]]
        return schedule.model_copy(update={"phases": phases})
    return schedule
