"""Planning strategy contract shared by the rule-based and remote planners."""
from __future__ import annotations

from typing import List, Protocol, Sequence, runtime_checkable

from app.services.planning.models import (
    ExistingCommitment,
    Goal,
    ProgressAnalysis,
    Schedule,
    ScheduledTask,
    UserProfile,
)


@runtime_checkable
class PlanningStrategy(Protocol):
    name: str

    async def generate_goal_plan(
        self,
        goal: Goal,
        profile: UserProfile,
        commitments: Sequence[ExistingCommitment],
    ) -> Schedule:
        ...

    async def adjust_schedule(
        self,
        schedule: Schedule,
        goal: Goal,
        completed: Sequence[ScheduledTask],
        missed: Sequence[ScheduledTask],
    ) -> Schedule:
        ...

    async def analyze_progress(self, goal: Goal, schedule: Schedule) -> ProgressAnalysis:
        ...

    async def get_suggestions(self, goal: Goal, schedule: Schedule, profile: UserProfile) -> List[str]:
        ...
