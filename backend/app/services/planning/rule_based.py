"""Deterministic, template-driven planning strategy (no network access)."""
from __future__ import annotations

import logging
from typing import Dict, List, Sequence

from app.core.clock import Clock, utc_now
from app.services.planning.adjustment import adjust
from app.services.planning.models import (
    ExistingCommitment,
    Goal,
    GoalCategory,
    Phase,
    ProgressAnalysis,
    Schedule,
    ScheduledTask,
    UserProfile,
)
from app.services.planning.phase_planner import plan_duration, plan_phases
from app.services.planning.progress_analyzer import analyze
from app.services.planning.task_placer import place_tasks
from app.services.planning.templates import DEFAULT_CATALOG, TemplateCatalog

logger = logging.getLogger(__name__)

CATEGORY_TIPS: Dict[GoalCategory, str] = {
    GoalCategory.FITNESS: "Remember to stay hydrated and get adequate rest between workouts.",
    GoalCategory.EDUCATION: "Try the Pomodoro technique: 25 minutes of focused study, then a 5-minute break.",
    GoalCategory.CAREER: "Network with professionals in your target field for insights and opportunities.",
    GoalCategory.HEALTH: "Track your progress in a journal to stay motivated.",
    GoalCategory.FINANCE: "Review your spending weekly to stay on track with financial goals.",
    GoalCategory.CREATIVITY: "Set aside dedicated creative time without distractions.",
    GoalCategory.RELATIONSHIPS: "Quality time matters more than quantity. Be present in your interactions.",
    GoalCategory.PERSONAL: "Celebrate small wins along the way to stay motivated.",
}


class RuleBasedPlanningStrategy:
    """Builds schedules from the template catalog; never raises for valid input."""

    name = "rule_based"

    def __init__(self, catalog: TemplateCatalog = DEFAULT_CATALOG, clock: Clock = utc_now) -> None:
        self._catalog = catalog
        self._clock = clock

    async def generate_goal_plan(
        self,
        goal: Goal,
        profile: UserProfile,
        commitments: Sequence[ExistingCommitment],
    ) -> Schedule:
        now = self._clock()
        today = now.date()
        template = self._catalog.select_template(goal.category, goal.title)
        total_weeks, target = plan_duration(today, goal.target_date)
        hours = profile.weekly_available_hours

        phases: List[Phase] = []
        for planned in plan_phases(template, total_weeks, today):
            tasks = place_tasks(planned.blueprint, planned.start_date, planned.end_date, hours, commitments)
            phases.append(
                Phase(
                    title=planned.title,
                    description=planned.description,
                    start_date=planned.start_date,
                    end_date=planned.end_date,
                    tasks=tasks,
                    is_completed=all(task.is_completed for task in tasks),
                )
            )

        logger.debug(
            "Rule-based plan for goal %s: template=%s weeks=%s phases=%s",
            goal.id,
            template.key,
            total_weeks,
            len(phases),
        )
        return Schedule(
            generated_at=now,
            phases=phases,
            weekly_commitment_hours=hours,
            estimated_completion_date=target,
        )

    async def adjust_schedule(
        self,
        schedule: Schedule,
        goal: Goal,
        completed: Sequence[ScheduledTask],
        missed: Sequence[ScheduledTask],
    ) -> Schedule:
        adjusted, _ = adjust(schedule, completed, missed, self._clock())
        return adjusted

    async def analyze_progress(self, goal: Goal, schedule: Schedule) -> ProgressAnalysis:
        return analyze(schedule, self._clock())

    async def get_suggestions(self, goal: Goal, schedule: Schedule, profile: UserProfile) -> List[str]:
        now = self._clock()
        suggestions: List[str] = []
        overdue = schedule.overdue_tasks(now)
        progress = schedule.overall_progress

        if overdue:
            suggestions.append(f"You have {len(overdue)} overdue task(s). Try to complete them today.")
        if not schedule.tasks_for_today(now) and schedule.upcoming_tasks(now):
            suggestions.append("No tasks scheduled for today. Consider working ahead on upcoming tasks.")
        if progress < 0.25 and schedule.total_tasks > 0:
            suggestions.append("You're in the early stages. Building momentum is key!")
        elif progress >= 0.75:
            suggestions.append("You're in the home stretch! Stay focused to finish strong.")

        suggestions.append(CATEGORY_TIPS[goal.category])
        return suggestions
