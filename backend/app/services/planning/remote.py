"""Planning strategy backed by the OpenAI chat completions API."""
from __future__ import annotations

import asyncio
import json
import logging
from datetime import date, datetime, timedelta
from time import perf_counter
from typing import Any, Dict, List, Optional, Sequence

import openai
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from app.core.clock import Clock, utc_now
from app.core.config import Settings, get_settings
from app.core.errors import (
    ApiKeyMissingError,
    InvalidResponseError,
    NetworkError,
    PlanningCancelledError,
    RateLimitedError,
    RemoteTimeoutError,
    ServerError,
)
from app.observability.metrics import log_latency, log_metric
from app.services.planning.models import (
    Adjustment,
    AdjustmentReason,
    ExistingCommitment,
    Goal,
    Phase,
    ProgressAnalysis,
    Schedule,
    ScheduledTask,
    UserProfile,
    add_adjustment,
    reschedule_tasks,
)
from app.services.planning.phase_planner import add_months

logger = logging.getLogger(__name__)

TASK_SPACING_DAYS = 2

GOAL_PLANNER_PROMPT = (
    "You are an expert life coach and productivity specialist with deep knowledge of career development, "
    "health and fitness, education, and personal growth. Create detailed, realistic, actionable plans that "
    "build sustainable progress through small, consistent steps. Respect the user's available time and "
    "existing commitments, suggest helpful resources when relevant, and always respond with valid JSON in "
    "the exact format requested."
)
SCHEDULE_ADJUSTER_PROMPT = (
    "You are an adaptive scheduling assistant that helps users stay on track with their goals. "
    "Prioritize missed tasks, avoid overloading upcoming days, and keep adjustments encouraging but "
    "realistic. Always respond with valid JSON."
)
PROGRESS_ANALYZER_PROMPT = (
    "You are a progress analysis expert who gives constructive, honest and encouraging feedback on goal "
    "progress with specific, actionable improvements. Always respond with valid JSON in the exact format "
    "requested."
)
SUGGESTION_PROMPT = (
    "You are a motivational coach who gives specific, practical suggestions tailored to the user's "
    "interests and background. Always respond with valid JSON containing a \"suggestions\" array."
)


class _RemoteModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RemoteTask(_RemoteModel):
    title: str
    description: Optional[str] = None
    duration_minutes: int = Field(default=60, alias="durationMinutes", ge=0)
    resources: Optional[List[str]] = None


class RemotePhase(_RemoteModel):
    title: str
    description: str = ""
    duration_weeks: int = Field(default=1, alias="durationWeeks")
    tasks: List[RemoteTask] = Field(default_factory=list)


class RemotePlan(_RemoteModel):
    phases: List[RemotePhase]
    weekly_commitment_hours: Optional[float] = Field(default=None, alias="weeklyCommitmentHours")
    estimated_completion_date: Optional[str] = Field(default=None, alias="estimatedCompletionDate")
    summary: Optional[str] = None


class RemoteReschedule(_RemoteModel):
    task_id: str = Field(alias="taskId")
    new_date: str = Field(alias="newDate")


class RemoteAdjustment(_RemoteModel):
    rescheduled_tasks: List[RemoteReschedule] = Field(default_factory=list, alias="rescheduledTasks")
    summary: Optional[str] = None


class RemoteAnalysis(_RemoteModel):
    overall_score: float = Field(alias="overallScore")
    on_track: bool = Field(alias="onTrack")
    strengths: List[str] = Field(default_factory=list)
    areas_for_improvement: List[str] = Field(default_factory=list, alias="areasForImprovement")
    recommendations: List[str] = Field(default_factory=list)
    estimated_new_completion_date: Optional[str] = Field(default=None, alias="estimatedNewCompletionDate")


class OpenAIPlanningStrategy:
    """Remote planner. Each call is bounded by a timeout and an optional cancel event."""

    name = "openai"

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: Any = None,
        clock: Clock = utc_now,
        cancel_event: asyncio.Event | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._client = client
        self._clock = clock
        self._cancel_event = cancel_event

    # ------------------------------------------------------------------
    # Strategy operations
    # ------------------------------------------------------------------

    async def generate_goal_plan(
        self,
        goal: Goal,
        profile: UserProfile,
        commitments: Sequence[ExistingCommitment],
    ) -> Schedule:
        prompt = build_planning_prompt(goal, profile, commitments)
        content = await self._complete("plan", GOAL_PLANNER_PROMPT, prompt)
        plan = _decode(content, RemotePlan)
        return self._schedule_from_plan(plan, profile)

    async def adjust_schedule(
        self,
        schedule: Schedule,
        goal: Goal,
        completed: Sequence[ScheduledTask],
        missed: Sequence[ScheduledTask],
    ) -> Schedule:
        now = self._clock()
        prompt = build_adjustment_prompt(schedule, goal, completed, missed, now)
        content = await self._complete("adjust", SCHEDULE_ADJUSTER_PROMPT, prompt)
        response = _decode(content, RemoteAdjustment)

        new_dates = _accepted_dates(schedule, missed, response, now.date())
        adjusted = reschedule_tasks(schedule, new_dates)
        return add_adjustment(
            adjusted,
            Adjustment(
                timestamp=now,
                reason=AdjustmentReason.MISSED_TASKS if missed else AdjustmentReason.AHEAD_OF_SCHEDULE,
                description=response.summary or "Schedule adjusted based on progress",
                changes=f"Updated {len(new_dates)} missed tasks, {len(completed)} completed",
            ),
        )

    async def analyze_progress(self, goal: Goal, schedule: Schedule) -> ProgressAnalysis:
        now = self._clock()
        prompt = build_analysis_prompt(goal, schedule, now)
        content = await self._complete("analyze", PROGRESS_ANALYZER_PROMPT, prompt)
        analysis = _decode(content, RemoteAnalysis)
        return ProgressAnalysis(
            analyzed_at=now,
            overall_score=max(0.0, min(100.0, analysis.overall_score)),
            on_track=analysis.on_track,
            strengths=analysis.strengths,
            areas_for_improvement=analysis.areas_for_improvement,
            recommendations=analysis.recommendations,
            estimated_new_completion_date=_parse_date(analysis.estimated_new_completion_date),
        )

    async def get_suggestions(self, goal: Goal, schedule: Schedule, profile: UserProfile) -> List[str]:
        prompt = build_suggestions_prompt(goal, schedule, profile, self._clock())
        content = await self._complete("suggestions", SUGGESTION_PROMPT, prompt)
        try:
            payload = json.loads(content)
        except ValueError:
            return []
        suggestions = payload.get("suggestions") if isinstance(payload, dict) else None
        if not isinstance(suggestions, list):
            return []
        return [item for item in suggestions if isinstance(item, str)]

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _get_client(self) -> Any:
        if not self._settings.openai_api_key:
            raise ApiKeyMissingError()
        if self._client is None:
            self._client = openai.AsyncOpenAI(
                api_key=self._settings.openai_api_key,
                base_url=self._settings.openai_base_url,
                timeout=self._settings.openai_timeout_seconds,
                max_retries=0,
            )
        return self._client

    async def _complete(self, operation: str, system_prompt: str, user_prompt: str) -> str:
        client = self._get_client()
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise PlanningCancelledError()

        timeout = self._settings.openai_timeout_seconds
        logger.debug("Remote %s request: %s", operation, user_prompt[:200])
        request = asyncio.ensure_future(
            client.chat.completions.create(
                model=self._settings.openai_model,
                response_format={"type": "json_object"},
                temperature=self._settings.openai_temperature,
                max_tokens=self._settings.openai_max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        )
        waiters = {request}
        cancel_waiter = None
        if self._cancel_event is not None:
            cancel_waiter = asyncio.ensure_future(self._cancel_event.wait())
            waiters.add(cancel_waiter)

        start = perf_counter()
        try:
            done, _ = await asyncio.wait(waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for waiter in waiters:
                if not waiter.done():
                    waiter.cancel()

        if request not in done:
            if cancel_waiter is not None and cancel_waiter in done:
                log_metric("remote.cancelled", 1, metadata={"operation": operation})
                raise PlanningCancelledError()
            log_metric("remote.timeout", 1, metadata={"operation": operation})
            raise RemoteTimeoutError(timeout)

        try:
            completion = request.result()
        except openai.APITimeoutError as exc:
            raise RemoteTimeoutError(timeout) from exc
        except openai.APIConnectionError as exc:
            raise NetworkError(f"Network error: {exc}") from exc
        except openai.RateLimitError as exc:
            raise RateLimitedError() from exc
        except openai.APIStatusError as exc:
            raise ServerError(exc.status_code) from exc
        except openai.APIError as exc:
            raise InvalidResponseError(f"Invalid response from remote planner: {exc}") from exc

        log_latency(
            "remote.latency_ms",
            start,
            metadata={"operation": operation, "model": self._settings.openai_model},
        )
        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise InvalidResponseError("Remote planner returned an empty response")
        logger.debug("Remote %s response: %s", operation, content[:200])
        return content

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _schedule_from_plan(self, plan: RemotePlan, profile: UserProfile) -> Schedule:
        now = self._clock()
        today = now.date()
        cursor = today
        phases: List[Phase] = []
        for remote_phase in plan.phases:
            end = cursor + timedelta(weeks=max(1, remote_phase.duration_weeks))
            tasks: List[ScheduledTask] = []
            task_day = cursor
            for remote_task in remote_phase.tasks:
                tasks.append(
                    ScheduledTask(
                        title=remote_task.title,
                        description=remote_task.description,
                        scheduled_date=min(task_day, end),
                        duration_minutes=remote_task.duration_minutes,
                        resources=remote_task.resources,
                    )
                )
                task_day += timedelta(days=TASK_SPACING_DAYS)
            phases.append(
                Phase(
                    title=remote_phase.title,
                    description=remote_phase.description,
                    start_date=cursor,
                    end_date=end,
                    tasks=tasks,
                    is_completed=all(task.is_completed for task in tasks),
                )
            )
            cursor = end + timedelta(days=1)

        estimated = _parse_date(plan.estimated_completion_date) or add_months(today, 3)
        hours = plan.weekly_commitment_hours
        return Schedule(
            generated_at=now,
            phases=phases,
            weekly_commitment_hours=hours if hours is not None and hours >= 0 else profile.weekly_available_hours,
            estimated_completion_date=estimated,
        )


# ----------------------------------------------------------------------
# Prompt builders
# ----------------------------------------------------------------------


def build_planning_prompt(goal: Goal, profile: UserProfile, commitments: Sequence[ExistingCommitment]) -> str:
    commitment_summary = (
        f"Existing weekly commitments: {len(commitments)} events" if commitments else "No existing commitments"
    )
    target = goal.target_date.isoformat() if goal.target_date else "Flexible (recommend a timeline)"
    return (
        "Create a detailed, actionable plan to achieve the following goal.\n\n"
        "GOAL DETAILS:\n"
        f"- Title: {goal.title}\n"
        f"- Description: {goal.description or 'No additional details'}\n"
        f"- Target Date: {target}\n"
        f"- Category: {goal.category.display_name}\n\n"
        "USER PROFILE:\n"
        f"- Name: {profile.name or 'Not specified'}\n"
        f"- Occupation: {profile.occupation or 'Not specified'}\n"
        f"- Available hours per week: {profile.weekly_available_hours:g}\n"
        f"- Interests: {', '.join(profile.interests) or 'Not specified'}\n"
        f"- {commitment_summary}\n\n"
        "REQUIREMENTS:\n"
        "1. Create 3-5 distinct phases with clear milestones\n"
        "2. Each phase should have 5-10 specific, actionable tasks\n"
        "3. Tasks must fit within the user's available time\n"
        "4. Include an estimated duration for each task in minutes\n"
        "5. Suggest helpful resources (books, websites, courses) where applicable\n\n"
        "Respond with a JSON object in this exact format:\n"
        '{"phases": [{"title": "Phase title", "description": "What this phase accomplishes", '
        '"durationWeeks": 4, "tasks": [{"title": "Task title", "description": "Task details", '
        '"durationMinutes": 60, "resources": ["resource"]}]}], "weeklyCommitmentHours": 10, '
        '"estimatedCompletionDate": "YYYY-MM-DD", "summary": "Brief summary of the plan"}'
    )


def build_adjustment_prompt(
    schedule: Schedule,
    goal: Goal,
    completed: Sequence[ScheduledTask],
    missed: Sequence[ScheduledTask],
    now: datetime,
) -> str:
    completed_lines = "\n".join(f"- {task.title}" for task in completed) or "- none"
    missed_lines = "\n".join(
        f"- [{task.id}] {task.title} (was due: {task.scheduled_date.isoformat()})" for task in missed
    ) or "- none"
    remaining = sum(1 for phase in schedule.phases if not phase.is_completed)
    return (
        "Adjust the following goal schedule based on user progress.\n\n"
        f"GOAL: {goal.title}\n"
        f"TODAY: {now.date().isoformat()}\n"
        f"CURRENT PROGRESS: {int(schedule.overall_progress * 100)}%\n\n"
        f"COMPLETED TASKS ({len(completed)}):\n{completed_lines}\n\n"
        f"MISSED TASKS ({len(missed)}):\n{missed_lines}\n\n"
        f"REMAINING PHASES: {remaining}\n"
        f"DAYS REMAINING: {schedule.days_remaining(now)}\n\n"
        "Pick a new date after today for every missed task without overloading any single day.\n"
        'Respond with JSON: {"rescheduledTasks": [{"taskId": "<id>", "newDate": "YYYY-MM-DD"}], '
        '"summary": "One sentence describing the adjustment"}'
    )


def build_analysis_prompt(goal: Goal, schedule: Schedule, now: datetime) -> str:
    current = schedule.current_phase
    return (
        "Analyze progress on the following goal and provide insights.\n\n"
        f"GOAL: {goal.title}\n"
        f"CATEGORY: {goal.category.display_name}\n\n"
        "PROGRESS METRICS:\n"
        f"- Overall Progress: {int(schedule.overall_progress * 100)}%\n"
        f"- Tasks Completed: {schedule.completed_tasks} of {schedule.total_tasks}\n"
        f"- Overdue Tasks: {len(schedule.overdue_tasks(now))}\n"
        f"- Days Remaining: {schedule.days_remaining(now)}\n"
        f"- On Track: {'Yes' if schedule.is_on_track(now) else 'No'}\n\n"
        f"CURRENT PHASE: {current.title if current else 'N/A'}\n\n"
        "Respond with JSON: "
        '{"overallScore": 75, "onTrack": true, "strengths": ["..."], "areasForImprovement": ["..."], '
        '"recommendations": ["..."], "estimatedNewCompletionDate": "YYYY-MM-DD"}'
    )


def build_suggestions_prompt(goal: Goal, schedule: Schedule, profile: UserProfile, now: datetime) -> str:
    return (
        "Provide personalized suggestions for improving progress on this goal.\n\n"
        f"USER: {profile.name or 'Anonymous'}, {profile.occupation or ''}\n"
        f"INTERESTS: {', '.join(profile.interests)}\n\n"
        f"GOAL: {goal.title}\n"
        f"PROGRESS: {int(schedule.overall_progress * 100)}%\n"
        f"OVERDUE TASKS: {len(schedule.overdue_tasks(now))}\n\n"
        "Provide 3-5 specific, tailored and motivating suggestions.\n"
        'Respond with JSON: {"suggestions": ["suggestion1", "suggestion2", "suggestion3"]}'
    )


# ----------------------------------------------------------------------
# Helpers
# ----------------------------------------------------------------------


def _decode(content: str, model: type[_RemoteModel]) -> Any:
    try:
        return model.model_validate(json.loads(content))
    except (ValueError, ValidationError) as exc:
        raise InvalidResponseError(f"Could not decode remote planner response: {exc}") from exc


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _accepted_dates(
    schedule: Schedule,
    missed: Sequence[ScheduledTask],
    response: RemoteAdjustment,
    today: date,
) -> Dict[Any, date]:
    """Use the model's dates where valid; other missed tasks fan out from tomorrow."""
    known = {str(task.id): task.id for task in schedule.all_tasks}
    known_ids = set(known.values())
    proposed: Dict[Any, date] = {}
    for entry in response.rescheduled_tasks:
        task_id = known.get(entry.task_id)
        new_date = _parse_date(entry.new_date)
        if task_id is not None and new_date is not None and new_date > today:
            proposed[task_id] = new_date

    new_dates: Dict[Any, date] = {}
    next_day = today
    for task in missed:
        if task.id not in known_ids or task.id in new_dates:
            continue
        if task.id in proposed:
            new_dates[task.id] = proposed[task.id]
            continue
        next_day += timedelta(days=1)
        new_dates[task.id] = next_day
    return new_dates
