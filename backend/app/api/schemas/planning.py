"""Schemas for schedules, task completion and progress."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.services.planning.models import Adjustment, Phase, Schedule, ScheduledTask


class ScheduleResponse(BaseModel):
    goal_id: UUID
    schedule: Schedule
    total_tasks: int
    completed_tasks: int
    overall_progress: float
    current_phase: Optional[Phase]
    next_task: Optional[ScheduledTask]
    tasks_for_today: List[ScheduledTask]
    upcoming_tasks: List[ScheduledTask]
    overdue_tasks: List[ScheduledTask]
    is_on_track: bool
    days_remaining: int
    request_id: str


class AdjustResponse(ScheduleResponse):
    applied: List[Adjustment]


class TaskUpdateRequest(BaseModel):
    completed: bool


class TaskUpdateResponse(BaseModel):
    id: UUID
    goal_id: UUID
    completed: bool
    completed_at: Optional[datetime]
    changed: bool
    goal_progress: float
    request_id: str


class ProgressResponse(BaseModel):
    goal_id: UUID
    analyzed_at: datetime
    overall_score: float
    score_description: str
    on_track: bool
    strengths: List[str]
    areas_for_improvement: List[str]
    recommendations: List[str]
    estimated_new_completion_date: Optional[date]
    request_id: str


class SuggestionsResponse(BaseModel):
    goal_id: UUID
    suggestions: List[str]
    request_id: str
