"""Schemas for goal management."""
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.services.planning.models import GoalCategory, Milestone


class MilestoneCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    target_date: date


class GoalCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    target_date: Optional[date] = None
    category: GoalCategory = GoalCategory.PERSONAL
    milestones: List[MilestoneCreate] = Field(default_factory=list)


class GoalResponse(BaseModel):
    id: UUID
    title: str
    description: Optional[str]
    target_date: Optional[date]
    category: GoalCategory
    is_active: bool
    is_completed: bool
    progress_percentage: float
    has_schedule: bool
    milestones: List[Milestone]
    created_at: datetime
    updated_at: datetime
    last_plan_update_at: Optional[datetime]
    request_id: str


class GoalDeleteResponse(BaseModel):
    id: UUID
    deleted: bool
    request_id: str


class MilestoneToggleRequest(BaseModel):
    completed: bool
