"""Schemas for the adjustment sweep endpoints."""
from __future__ import annotations

from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel


class JobSchedule(BaseModel):
    timezone: str
    adjustment_time: str


class JobsConfigResponse(BaseModel):
    scheduler_enabled: bool
    schedule: JobSchedule
    planning_strategy: str
    minimum_adjustment_days: int
    request_id: str


class JobRunRequest(BaseModel):
    job: Literal["adjustment_sweep"] = "adjustment_sweep"
    goal_id: Optional[UUID] = None


class JobRunResponse(BaseModel):
    job: str
    goals_checked: int
    goals_adjusted: int
    failures: int
    request_id: str
