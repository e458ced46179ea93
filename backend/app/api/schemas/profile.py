"""Schemas for the user profile."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class ProfileRequest(BaseModel):
    name: Optional[str] = Field(default=None, max_length=200)
    occupation: Optional[str] = Field(default=None, max_length=200)
    weekly_available_hours: float = Field(default=10.0, ge=0, le=168)
    interests: List[str] = Field(default_factory=list)


class ProfileResponse(BaseModel):
    name: Optional[str]
    occupation: Optional[str]
    weekly_available_hours: float
    interests: List[str]
    request_id: str
