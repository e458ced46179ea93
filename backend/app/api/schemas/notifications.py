"""Schemas for reminder configuration."""
from __future__ import annotations

from pydantic import BaseModel


class NotificationsConfigResponse(BaseModel):
    enabled: bool
    provider: str
    scheduler: str
    reminder_hour: int
    request_id: str
