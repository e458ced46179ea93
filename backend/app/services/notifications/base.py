"""Task reminder scheduler interface."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List
from uuid import UUID


@dataclass
class NotificationResult:
    status: str
    reason: str
    count: int = 0


@dataclass(frozen=True)
class TaskReminder:
    identifier: str
    goal_id: UUID
    task_id: UUID
    title: str
    fire_at: datetime


class ReminderScheduler:
    """Base interface for reminder providers."""

    def schedule_task_reminders(
        self,
        *,
        goal_id: UUID,
        reminders: List[TaskReminder],
        request_id: str | None,
    ) -> NotificationResult:
        raise NotImplementedError

    def cancel_task_reminders(
        self,
        *,
        goal_id: UUID,
        identifiers: List[str],
        request_id: str | None,
    ) -> NotificationResult:
        raise NotImplementedError
