"""No-op reminder provider (logs only)."""
from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from app.services.notifications.base import NotificationResult, ReminderScheduler, TaskReminder


logger = logging.getLogger(__name__)


class NoopReminderScheduler(ReminderScheduler):
    def schedule_task_reminders(
        self,
        *,
        goal_id: UUID,
        reminders: List[TaskReminder],
        request_id: str | None,
    ) -> NotificationResult:
        logger.info(
            "Reminders queued (noop) goal=%s count=%s first=%s",
            goal_id,
            len(reminders),
            reminders[0].fire_at.isoformat() if reminders else "-",
        )
        return NotificationResult(status="noop", reason="reminder provider is noop", count=len(reminders))

    def cancel_task_reminders(
        self,
        *,
        goal_id: UUID,
        identifiers: List[str],
        request_id: str | None,
    ) -> NotificationResult:
        logger.info("Reminders cancelled (noop) goal=%s count=%s", goal_id, len(identifiers))
        return NotificationResult(status="noop", reason="reminder provider is noop", count=len(identifiers))
