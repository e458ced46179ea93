"""Reminder hook utilities: choose reminder times and dispatch to the provider."""
from __future__ import annotations

import logging
from datetime import datetime, time
from time import perf_counter
from typing import Iterable, List
from uuid import UUID

from app.observability.metrics import log_latency, log_metric
from app.observability.tracing import trace
from app.services.notifications.base import NotificationResult, ReminderScheduler, TaskReminder
from app.services.planning.models import ScheduledTask


logger = logging.getLogger(__name__)


def reminder_identifier(goal_id: UUID, task_id: UUID) -> str:
    return f"ai_task_{goal_id}_{task_id}"


def build_task_reminders(
    goal_id: UUID,
    tasks: Iterable[ScheduledTask],
    *,
    now: datetime,
    hour: int,
) -> List[TaskReminder]:
    """One reminder per task at ``hour`` on its scheduled day; past times are skipped."""
    reminders: List[TaskReminder] = []
    for task in tasks:
        fire_at = datetime.combine(task.scheduled_date, time(hour=hour), tzinfo=now.tzinfo)
        if fire_at <= now:
            continue
        reminders.append(
            TaskReminder(
                identifier=reminder_identifier(goal_id, task.id),
                goal_id=goal_id,
                task_id=task.id,
                title=task.title,
                fire_at=fire_at,
            )
        )
    return reminders


def schedule_reminders(
    scheduler: ReminderScheduler,
    goal_id: UUID,
    tasks: Iterable[ScheduledTask],
    *,
    now: datetime,
    hour: int,
    enabled: bool,
    request_id: str | None = None,
) -> NotificationResult:
    if not enabled:
        log_metric("notifications.skipped", 1, metadata={"job": "schedule"})
        return NotificationResult(status="skipped", reason="notifications disabled")

    reminders = build_task_reminders(goal_id, tasks, now=now, hour=hour)
    if not reminders:
        return NotificationResult(status="skipped", reason="no upcoming tasks")

    start = perf_counter()
    with trace(
        "notifications.schedule",
        metadata={"goal_id": str(goal_id), "count": len(reminders)},
        request_id=request_id,
    ):
        result = scheduler.schedule_task_reminders(goal_id=goal_id, reminders=reminders, request_id=request_id)
    log_metric("notifications.scheduled", len(reminders), metadata={"goal_id": str(goal_id)})
    log_latency("notifications.duration_ms", start, metadata={"job": "schedule"})
    return result


def cancel_reminders(
    scheduler: ReminderScheduler,
    goal_id: UUID,
    task_ids: Iterable[UUID],
    *,
    enabled: bool,
    request_id: str | None = None,
) -> NotificationResult:
    if not enabled:
        return NotificationResult(status="skipped", reason="notifications disabled")

    identifiers = [reminder_identifier(goal_id, task_id) for task_id in task_ids]
    if not identifiers:
        return NotificationResult(status="skipped", reason="nothing to cancel")

    with trace(
        "notifications.cancel",
        metadata={"goal_id": str(goal_id), "count": len(identifiers)},
        request_id=request_id,
    ):
        result = scheduler.cancel_task_reminders(goal_id=goal_id, identifiers=identifiers, request_id=request_id)
    log_metric("notifications.cancelled", len(identifiers), metadata={"goal_id": str(goal_id)})
    return result
