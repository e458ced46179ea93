from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import uuid4

from fastapi.testclient import TestClient

from app.core.config import settings
from app.main import app
from app.services.notifications.base import NotificationResult, ReminderScheduler
from app.services.notifications.factory import get_reminder_scheduler
from app.services.notifications.hooks import (
    build_task_reminders,
    cancel_reminders,
    reminder_identifier,
    schedule_reminders,
)
from app.services.notifications.noop import NoopReminderScheduler
from app.services.planning.models import ScheduledTask

NOW = datetime(2025, 1, 6, 10, 0, tzinfo=timezone.utc)


class _Recorder(ReminderScheduler):
    def __init__(self) -> None:
        self.calls = []

    def schedule_task_reminders(self, *, goal_id, reminders, request_id) -> NotificationResult:
        self.calls.append(("schedule", goal_id, reminders, request_id))
        return NotificationResult(status="ok", reason="recorded", count=len(reminders))

    def cancel_task_reminders(self, *, goal_id, identifiers, request_id) -> NotificationResult:
        self.calls.append(("cancel", goal_id, identifiers, request_id))
        return NotificationResult(status="ok", reason="recorded", count=len(identifiers))


def _tasks():
    return [
        ScheduledTask(title="Already passed", scheduled_date=date(2025, 1, 6)),
        ScheduledTask(title="Tomorrow", scheduled_date=date(2025, 1, 7)),
        ScheduledTask(title="Next week", scheduled_date=date(2025, 1, 13)),
    ]


def test_reminders_fire_at_configured_hour_and_skip_the_past() -> None:
    goal_id = uuid4()
    tasks = _tasks()

    reminders = build_task_reminders(goal_id, tasks, now=NOW, hour=9)

    assert [r.title for r in reminders] == ["Tomorrow", "Next week"]
    assert reminders[0].fire_at == datetime(2025, 1, 7, 9, 0, tzinfo=timezone.utc)
    assert reminders[0].identifier == f"ai_task_{goal_id}_{tasks[1].id}"
    assert reminder_identifier(goal_id, tasks[1].id) == reminders[0].identifier

    later_hour = build_task_reminders(goal_id, tasks, now=NOW, hour=18)
    assert [r.title for r in later_hour] == ["Already passed", "Tomorrow", "Next week"]


def test_schedule_and_cancel_dispatch_to_provider() -> None:
    recorder = _Recorder()
    goal_id = uuid4()
    tasks = _tasks()

    scheduled = schedule_reminders(recorder, goal_id, tasks, now=NOW, hour=9, enabled=True, request_id="req-1")
    cancelled = cancel_reminders(recorder, goal_id, [task.id for task in tasks], enabled=True, request_id="req-1")

    assert scheduled.count == 2
    assert cancelled.count == 3
    kind, recorded_goal, identifiers, request_id = recorder.calls[1]
    assert kind == "cancel"
    assert recorded_goal == goal_id
    assert identifiers[0] == reminder_identifier(goal_id, tasks[0].id)
    assert request_id == "req-1"


def test_disabled_or_empty_dispatch_is_skipped() -> None:
    recorder = _Recorder()
    goal_id = uuid4()

    disabled = schedule_reminders(recorder, goal_id, _tasks(), now=NOW, hour=9, enabled=False)
    nothing_left = schedule_reminders(recorder, goal_id, _tasks()[:1], now=NOW, hour=9, enabled=True)
    nothing_to_cancel = cancel_reminders(recorder, goal_id, [], enabled=True)

    assert disabled.status == "skipped"
    assert nothing_left.reason == "no upcoming tasks"
    assert nothing_to_cancel.status == "skipped"
    assert cancel_reminders(recorder, goal_id, [uuid4()], enabled=False).status == "skipped"
    assert recorder.calls == []


def test_noop_provider_reports_counts() -> None:
    provider = get_reminder_scheduler()
    assert isinstance(provider, NoopReminderScheduler)

    reminders = build_task_reminders(uuid4(), _tasks(), now=NOW, hour=9)
    result = provider.schedule_task_reminders(goal_id=uuid4(), reminders=reminders, request_id=None)
    assert result.status == "noop"
    assert result.count == 2


def test_notifications_config_endpoint(monkeypatch) -> None:
    monkeypatch.setattr(settings, "notifications_enabled", True)
    monkeypatch.setattr(settings, "reminder_hour", 7)

    with TestClient(app) as client:
        resp = client.get("/notifications/config")

    assert resp.status_code == 200
    data = resp.json()
    assert data["enabled"] is True
    assert data["provider"] == "noop"
    assert data["reminder_hour"] == 7
    assert data["scheduler"] == "NoopReminderScheduler"
    assert data["request_id"]
