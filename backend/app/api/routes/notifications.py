"""Reminder configuration routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from app.api.schemas.notifications import NotificationsConfigResponse
from app.core.config import Settings, get_settings
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.notifications.base import ReminderScheduler
from app.services.notifications.factory import get_reminder_scheduler

router = APIRouter()


@router.get("/notifications/config", response_model=NotificationsConfigResponse, tags=["notifications"])
def get_notifications_config(
    request: Request,
    settings: Settings = Depends(get_settings),
    scheduler: ReminderScheduler = Depends(get_reminder_scheduler),
) -> NotificationsConfigResponse:
    """Report whether task reminders are sent, through which provider, and at what hour."""
    request_id = getattr(request.state, "request_id", None)
    with trace("notifications.config", metadata={"provider": settings.notifications_provider}, request_id=request_id):
        response = NotificationsConfigResponse(
            enabled=settings.notifications_enabled,
            provider=settings.notifications_provider,
            scheduler=type(scheduler).__name__,
            reminder_hour=settings.reminder_hour,
            request_id=request_id or "",
        )
    log_metric("notifications.config.success", 1, metadata={"provider": settings.notifications_provider})
    return response
