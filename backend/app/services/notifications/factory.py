"""Reminder scheduler factory."""
from __future__ import annotations

import logging
from functools import lru_cache

from app.core.config import settings
from app.services.notifications.base import ReminderScheduler
from app.services.notifications.noop import NoopReminderScheduler

logger = logging.getLogger(__name__)

_PROVIDERS = {"noop": NoopReminderScheduler}


@lru_cache
def get_reminder_scheduler() -> ReminderScheduler:
    """Scheduler for the configured provider; unknown names fall back to the log-only one."""
    provider = settings.notifications_provider.lower()
    scheduler_cls = _PROVIDERS.get(provider)
    if scheduler_cls is None:
        logger.warning("Unknown notifications provider %r; reminders will only be logged.", provider)
        scheduler_cls = NoopReminderScheduler
    return scheduler_cls()
