"""Planning strategy and service factories."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from app.core.clock import Clock, utc_now
from app.core.config import Settings, get_settings
from app.services.commitment_service import SqlCommitmentSource
from app.services.goal_repository import SqlGoalRepository
from app.services.notifications.base import ReminderScheduler
from app.services.notifications.factory import get_reminder_scheduler
from app.services.planning.remote import OpenAIPlanningStrategy
from app.services.planning.rule_based import RuleBasedPlanningStrategy
from app.services.planning.service import PlanningService
from app.services.planning.strategy import PlanningStrategy
from app.services.profile_service import SqlProfileProvider

logger = logging.getLogger(__name__)


def get_planning_strategy(settings: Settings | None = None, clock: Clock = utc_now) -> PlanningStrategy:
    settings = settings or get_settings()
    name = settings.planning_strategy.lower()
    if name == "openai":
        return OpenAIPlanningStrategy(settings, clock=clock)
    if name != "rule_based":
        logger.warning("Unknown planning strategy %r; using rule_based", settings.planning_strategy)
    return RuleBasedPlanningStrategy(clock=clock)


def build_planning_service(
    db: Session,
    *,
    clock: Clock = utc_now,
    settings: Settings | None = None,
    strategy: PlanningStrategy | None = None,
    reminders: ReminderScheduler | None = None,
    request_id: str | None = None,
) -> PlanningService:
    """Wire a PlanningService against SQL collaborators for one unit of work."""
    settings = settings or get_settings()
    return PlanningService(
        strategy=strategy or get_planning_strategy(settings, clock),
        repository=SqlGoalRepository(db),
        profiles=SqlProfileProvider(db),
        commitments=SqlCommitmentSource(db),
        reminders=reminders or get_reminder_scheduler(),
        clock=clock,
        settings=settings,
        request_id=request_id,
    )
