"""Goal planner persistence: declarative base plus every mapped table."""

from app.db.base import Base
from app.db.models import Commitment, Goal, GoalSchedule, Milestone, UserProfile

__all__ = ["Base", "Commitment", "Goal", "GoalSchedule", "Milestone", "UserProfile"]
