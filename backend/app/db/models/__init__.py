"""ORM models exposed for metadata discovery."""
from app.db.models.commitment import Commitment
from app.db.models.goal import Goal
from app.db.models.goal_schedule import GoalSchedule
from app.db.models.milestone import Milestone
from app.db.models.user_profile import UserProfile

__all__ = [
    "Commitment",
    "Goal",
    "GoalSchedule",
    "Milestone",
    "UserProfile",
]
