"""Helpers for working with the single user profile."""
from __future__ import annotations

from typing import Optional

from sqlalchemy import asc
from sqlalchemy.orm import Session

from app.db.models.user_profile import UserProfile as UserProfileRow
from app.services.planning.models import UserProfile


class SqlProfileProvider:
    def __init__(self, db: Session) -> None:
        self.db = db

    def current_profile(self) -> Optional[UserProfile]:
        row = self._current_row()
        if row is None:
            return None
        return UserProfile(
            name=row.name,
            occupation=row.occupation,
            weekly_available_hours=max(0.0, row.weekly_available_hours or 0.0),
            interests=list(row.interests or []),
        )

    def save_profile(self, profile: UserProfile) -> UserProfile:
        """Create the profile row on first use, otherwise overwrite it."""
        row = self._current_row()
        if row is None:
            row = UserProfileRow()
            self.db.add(row)
        row.name = profile.name
        row.occupation = profile.occupation
        row.weekly_available_hours = profile.weekly_available_hours
        row.interests = list(profile.interests)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return profile

    def _current_row(self) -> Optional[UserProfileRow]:
        return self.db.query(UserProfileRow).order_by(asc(UserProfileRow.created_at)).first()
