"""User profile ORM model (single row)."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, Float, Text, func, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base
from app.db.types import JSONBCompat


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    name = Column(Text, nullable=True)
    occupation = Column(Text, nullable=True)
    weekly_available_hours = Column(Float, nullable=False, server_default=sa_text("10"))
    interests = Column(JSONBCompat, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
