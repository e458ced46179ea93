"""Milestone ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Index, Integer, Text, text as sa_text
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Milestone(Base):
    __tablename__ = "milestones"
    __table_args__ = (Index("ix_milestones_goal_id", "goal_id"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    goal_id = Column(UUID(as_uuid=True), ForeignKey("goals.id", ondelete="CASCADE"), nullable=False)
    title = Column(Text, nullable=False)
    target_date = Column(Date, nullable=False)
    is_completed = Column(Boolean, nullable=False, server_default=sa_text("false"))
    completed_at = Column(DateTime(timezone=True), nullable=True)
    is_generated = Column(Boolean, nullable=False, server_default=sa_text("false"))
    order_index = Column(Integer, nullable=False, server_default=sa_text("0"))
