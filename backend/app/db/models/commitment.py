"""Existing calendar commitment ORM model."""
from __future__ import annotations

from uuid import uuid4

from sqlalchemy import Column, DateTime, Index, Text, func
from sqlalchemy.dialects.postgresql import UUID

from app.db.base import Base


class Commitment(Base):
    __tablename__ = "commitments"
    __table_args__ = (Index("ix_commitments_start_at", "start_at"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    title = Column(Text, nullable=False)
    start_at = Column(DateTime(timezone=True), nullable=False)
    end_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
