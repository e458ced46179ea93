"""Schemas for existing calendar commitments."""
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class CommitmentCreateRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    start_at: datetime
    end_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _end_after_start(self) -> "CommitmentCreateRequest":
        if self.end_at is not None and self.end_at < self.start_at:
            raise ValueError("end_at must not be before start_at")
        return self


class CommitmentResponse(BaseModel):
    id: UUID
    title: str
    start_at: datetime
    end_at: Optional[datetime]
    request_id: str
