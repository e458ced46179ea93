"""Existing calendar commitments consumed by the planner for conflict checks."""
from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

from sqlalchemy import asc
from sqlalchemy.orm import Session

from app.db.models.commitment import Commitment
from app.db.types import as_aware, to_utc
from app.services.planning.models import ExistingCommitment


class SqlCommitmentSource:
    def __init__(self, db: Session) -> None:
        self.db = db

    def fetch(self, start: date, end: date) -> List[ExistingCommitment]:
        """Commitments starting on any day from ``start`` to ``end`` inclusive."""
        return [
            ExistingCommitment(start=as_aware(row.start_at), title=row.title)
            for row in self.list_rows(start, end)
        ]

    def list_rows(self, start: Optional[date] = None, end: Optional[date] = None) -> List[Commitment]:
        query = self.db.query(Commitment)
        if start is not None:
            query = query.filter(Commitment.start_at >= datetime.combine(start, time.min, tzinfo=timezone.utc))
        if end is not None:
            upper = datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc)
            query = query.filter(Commitment.start_at < upper)
        return query.order_by(asc(Commitment.start_at)).all()

    def add(self, title: str, start_at: datetime, end_at: Optional[datetime] = None) -> Commitment:
        row = Commitment(title=title, start_at=to_utc(start_at), end_at=to_utc(end_at))
        self.db.add(row)
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(row)
        return row

