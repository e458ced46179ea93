"""Existing commitment API routes."""
from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.commitment import CommitmentCreateRequest, CommitmentResponse
from app.db.deps import get_db
from app.db.models.commitment import Commitment
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.commitment_service import SqlCommitmentSource
from app.db.types import as_aware

router = APIRouter()


@router.post(
    "/commitments",
    response_model=CommitmentResponse,
    status_code=status.HTTP_201_CREATED,
    tags=["commitments"],
)
def create_commitment(
    payload: CommitmentCreateRequest,
    http_request: Request,
    db: Session = Depends(get_db),
) -> CommitmentResponse:
    request_id = getattr(http_request.state, "request_id", None)
    with trace("commitment.create", metadata={"route": "/commitments"}, request_id=request_id):
        row = SqlCommitmentSource(db).add(payload.title.strip(), payload.start_at, payload.end_at)
    log_metric("commitment.create.success", 1)
    return _serialize(row, request_id)


@router.get("/commitments", response_model=List[CommitmentResponse], tags=["commitments"])
def list_commitments(
    http_request: Request,
    from_: Optional[date] = Query(default=None, alias="from"),
    to: Optional[date] = Query(default=None),
    db: Session = Depends(get_db),
) -> List[CommitmentResponse]:
    request_id = getattr(http_request.state, "request_id", None)
    with trace(
        "commitment.list",
        metadata={
            "route": "/commitments",
            "from": from_.isoformat() if from_ else None,
            "to": to.isoformat() if to else None,
        },
        request_id=request_id,
    ):
        rows = SqlCommitmentSource(db).list_rows(from_, to)
    log_metric("commitment.list.count", len(rows))
    return [_serialize(row, request_id) for row in rows]


def _serialize(row: Commitment, request_id: str | None) -> CommitmentResponse:
    return CommitmentResponse(
        id=row.id,
        title=row.title,
        start_at=as_aware(row.start_at),
        end_at=as_aware(row.end_at),
        request_id=request_id or "",
    )
