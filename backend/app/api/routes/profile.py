"""User profile API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.schemas.profile import ProfileRequest, ProfileResponse
from app.db.deps import get_db
from app.observability.metrics import log_metric
from app.observability.tracing import trace
from app.services.planning.models import UserProfile
from app.services.profile_service import SqlProfileProvider

router = APIRouter()


@router.put("/profile", response_model=ProfileResponse, tags=["profile"])
def upsert_profile(payload: ProfileRequest, http_request: Request, db: Session = Depends(get_db)) -> ProfileResponse:
    """Create or replace the planning profile."""
    request_id = getattr(http_request.state, "request_id", None)
    profile = UserProfile(
        name=payload.name,
        occupation=payload.occupation,
        weekly_available_hours=payload.weekly_available_hours,
        interests=[item.strip() for item in payload.interests if item.strip()],
    )
    with trace("profile.upsert", metadata={"route": "/profile", "request_id": request_id}, request_id=request_id):
        SqlProfileProvider(db).save_profile(profile)
    log_metric("profile.upsert.success", 1, metadata={"weekly_hours": profile.weekly_available_hours})
    return _serialize(profile, request_id)


@router.get("/profile", response_model=ProfileResponse, tags=["profile"])
def get_profile(http_request: Request, db: Session = Depends(get_db)) -> ProfileResponse:
    request_id = getattr(http_request.state, "request_id", None)
    profile = SqlProfileProvider(db).current_profile()
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return _serialize(profile, request_id)


def _serialize(profile: UserProfile, request_id: str | None) -> ProfileResponse:
    return ProfileResponse(
        name=profile.name,
        occupation=profile.occupation,
        weekly_available_hours=profile.weekly_available_hours,
        interests=profile.interests,
        request_id=request_id or "",
    )
