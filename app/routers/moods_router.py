"""Mood API: daily check-ins and same-mood matches."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.auth.identity import CurrentUser, get_current_user
from app.db import get_db
from app.exceptions import NotFoundError
from app.schemas.mood import MoodCheckinCreate, MoodCheckinRead
from app.services.mood_service import MoodService

moods_router = APIRouter(prefix="/moods", tags=["Mood"])


@moods_router.post("/checkins", response_model=MoodCheckinRead, status_code=201)
def check_in(
    data: MoodCheckinCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MoodCheckinRead:
    checkin = MoodService(db).check_in(current_user.id, data.mood)
    return MoodCheckinRead.model_validate(checkin)


@moods_router.get("/current", response_model=MoodCheckinRead)
def get_current_mood(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MoodCheckinRead:
    """The caller's latest check-in today; 404 until they check in."""
    checkin = MoodService(db).current_mood(current_user.id)
    if checkin is None:
        raise NotFoundError("No mood check-in today")
    return MoodCheckinRead.model_validate(checkin)


@moods_router.get("/matches", response_model=List[MoodCheckinRead])
def get_mood_matches(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> List[MoodCheckinRead]:
    return [
        MoodCheckinRead.model_validate(c)
        for c in MoodService(db).matches(current_user.id)
    ]


@moods_router.get("/active", response_model=List[MoodCheckinRead])
def get_active_users(
    _current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> List[MoodCheckinRead]:
    return [MoodCheckinRead.model_validate(c) for c in MoodService(db).active_users()]
