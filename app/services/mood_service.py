"""Mood check-ins and same-mood matching for the current day."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.constants.rooms import Mood
from app.exceptions import InvalidRoomKeyError
from app.models.mixins import utcnow
from app.models.mood_checkin import MoodCheckin


def start_of_day(now: datetime) -> datetime:
    return now.astimezone(timezone.utc).replace(hour=0, minute=0, second=0, microsecond=0)


class MoodService:
    def __init__(self, db: Session, clock: Callable[[], datetime] = utcnow) -> None:
        self.db = db
        self._clock = clock

    def check_in(self, user_id: UUID, mood: Mood | str) -> MoodCheckin:
        try:
            mood = Mood(str(mood).strip().lower())
        except ValueError as e:
            raise InvalidRoomKeyError(f"Unknown mood: {mood}") from e
        checkin = MoodCheckin(user_id=user_id, mood=mood.value, created_at=self._clock())
        self.db.add(checkin)
        self.db.commit()
        self.db.refresh(checkin)
        return checkin

    def _todays_checkins(self) -> List[MoodCheckin]:
        since = start_of_day(self._clock())
        return (
            self.db.query(MoodCheckin)
            .filter(MoodCheckin.created_at >= since)
            .order_by(MoodCheckin.created_at.desc())
            .all()
        )

    def current_mood(self, user_id: UUID) -> Optional[MoodCheckin]:
        """Latest check-in today, or None when the user has not checked in yet."""
        since = start_of_day(self._clock())
        return (
            self.db.query(MoodCheckin)
            .filter(MoodCheckin.user_id == user_id, MoodCheckin.created_at >= since)
            .order_by(MoodCheckin.created_at.desc())
            .first()
        )

    def active_users(self) -> List[MoodCheckin]:
        """Latest check-in per user today, newest first."""
        latest: dict[UUID, MoodCheckin] = {}
        for checkin in self._todays_checkins():
            latest.setdefault(checkin.user_id, checkin)
        return list(latest.values())

    def matches(self, user_id: UUID) -> List[MoodCheckin]:
        """Other users whose current mood equals this user's."""
        mine = self.current_mood(user_id)
        if mine is None:
            return []
        return [
            c
            for c in self.active_users()
            if c.user_id != user_id and c.mood == mine.mood
        ]
