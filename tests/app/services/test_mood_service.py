"""Tests for MoodService."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from app.constants.rooms import Mood
from app.exceptions import InvalidRoomKeyError
from app.services.mood_service import MoodService, start_of_day

NOON = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


def test_start_of_day():
    assert start_of_day(NOON) == datetime(2026, 10, 17, tzinfo=timezone.utc)


def test_check_in_normalizes_mood(db, user_id):
    checkin = MoodService(db, clock=FakeClock(NOON)).check_in(user_id, " Happy ")
    assert checkin.mood == Mood.HAPPY.value


def test_check_in_rejects_unknown_mood(db, user_id):
    with pytest.raises(InvalidRoomKeyError):
        MoodService(db, clock=FakeClock(NOON)).check_in(user_id, "grumpy")


def test_latest_checkin_wins(db, user_id):
    clock = FakeClock(NOON)
    svc = MoodService(db, clock=clock)
    svc.check_in(user_id, Mood.HAPPY)
    clock.now = NOON + timedelta(hours=1)
    svc.check_in(user_id, Mood.TIRED)

    assert svc.current_mood(user_id).mood == Mood.TIRED.value
    assert [c.mood for c in svc.active_users()] == [Mood.TIRED.value]


def test_yesterdays_checkin_is_ignored(db, user_id):
    clock = FakeClock(NOON - timedelta(days=1))
    svc = MoodService(db, clock=clock)
    svc.check_in(user_id, Mood.LONELY)
    clock.now = NOON
    assert svc.current_mood(user_id) is None
    assert svc.active_users() == []


def test_matches_same_mood(db, user_id, other_user_id):
    clock = FakeClock(NOON)
    svc = MoodService(db, clock=clock)
    stranger = uuid4()
    svc.check_in(user_id, Mood.STRESSED)
    svc.check_in(other_user_id, Mood.STRESSED)
    svc.check_in(stranger, Mood.EXCITED)

    assert [c.user_id for c in svc.matches(user_id)] == [other_user_id]
    assert svc.matches(uuid4()) == []
