"""Fixtures for rooms and messages."""

import pytest

from app.constants.rooms import RoomKind
from app.services.message_service import MessageService
from app.services.room_service import RoomService


@pytest.fixture(scope="function")
def setup_mood_room(db):
    """The 'happy' mood room."""
    room, _ = RoomService(db).get_or_create_room(RoomKind.MOOD, "happy")
    return room


@pytest.fixture(scope="function")
def setup_direct_room(db, user_id, other_user_id):
    """Direct room between user_id and other_user_id."""
    return RoomService(db).resolve_direct(user_id, other_user_id)


@pytest.fixture(scope="function")
def setup_message(db, notifier, faker, setup_mood_room, other_user_id):
    """A message sent by other_user_id in the happy room."""
    return MessageService(db, notifier=notifier).append(
        setup_mood_room.id, other_user_id, faker.sentence()
    )


@pytest.fixture(scope="function")
def setup_direct_message(db, notifier, faker, setup_direct_room, user_id, other_user_id):
    """A direct message from other_user_id to user_id."""
    return MessageService(db, notifier=notifier).append(
        setup_direct_room.id, other_user_id, faker.sentence()
    )
