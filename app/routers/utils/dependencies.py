from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from app.auth.identity import CurrentUser, get_current_user
from app.core.app_state import state
from app.core.notifier import FanoutNotifier
from app.core.presence import PresenceTracker
from app.db import get_db
from app.exceptions import AuthorizationError, NotFoundError
from app.models.message import Message
from app.models.room import Room
from app.services.message_service import MessageService
from app.services.room_service import RoomService


def get_notifier() -> FanoutNotifier:
    """FastAPI dependency returning the process-wide notifier."""
    return state.notifier


def get_presence() -> PresenceTracker:
    """FastAPI dependency returning the process-wide presence tracker."""
    return state.presence


def get_room_by_id(
    room_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Room:
    """FastAPI dependency to get a room the caller may read."""
    room = RoomService(db).get_room(room_id)
    if room is None:
        raise NotFoundError("Room not found")
    participants = room.participants
    if participants is not None and current_user.id not in participants:
        raise AuthorizationError("Not a participant of this conversation")
    return room


def get_message_by_id(
    message_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: FanoutNotifier = Depends(get_notifier),
) -> Message:
    """
    FastAPI dependency to get a message the caller may act on.

    Direct messages are visible only to their two participants and to moderators.
    """
    message = MessageService(db, notifier=notifier).get_message(message_id)
    if message is None:
        raise NotFoundError("Message not found")
    if (
        message.receiver_id is not None
        and current_user.id not in (message.sender_id, message.receiver_id)
        and not current_user.is_moderator
    ):
        raise AuthorizationError("Not a participant of this conversation")
    return message
