"""Message store: append, ordered listing, soft delete and reply context lookup."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.config import get_settings
from app.constants.rooms import ATTACHMENT_PLACEHOLDER_BODY, RoomKind
from app.core.notifier import HINT_MESSAGES, FanoutNotifier, room_topic
from app.core.thread_context import ThreadContext, ThreadIndex
from app.exceptions import AuthorizationError, InvalidMessageError, NotFoundError
from app.infra.logging_config import get_logger
from app.models.message import Message
from app.models.mixins import as_utc, utcnow
from app.models.room import Room
from app.utils.db.errors import translate_storage_errors

logger = get_logger("messages")


class MessageService:
    def __init__(
        self,
        db: Session,
        notifier: Optional[FanoutNotifier] = None,
        preview_length: Optional[int] = None,
    ) -> None:
        self.db = db
        if notifier is None:
            from app.core.app_state import state

            notifier = state.notifier
        self._notifier = notifier
        self._preview_length = preview_length or get_settings().reply_preview_length

    def get_message(self, message_id: UUID) -> Optional[Message]:
        return self.db.query(Message).filter(Message.id == message_id).first()

    def require_message(self, message_id: UUID) -> Message:
        message = self.get_message(message_id)
        if message is None:
            raise NotFoundError("Message not found")
        return message

    def _next_position(self, room_id: UUID) -> tuple[int, datetime]:
        """
        Take the next sequence number for a room and a creation time that
        never goes backwards within it.

        The UPDATE holds the room row lock until commit, so writers to the same
        room are serialized here and nowhere else.
        """
        row = self.db.execute(
            update(Room)
            .where(Room.id == room_id)
            .values(last_seq=Room.last_seq + 1)
            .returning(Room.last_seq, Room.last_message_at)
            .execution_options(synchronize_session=False)
        ).first()
        if row is None:
            raise NotFoundError("Room not found")
        seq, last_message_at = row
        created_at = utcnow()
        last_message_at = as_utc(last_message_at)
        if last_message_at is not None and last_message_at > created_at:
            created_at = last_message_at
        self.db.execute(
            update(Room)
            .where(Room.id == room_id)
            .values(last_message_at=created_at)
            .execution_options(synchronize_session=False)
        )
        return seq, created_at

    def _validate_reply_target(self, room_id: UUID, reply_to: UUID) -> None:
        target = self.get_message(reply_to)
        if target is None or target.room_id != room_id or target.deleted_at is not None:
            raise NotFoundError("Reply target not found in this room")

    @translate_storage_errors
    def append(
        self,
        room_id: UUID,
        sender_id: UUID,
        body: Optional[str],
        reply_to: Optional[UUID] = None,
        attachment_url: Optional[str] = None,
    ) -> Message:
        """
        Append a message to a room and notify the room's subscribers.

        Body must be non-blank unless an attachment is present; attachment-only
        messages get a placeholder body. In direct rooms the sender must be a
        participant and the other participant becomes the receiver.
        """
        body = (body or "").strip()
        if not body and not attachment_url:
            raise InvalidMessageError("Message body is empty")
        if not body:
            body = ATTACHMENT_PLACEHOLDER_BODY

        room = self.db.query(Room).filter(Room.id == room_id).first()
        if room is None:
            raise NotFoundError("Room not found")

        receiver_id = None
        if room.kind == RoomKind.DIRECT.value:
            first, second = room.participants
            if sender_id not in (first, second):
                raise AuthorizationError("Sender is not part of this conversation")
            receiver_id = second if sender_id == first else first

        if reply_to is not None:
            self._validate_reply_target(room_id, reply_to)

        seq, created_at = self._next_position(room_id)
        message = Message(
            room_id=room_id,
            seq=seq,
            sender_id=sender_id,
            receiver_id=receiver_id,
            body=body,
            attachment_url=attachment_url,
            reply_to=reply_to,
            created_at=created_at,
        )
        self.db.add(message)
        self.db.commit()
        self.db.refresh(message)
        logger.debug("Appended message %s to room %s (seq %s)", message.id, room_id, seq)
        self._notifier.publish(room_topic(room_id), HINT_MESSAGES)
        return message

    def get_messages_query(
        self,
        room_id: UUID,
        since_seq: Optional[int] = None,
        include_deleted: bool = False,
    ):
        query = self.db.query(Message).filter(Message.room_id == room_id)
        if not include_deleted:
            query = query.filter(Message.deleted_at.is_(None))
        if since_seq is not None:
            query = query.filter(Message.seq > since_seq)
        return query.order_by(Message.created_at, Message.seq)

    @translate_storage_errors
    def list_messages(
        self,
        room_id: UUID,
        since_seq: Optional[int] = None,
        include_deleted: bool = False,
        limit: Optional[int] = None,
    ) -> List[Message]:
        """Messages of a room ordered by (created_at, seq); deleted ones excluded by default."""
        query = self.get_messages_query(room_id, since_seq, include_deleted)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def count_messages(self, room_id: UUID) -> int:
        """Visible (non-deleted) messages in a room."""
        return self.get_messages_query(room_id).count()

    @translate_storage_errors
    def soft_delete(
        self,
        message_id: UUID,
        requester_id: UUID,
        is_moderator: bool = False,
    ) -> Message:
        """
        Mark a message deleted. Only its sender or a moderator may do this.

        Deleting an already deleted message is a no-op. The row is kept so
        replies pointing at it still resolve (to "no context").
        """
        message = self.require_message(message_id)
        if message.sender_id != requester_id and not is_moderator:
            logger.warning(
                "Denied delete of message %s by %s (sender %s)",
                message_id,
                requester_id,
                message.sender_id,
            )
            raise AuthorizationError("Only the sender or a moderator can delete this message")
        if message.deleted_at is not None:
            return message
        message.deleted_at = utcnow()
        message.deleted_by = requester_id
        self.db.commit()
        self.db.refresh(message)
        logger.info(
            "Message %s deleted by %s%s",
            message_id,
            requester_id,
            " (moderator)" if is_moderator and message.sender_id != requester_id else "",
        )
        self._notifier.publish(room_topic(message.room_id), HINT_MESSAGES)
        return message

    def thread_contexts(
        self, window: Iterable[Message]
    ) -> dict[UUID, Optional[ThreadContext]]:
        """
        Resolve the reply context of every message in the window.

        Targets outside the window are fetched with a single query; deleted or
        missing targets resolve to None.
        """
        window = list(window)
        index = ThreadIndex(window, preview_length=self._preview_length)
        missing = index.missing_targets(window)
        if missing:
            for target in self.db.query(Message).filter(Message.id.in_(missing)).all():
                index.add(target)
        return index.resolve_all(window)
