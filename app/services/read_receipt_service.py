"""Read receipts: one per (message, reader), written only by the recipient."""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.notifier import HINT_RECEIPTS, FanoutNotifier, room_topic
from app.exceptions import AuthorizationError, NotFoundError
from app.infra.logging_config import get_logger
from app.models.message import Message
from app.models.read_receipt import ReadReceipt
from app.utils.db.errors import translate_storage_errors

logger = get_logger("read_receipts")


def can_mark_read(message: Message, reader_id: UUID) -> bool:
    """Direct messages: only the receiver. Group rooms: anyone but the sender."""
    if message.sender_id == reader_id:
        return False
    if message.receiver_id is not None:
        return message.receiver_id == reader_id
    return True


class ReadReceiptService:
    def __init__(self, db: Session, notifier: Optional[FanoutNotifier] = None) -> None:
        self.db = db
        if notifier is None:
            from app.core.app_state import state

            notifier = state.notifier
        self._notifier = notifier

    def get_receipt(self, message_id: UUID, reader_id: UUID) -> Optional[ReadReceipt]:
        return (
            self.db.query(ReadReceipt)
            .filter(
                ReadReceipt.message_id == message_id,
                ReadReceipt.reader_id == reader_id,
            )
            .first()
        )

    def _upsert(self, message_id: UUID, reader_id: UUID) -> tuple[ReadReceipt, bool]:
        """Insert the receipt in a savepoint; a concurrent duplicate keeps the existing row."""
        existing = self.get_receipt(message_id, reader_id)
        if existing is not None:
            return existing, False
        receipt = ReadReceipt(message_id=message_id, reader_id=reader_id)
        try:
            with self.db.begin_nested():
                self.db.add(receipt)
        except IntegrityError:
            existing = self.get_receipt(message_id, reader_id)
            if existing is None:
                raise
            return existing, False
        return receipt, True

    @translate_storage_errors
    def mark_read(self, message_id: UUID, reader_id: UUID) -> ReadReceipt:
        """Idempotent: the first read_at is kept on repeated calls."""
        message = self.db.query(Message).filter(Message.id == message_id).first()
        if message is None:
            raise NotFoundError("Message not found")
        if not can_mark_read(message, reader_id):
            raise AuthorizationError("Only the recipient can mark this message read")
        receipt, created = self._upsert(message_id, reader_id)
        self.db.commit()
        if created:
            self._notifier.publish(room_topic(message.room_id), HINT_RECEIPTS)
        return receipt

    def is_read(self, message_id: UUID) -> bool:
        return (
            self.db.query(ReadReceipt.id)
            .filter(ReadReceipt.message_id == message_id)
            .first()
            is not None
        )

    def read_message_ids(self, message_ids: Iterable[UUID]) -> set[UUID]:
        """Subset of message_ids with at least one receipt."""
        ids = list(message_ids)
        if not ids:
            return set()
        rows = (
            self.db.query(ReadReceipt.message_id)
            .filter(ReadReceipt.message_id.in_(ids))
            .distinct()
            .all()
        )
        return {row[0] for row in rows}

    def _unread_for_reader_query(self, room_id: UUID, reader_id: UUID):
        already_read = select(ReadReceipt.message_id).where(
            ReadReceipt.reader_id == reader_id
        )
        return (
            self.db.query(Message)
            .filter(
                Message.room_id == room_id,
                Message.deleted_at.is_(None),
                Message.sender_id != reader_id,
                (Message.receiver_id == reader_id) | (Message.receiver_id.is_(None)),
                Message.id.not_in(already_read),
            )
            .order_by(Message.created_at, Message.seq)
        )

    def unread_count(self, room_id: UUID, reader_id: UUID) -> int:
        return self._unread_for_reader_query(room_id, reader_id).count()

    @translate_storage_errors
    def mark_conversation_read(self, room_id: UUID, reader_id: UUID) -> List[UUID]:
        """
        Mark every unread message addressed to reader in the room.

        Each receipt is written in its own savepoint: a failed write is logged
        and skipped, and does not undo the others. Returns the ids marked.
        """
        marked: List[UUID] = []
        for message in self._unread_for_reader_query(room_id, reader_id).all():
            try:
                _, created = self._upsert(message.id, reader_id)
            except SQLAlchemyError as e:
                logger.warning(
                    "Could not mark message %s read for %s: %s", message.id, reader_id, e
                )
                continue
            if created:
                marked.append(message.id)
        self.db.commit()
        if marked:
            self._notifier.publish(room_topic(room_id), HINT_RECEIPTS)
        return marked
