"""Message model: append-only per-room log with soft delete and reply links."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from app.db import Base
from app.models.mixins import SoftDeleteMixin, utcnow


class Message(Base, SoftDeleteMixin):
    """
    One row per message in a room.

    ``seq`` is assigned from the room's counter and gives a total order within
    the room. ``reply_to`` is validated when the message is written and never
    afterwards, so it may point at a message deleted later.
    """

    __tablename__ = "chat_messages"

    __table_args__ = (
        UniqueConstraint("room_id", "seq", name="uq_chat_messages_room_seq"),
        Index("ix_chat_messages_room_created_seq", "room_id", "created_at", "seq"),
        Index("ix_chat_messages_receiver", "receiver_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    room_id = Column(
        Uuid, ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False
    )
    seq = Column(BigInteger, nullable=False)
    sender_id = Column(Uuid, nullable=False)
    receiver_id = Column(Uuid, nullable=True)  # direct rooms only
    body = Column(Text, nullable=False)
    attachment_url = Column(String(1024), nullable=True)
    reply_to = Column(
        Uuid, ForeignKey("chat_messages.id", ondelete="SET NULL"), nullable=True
    )
    deleted_by = Column(Uuid, nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
