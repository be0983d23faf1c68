"""Room model: one row per logical room key (mood, general, or direct pair)."""

from __future__ import annotations

import uuid

from sqlalchemy import BigInteger, Column, DateTime, String, UniqueConstraint, Uuid

from app.db import Base
from app.models.mixins import TimestampMixin


class Room(Base, TimestampMixin):
    """Identified by (kind, key). The unique constraint backs RoomService's get-or-create."""

    __tablename__ = "rooms"

    __table_args__ = (UniqueConstraint("kind", "key", name="uq_rooms_kind_key"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    kind = Column(String(16), nullable=False)  # 'mood' | 'general' | 'direct'
    key = Column(String(128), nullable=False)
    last_seq = Column(BigInteger, nullable=False, default=0)
    last_message_at = Column(DateTime(timezone=True), nullable=True)

    @property
    def participants(self) -> tuple[uuid.UUID, uuid.UUID] | None:
        """The two user ids of a direct room, in canonical order."""
        if self.kind != "direct":
            return None
        first, second = self.key.split(":", 1)
        return uuid.UUID(first), uuid.UUID(second)
