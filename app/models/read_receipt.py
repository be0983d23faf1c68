"""ReadReceipt model: at most one row per (message, reader)."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint, Uuid

from app.db import Base
from app.models.mixins import utcnow


class ReadReceipt(Base):
    __tablename__ = "read_receipts"

    __table_args__ = (
        UniqueConstraint("message_id", "reader_id", name="uq_read_receipts_message_reader"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    message_id = Column(
        Uuid, ForeignKey("chat_messages.id", ondelete="CASCADE"), nullable=False
    )
    reader_id = Column(Uuid, nullable=False)
    read_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
