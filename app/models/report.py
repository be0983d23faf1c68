"""
Report model for flagged messages.

Append-only: reports are never updated and the same reporter may report a
message more than once. Reviewed out of band by moderators.
"""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Uuid

from app.db import Base
from app.models.mixins import utcnow


class Report(Base):
    __tablename__ = "reported_messages"

    __table_args__ = (Index("ix_reported_messages_message", "message_id"),)

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    message_id = Column(
        Uuid, ForeignKey("chat_messages.id", ondelete="CASCADE"), nullable=False
    )
    reporter_id = Column(Uuid, nullable=False)
    reason = Column(String(500), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
