"""Contact model: a user's saved peer for direct conversations."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Index, UniqueConstraint, Uuid

from app.db import Base
from app.models.mixins import utcnow


class Contact(Base):
    __tablename__ = "contacts"

    __table_args__ = (
        UniqueConstraint("user_id", "contact_id", name="uq_contacts_user_contact"),
        Index("ix_contacts_user_created", "user_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False)
    contact_id = Column(Uuid, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
