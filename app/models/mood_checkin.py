"""MoodCheckin model: one row per self-reported mood. Latest row per day wins."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, DateTime, Index, String, Uuid

from app.db import Base
from app.models.mixins import utcnow


class MoodCheckin(Base):
    __tablename__ = "mood_checkins"

    __table_args__ = (
        Index("ix_mood_checkins_created_user", "created_at", "user_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, nullable=False)
    mood = Column(String(32), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
