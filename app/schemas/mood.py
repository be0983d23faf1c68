"""Pydantic schemas for mood check-ins."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from app.constants.rooms import Mood


class MoodCheckinCreate(BaseModel):
    mood: Mood


class MoodCheckinRead(BaseModel):
    id: UUID
    user_id: UUID
    mood: Mood
    created_at: datetime

    model_config = {"from_attributes": True}
