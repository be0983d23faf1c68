"""Pydantic schemas for contacts."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ContactCreate(BaseModel):
    contact_id: UUID


class ContactRead(BaseModel):
    id: UUID
    user_id: UUID
    contact_id: UUID
    created_at: datetime

    model_config = {"from_attributes": True}
