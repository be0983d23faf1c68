"""Pydantic schemas for message reports."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ReportCreate(BaseModel):
    reason: Optional[str] = Field(default=None, max_length=500)


class ReportRead(BaseModel):
    id: UUID
    message_id: UUID
    reporter_id: UUID
    reason: str
    created_at: datetime

    model_config = {"from_attributes": True}


class ReportedMessageRow(BaseModel):
    message_id: UUID
    reports: int
