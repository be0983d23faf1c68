"""Pydantic schemas for Room and Message."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

# -----------------------------------------------------------------------------
# Room schemas
# -----------------------------------------------------------------------------


class RoomRead(BaseModel):
    """Room for API responses."""

    id: UUID
    kind: str
    key: str
    last_message_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DirectRoomRead(RoomRead):
    peer_id: UUID
    unread_count: int = 0


# -----------------------------------------------------------------------------
# Message schemas
# -----------------------------------------------------------------------------


class MessageCreate(BaseModel):
    """Schema for sending a message. Body may be empty only with an attachment."""

    body: Optional[str] = Field(default=None, max_length=4000)
    reply_to: Optional[UUID] = None
    attachment_url: Optional[str] = Field(default=None, max_length=1024)

    @model_validator(mode="after")
    def body_or_attachment(self):
        if not (self.body or "").strip() and not self.attachment_url:
            raise ValueError("Either body or attachment_url is required")
        return self


class ThreadContextRead(BaseModel):
    message_id: UUID
    sender_id: UUID
    preview: str

    model_config = {"from_attributes": True}


class MessageRead(BaseModel):
    """Message for API responses, with its resolved reply context."""

    id: UUID
    room_id: UUID
    seq: int
    sender_id: UUID
    receiver_id: Optional[UUID] = None
    body: str
    attachment_url: Optional[str] = None
    reply_to: Optional[UUID] = None
    created_at: datetime
    deleted_at: Optional[datetime] = None
    reply_context: Optional[ThreadContextRead] = None
    is_read: bool = False

    model_config = {"from_attributes": True}


class MessageList(BaseModel):
    room_id: UUID
    items: list[MessageRead]
    last_seq: Optional[int] = None
    total: int = 0


# -----------------------------------------------------------------------------
# Read receipts
# -----------------------------------------------------------------------------


class ReadReceiptRead(BaseModel):
    message_id: UUID
    reader_id: UUID
    read_at: datetime

    model_config = {"from_attributes": True}


class ConversationReadResult(BaseModel):
    room_id: UUID
    marked: list[UUID]
