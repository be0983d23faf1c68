"""Rooms API: resolve rooms, list and send messages."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.auth.identity import CurrentUser, get_current_user
from app.config import get_settings
from app.constants.rooms import Mood, RoomKind
from app.core.notifier import FanoutNotifier
from app.db import get_db
from app.models.message import Message
from app.models.room import Room
from app.routers.utils.dependencies import get_notifier, get_room_by_id
from app.schemas.room import (
    ConversationReadResult,
    DirectRoomRead,
    MessageCreate,
    MessageList,
    MessageRead,
    RoomRead,
    ThreadContextRead,
)
from app.services.message_service import MessageService
from app.services.read_receipt_service import ReadReceiptService
from app.services.room_service import RoomService
from app.utils.rate_limit import check_send_rate_limit, get_redis_client
from app.utils.retry import call_with_retry

rooms_router = APIRouter(prefix="/rooms", tags=["Room"])


def _messages_to_read(
    messages: List[Message],
    message_svc: MessageService,
    receipt_svc: ReadReceiptService,
) -> List[MessageRead]:
    """Attach reply context and read flag to each message."""
    contexts = message_svc.thread_contexts(messages)
    read_ids = receipt_svc.read_message_ids(m.id for m in messages)
    rows = []
    for m in messages:
        row = MessageRead.model_validate(m)
        ctx = contexts.get(m.id)
        row.reply_context = ThreadContextRead.model_validate(ctx) if ctx else None
        row.is_read = m.id in read_ids
        rows.append(row)
    return rows


@rooms_router.get("/general", response_model=RoomRead)
def get_general_room(
    _current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RoomRead:
    """Resolve (creating on first use) the general room."""
    svc = RoomService(db)
    room, _ = call_with_retry(
        lambda: svc.get_or_create_room(RoomKind.GENERAL), on_retry=db.rollback
    )
    return RoomRead.model_validate(room)


@rooms_router.get("/mood/{mood}", response_model=RoomRead)
def get_mood_room(
    mood: Mood,
    _current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RoomRead:
    """Resolve (creating on first use) the room for a mood."""
    svc = RoomService(db)
    room, _ = call_with_retry(
        lambda: svc.get_or_create_room(RoomKind.MOOD, mood), on_retry=db.rollback
    )
    return RoomRead.model_validate(room)


@rooms_router.get("/direct", response_model=List[DirectRoomRead])
def list_direct_rooms(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: FanoutNotifier = Depends(get_notifier),
) -> List[DirectRoomRead]:
    """List the caller's direct conversations with unread counts."""
    receipts = ReadReceiptService(db, notifier=notifier)
    rows = []
    for room in RoomService(db).list_direct_rooms_for(current_user.id):
        first, second = room.participants
        payload = RoomRead.model_validate(room).model_dump()
        rows.append(
            DirectRoomRead(
                **payload,
                peer_id=second if first == current_user.id else first,
                unread_count=receipts.unread_count(room.id, current_user.id),
            )
        )
    return rows


@rooms_router.get("/direct/{peer_id}", response_model=RoomRead)
def get_direct_room(
    peer_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RoomRead:
    """Resolve the direct conversation between the caller and peer_id."""
    svc = RoomService(db)
    room = call_with_retry(
        lambda: svc.resolve_direct(current_user.id, peer_id), on_retry=db.rollback
    )
    return RoomRead.model_validate(room)


@rooms_router.get("/{room_id}/messages", response_model=MessageList)
def list_room_messages(
    since: Optional[int] = Query(None, ge=0, description="Only messages after this seq"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    room: Room = Depends(get_room_by_id),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: FanoutNotifier = Depends(get_notifier),
) -> MessageList:
    """
    List messages in order with reply context and read flags.

    Opening a direct conversation marks its unread messages for the caller.
    """
    message_svc = MessageService(db, notifier=notifier)
    receipt_svc = ReadReceiptService(db, notifier=notifier)
    if room.kind == RoomKind.DIRECT.value:
        receipt_svc.mark_conversation_read(room.id, current_user.id)
    messages = call_with_retry(
        lambda: message_svc.list_messages(room.id, since_seq=since, limit=limit),
        on_retry=db.rollback,
    )
    return MessageList(
        room_id=room.id,
        items=_messages_to_read(messages, message_svc, receipt_svc),
        last_seq=messages[-1].seq if messages else since,
        total=message_svc.count_messages(room.id),
    )


@rooms_router.post("/{room_id}/messages", response_model=MessageRead, status_code=201)
def send_message(
    data: MessageCreate,
    room: Room = Depends(get_room_by_id),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: FanoutNotifier = Depends(get_notifier),
):
    """Append a message to the room and notify its subscribers."""
    settings = get_settings()
    allowed = check_send_rate_limit(
        room.kind,
        str(current_user.id),
        get_redis_client(),
        settings.chat_rate_limit_per_user_per_minute,
    )
    if not allowed:
        return JSONResponse(status_code=429, content={"detail": "Too many messages"})
    message_svc = MessageService(db, notifier=notifier)
    message = message_svc.append(
        room.id,
        current_user.id,
        data.body,
        reply_to=data.reply_to,
        attachment_url=data.attachment_url,
    )
    receipt_svc = ReadReceiptService(db, notifier=notifier)
    return _messages_to_read([message], message_svc, receipt_svc)[0]


@rooms_router.post("/{room_id}/read", response_model=ConversationReadResult)
def mark_room_read(
    room: Room = Depends(get_room_by_id),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: FanoutNotifier = Depends(get_notifier),
) -> ConversationReadResult:
    """Mark every unread message addressed to the caller in this room."""
    marked = ReadReceiptService(db, notifier=notifier).mark_conversation_read(
        room.id, current_user.id
    )
    return ConversationReadResult(room_id=room.id, marked=marked)
