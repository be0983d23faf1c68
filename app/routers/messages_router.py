"""Messages API: delete, mark read, report; moderator report review."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.auth.identity import CurrentUser, get_current_user, require_moderator
from app.core.notifier import FanoutNotifier
from app.db import get_db
from app.models.message import Message
from app.routers.utils.dependencies import get_message_by_id, get_notifier
from app.schemas.report import ReportCreate, ReportedMessageRow, ReportRead
from app.schemas.room import ReadReceiptRead
from app.services.message_service import MessageService
from app.services.read_receipt_service import ReadReceiptService
from app.services.report_service import ReportService

messages_router = APIRouter(prefix="/messages", tags=["Message"])
reports_router = APIRouter(prefix="/reports", tags=["Moderation"])


@messages_router.delete("/{message_id}", status_code=204)
def delete_message(
    message: Message = Depends(get_message_by_id),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: FanoutNotifier = Depends(get_notifier),
) -> Response:
    """Soft delete a message. Allowed for its sender and for moderators."""
    MessageService(db, notifier=notifier).soft_delete(
        message.id, current_user.id, is_moderator=current_user.is_moderator
    )
    return Response(status_code=204)


@messages_router.post("/{message_id}/read", response_model=ReadReceiptRead)
def mark_message_read(
    message: Message = Depends(get_message_by_id),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: FanoutNotifier = Depends(get_notifier),
) -> ReadReceiptRead:
    """Record that the caller has read the message (idempotent)."""
    receipt = ReadReceiptService(db, notifier=notifier).mark_read(
        message.id, current_user.id
    )
    return ReadReceiptRead.model_validate(receipt)


@messages_router.post(
    "/{message_id}/reports", response_model=ReportRead, status_code=201
)
def report_message(
    data: ReportCreate,
    message: Message = Depends(get_message_by_id),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ReportRead:
    """Flag a message for moderator review."""
    report = ReportService(db).report(message.id, current_user.id, data.reason)
    return ReportRead.model_validate(report)


@reports_router.get("", response_model=Page[ReportRead])
def list_reports(
    params: Params = Depends(),
    message_id: Optional[UUID] = Query(None),
    _moderator: CurrentUser = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> Page[ReportRead]:
    """List reports, newest first. Moderators only."""
    return paginate(ReportService(db).get_reports_query(message_id), params=params)


@reports_router.get("/top", response_model=List[ReportedMessageRow])
def list_most_reported(
    limit: int = Query(20, ge=1, le=100),
    _moderator: CurrentUser = Depends(require_moderator),
    db: Session = Depends(get_db),
) -> List[ReportedMessageRow]:
    """Messages ordered by report volume. Moderators only."""
    return [
        ReportedMessageRow(message_id=message_id, reports=count)
        for message_id, count in ReportService(db).most_reported(limit)
    ]
