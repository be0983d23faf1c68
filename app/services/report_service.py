"""
Service for message reports (moderation log).

Reports are immutable; only insert. Duplicates are kept because report volume
is a review signal. Nothing is deleted automatically.
"""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Query, Session

from app.constants.rooms import DEFAULT_REPORT_REASON
from app.exceptions import AuthorizationError, NotFoundError
from app.infra.logging_config import get_logger
from app.models.message import Message
from app.models.report import Report
from app.utils.db.errors import translate_storage_errors

logger = get_logger("moderation")


class ReportService:
    """Create and read reports. No update/delete."""

    def __init__(self, db: Session) -> None:
        self.db = db

    @translate_storage_errors
    def report(
        self,
        message_id: UUID,
        reporter_id: UUID,
        reason: Optional[str] = None,
    ) -> Report:
        """Record a report against someone else's message."""
        message = self.db.query(Message).filter(Message.id == message_id).first()
        if message is None:
            raise NotFoundError("Message not found")
        if message.sender_id == reporter_id:
            logger.warning("User %s tried to report own message %s", reporter_id, message_id)
            raise AuthorizationError("You cannot report your own message")
        if message.receiver_id is not None and message.receiver_id != reporter_id:
            raise AuthorizationError("Not a participant of this conversation")
        report = Report(
            message_id=message_id,
            reporter_id=reporter_id,
            reason=(reason or "").strip() or DEFAULT_REPORT_REASON,
        )
        self.db.add(report)
        self.db.commit()
        self.db.refresh(report)
        logger.info("Message %s reported by %s", message_id, reporter_id)
        return report

    def get_report(self, report_id: UUID) -> Optional[Report]:
        return self.db.query(Report).filter(Report.id == report_id).first()

    def report_count(self, message_id: UUID) -> int:
        return self.db.query(Report).filter(Report.message_id == message_id).count()

    def get_reports_query(self, message_id: Optional[UUID] = None) -> Query[Report]:
        """Query for reports, newest first (for pagination)."""
        q = self.db.query(Report).order_by(Report.created_at.desc())
        if message_id is not None:
            q = q.filter(Report.message_id == message_id)
        return q

    def list_reports(
        self,
        message_id: Optional[UUID] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Report]:
        return self.get_reports_query(message_id).offset(skip).limit(limit).all()

    def most_reported(self, limit: int = 20) -> List[tuple[UUID, int]]:
        """(message_id, report count) pairs, highest count first, for the review queue."""
        rows = (
            self.db.query(Report.message_id, func.count(Report.id).label("reports"))
            .group_by(Report.message_id)
            .order_by(func.count(Report.id).desc())
            .limit(limit)
            .all()
        )
        return [(row[0], row[1]) for row in rows]
