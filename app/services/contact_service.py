"""Contacts: one row per (user, contact), added by the user who saves it."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.exceptions import InvalidContactError
from app.infra.logging_config import get_logger
from app.models.contact import Contact
from app.utils.db.errors import translate_storage_errors

logger = get_logger("contacts")


class ContactService:
    def __init__(self, db: Session) -> None:
        self.db = db

    def get_contact(self, user_id: UUID, contact_id: UUID) -> Optional[Contact]:
        return (
            self.db.query(Contact)
            .filter(Contact.user_id == user_id, Contact.contact_id == contact_id)
            .first()
        )

    @translate_storage_errors
    def add(self, user_id: UUID, contact_id: UUID) -> tuple[Contact, bool]:
        """
        Save contact_id in user_id's contacts. Returns (contact, created).

        Adding an existing contact returns the saved row, also when a
        concurrent request inserted it first.
        """
        if user_id == contact_id:
            raise InvalidContactError("You cannot add yourself as a contact")
        existing = self.get_contact(user_id, contact_id)
        if existing is not None:
            return existing, False
        contact = Contact(user_id=user_id, contact_id=contact_id)
        try:
            with self.db.begin_nested():
                self.db.add(contact)
        except IntegrityError:
            existing = self.get_contact(user_id, contact_id)
            if existing is None:
                raise
            return existing, False
        self.db.commit()
        self.db.refresh(contact)
        logger.info("User %s added contact %s", user_id, contact_id)
        return contact, True

    def list(self, user_id: UUID) -> List[Contact]:
        """The user's contacts, oldest first."""
        return (
            self.db.query(Contact)
            .filter(Contact.user_id == user_id)
            .order_by(Contact.created_at, Contact.id)
            .all()
        )
