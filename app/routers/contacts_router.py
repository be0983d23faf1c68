"""Contacts API: save peers for direct conversations and list them."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.auth.identity import CurrentUser, get_current_user
from app.db import get_db
from app.schemas.contact import ContactCreate, ContactRead
from app.services.contact_service import ContactService

contacts_router = APIRouter(prefix="/contacts", tags=["Contact"])


@contacts_router.post("", response_model=ContactRead, status_code=201)
def add_contact(
    data: ContactCreate,
    response: Response,
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContactRead:
    """Add a contact. Adding an existing one returns it with 200."""
    contact, created = ContactService(db).add(current_user.id, data.contact_id)
    if not created:
        response.status_code = 200
    return ContactRead.model_validate(contact)


@contacts_router.get("", response_model=List[ContactRead])
def list_contacts(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> List[ContactRead]:
    return [ContactRead.model_validate(c) for c in ContactService(db).list(current_user.id)]
