"""Contacts API: CRUD for the user's address book."""

from uuid import UUID

from fastapi import APIRouter, Depends
from fastapi_pagination import Page, Params
from fastapi_pagination.ext.sqlalchemy import paginate
from sqlalchemy.orm import Session

from app.db import get_db
from app.exceptions import NotFoundError
from app.infra.logging_config import get_logger
from app.models.user import User
from app.routers.utils.dependencies import get_current_user
from app.schemas.contact import ContactCreate, ContactRead, ContactUpdate
from app.services.contact_service import ContactService

logger = get_logger("contacts")

router = APIRouter(
    prefix="/contacts",
    tags=["contacts"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=Page[ContactRead])
def list_contacts(
    params: Params = Depends(),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Page[ContactRead]:
    """List the user's contacts by name, with pagination."""
    query = ContactService(db).get_contacts_query(current_user.id)
    return paginate(query, params=params)


@router.post("", response_model=ContactRead, status_code=201)
def create_contact(
    data: ContactCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContactRead:
    """Create a contact. The phone number is stored normalized."""
    contact = ContactService(db).create_contact(current_user.id, data)
    logger.info("User %s added contact %s", current_user.id, contact.id)
    return contact


@router.get("/{contact_id}", response_model=ContactRead)
def get_contact(
    contact_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContactRead:
    contact = ContactService(db).get_contact(current_user.id, contact_id)
    if contact is None:
        raise NotFoundError("Contact not found")
    return contact


@router.put("/{contact_id}", response_model=ContactRead)
def update_contact(
    contact_id: UUID,
    data: ContactUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ContactRead:
    """Update a contact's name and/or number."""
    return ContactService(db).update_contact(current_user.id, contact_id, data)


@router.delete("/{contact_id}", status_code=204)
def delete_contact(
    contact_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    """Delete a contact. Existing conversations are kept."""
    ContactService(db).delete_contact(current_user.id, contact_id)
