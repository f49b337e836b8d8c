"""Service for the per-user contact directory."""

from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from app.core.addresses import normalize_address, require_address
from app.exceptions import ConflictError, NotFoundError
from app.models.contact import Contact
from app.schemas.contact import ContactCreate, ContactUpdate


class ContactService:
    """Manages a user's address book. Phone numbers are stored normalized."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_contact(self, user_id: UUID, contact_id: UUID) -> Optional[Contact]:
        """Fetch a contact owned by the user."""
        return (
            self.db.query(Contact)
            .filter(Contact.id == contact_id, Contact.user_id == user_id)
            .first()
        )

    def get_contact_by_phone(
        self, user_id: UUID, phone_number: str
    ) -> Optional[Contact]:
        normalized = normalize_address(phone_number)
        if not normalized:
            return None
        return (
            self.db.query(Contact)
            .filter(Contact.user_id == user_id, Contact.phone_number == normalized)
            .first()
        )

    def get_contacts_query(self, user_id: UUID) -> Query[Contact]:
        """Get a query for the user's contacts (for pagination), ordered by name."""
        return (
            self.db.query(Contact)
            .filter(Contact.user_id == user_id)
            .order_by(Contact.display_name, Contact.id)
        )

    def get_contacts(self, user_id: UUID) -> List[Contact]:
        return self.get_contacts_query(user_id).all()

    def find_first_owner(self, phone_number: str) -> Optional[Contact]:
        """
        Attribute a counterparty number to one user.

        Among every contact with this number, the earliest registered one wins
        (ties broken by id). Deterministic, so replays attribute identically.
        """
        normalized = normalize_address(phone_number)
        if not normalized:
            return None
        return (
            self.db.query(Contact)
            .filter(Contact.phone_number == normalized)
            .order_by(Contact.created_at.asc(), Contact.id.asc())
            .first()
        )

    def create_contact(self, user_id: UUID, data: ContactCreate) -> Contact:
        """Create a contact. Raises ConflictError if the user already has this number."""
        normalized = require_address(data.phone_number)
        if self.get_contact_by_phone(user_id, normalized) is not None:
            raise ConflictError("Contact already exists")
        contact = Contact(
            user_id=user_id,
            phone_number=normalized,
            display_name=data.display_name,
        )
        self.db.add(contact)
        self._commit_unique()
        self.db.refresh(contact)
        return contact

    def update_contact(
        self, user_id: UUID, contact_id: UUID, data: ContactUpdate
    ) -> Contact:
        contact = self.get_contact(user_id, contact_id)
        if contact is None:
            raise NotFoundError("Contact not found")
        if data.phone_number is not None:
            normalized = require_address(data.phone_number)
            existing = self.get_contact_by_phone(user_id, normalized)
            if existing is not None and existing.id != contact.id:
                raise ConflictError("Contact already exists")
            contact.phone_number = normalized
        if data.display_name is not None:
            contact.display_name = data.display_name
        self._commit_unique()
        self.db.refresh(contact)
        return contact

    def delete_contact(self, user_id: UUID, contact_id: UUID) -> None:
        contact = self.get_contact(user_id, contact_id)
        if contact is None:
            raise NotFoundError("Contact not found")
        self.db.delete(contact)
        self.db.commit()

    def _commit_unique(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Contact already exists") from e
