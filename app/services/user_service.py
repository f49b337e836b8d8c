"""Service for local user accounts."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.adapters.object_storage import BaseObjectStorage
from app.core.addresses import require_address
from app.exceptions import ConflictError
from app.models.user import User
from app.schemas.user import UserCreate
from app.services.media_service import MediaService


class UserService:
    """Create, fetch and delete users. Deleting cascades to everything the user owns."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def get_user(self, user_id: UUID) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, data: UserCreate) -> User:
        """Create a user. Raises ConflictError if the username is taken."""
        if self.get_user_by_username(data.username) is not None:
            raise ConflictError("Username is already taken")
        user = User(
            username=data.username,
            phone_number=require_address(data.phone_number),
            display_name=data.display_name,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def delete_user(
        self, user_id: UUID, storage: Optional[BaseObjectStorage] = None
    ) -> bool:
        """
        Hard delete a user with its contacts, conversations, messages and media.

        With `storage`, each attachment goes through MediaService.delete first,
        so stored objects are removed before their rows. If storage refuses,
        TransportError propagates and the user is kept.
        """
        user = self.get_user(user_id)
        if user is None:
            return False
        if storage is not None:
            media = MediaService(self.db, storage)
            for attachment in list(user.media_attachments):
                media.delete(user_id, attachment.id)
        self.db.delete(user)
        self.db.commit()
        return True
