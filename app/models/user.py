"""User model: owner of contacts, conversations, and media."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, String, Uuid
from sqlalchemy.orm import relationship

from app.constants.addresses import ADDRESS_MAX_LENGTH
from app.db import Base
from app.models.mixins import TimestampMixin


class User(Base, TimestampMixin):
    """Local account. Deleting a user removes everything it owns."""

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(50), unique=True, nullable=False)
    phone_number = Column(String(ADDRESS_MAX_LENGTH), nullable=False)
    display_name = Column(String(100), nullable=True)

    contacts = relationship(
        "Contact", back_populates="user", cascade="all, delete-orphan"
    )
    conversations = relationship(
        "Conversation", back_populates="user", cascade="all, delete-orphan"
    )
    media_attachments = relationship(
        "MediaAttachment", back_populates="user", cascade="all, delete-orphan"
    )
