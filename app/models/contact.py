"""Contact model: per-user address book entry."""

from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.constants.addresses import ADDRESS_MAX_LENGTH
from app.db import Base
from app.models.mixins import TimestampMixin


class Contact(Base, TimestampMixin):
    """One entry per counterparty per user. phone_number is always normalized."""

    __tablename__ = "contacts"

    __table_args__ = (
        UniqueConstraint("user_id", "phone_number", name="uq_contacts_user_phone"),
        # Inbound attribution looks up by number across all users.
        Index("ix_contacts_phone_created", "phone_number", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    phone_number = Column(String(ADDRESS_MAX_LENGTH), nullable=False)
    display_name = Column(String(100), nullable=False)

    user = relationship("User", back_populates="contacts")
