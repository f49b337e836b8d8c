"""Conversation model: the thread between one user and one counterparty."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from app.constants.addresses import ADDRESS_MAX_LENGTH
from app.db import Base
from app.utils.dates import utcnow


class Conversation(Base):
    """
    At most one row per (user_id, counterparty_phone_number).

    last_message_at only moves forward; it is touched by every appended message.
    """

    __tablename__ = "conversations"

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "counterparty_phone_number",
            name="uq_conversations_user_counterparty",
        ),
        Index("ix_conversations_user_last_message", "user_id", "last_message_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    counterparty_phone_number = Column(
        String(ADDRESS_MAX_LENGTH), nullable=False
    )
    counterparty_name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    last_message_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="conversations")
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="[Message.sent_at, Message.id]",
    )
