"""Message model: one row per inbound or outbound message in a conversation."""

from __future__ import annotations

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.db import Base
from app.utils.dates import utcnow


class Message(Base):
    """
    Append-only. After insert only status, status_updated_at and
    provider_message_id change.

    The integer id is monotonic and breaks sent_at ties inside a conversation.
    media_url/media_type are a snapshot taken at send time, so the message
    still renders if its attachment is later deleted.
    """

    __tablename__ = "messages"

    __table_args__ = (
        Index("ix_messages_conversation_sent", "conversation_id", "sent_at", "id"),
        Index("ix_messages_status_sent", "status", "sent_at"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    conversation_id = Column(
        Uuid,
        ForeignKey("conversations.id", ondelete="CASCADE"),
        nullable=False,
    )
    content = Column(Text, nullable=False, default="")
    direction = Column(String(16), nullable=False)  # 'inbound' | 'outbound'
    status = Column(String(16), nullable=False)
    sent_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    status_updated_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    media_attachment_id = Column(
        Uuid,
        ForeignKey("media_attachments.id", ondelete="SET NULL"),
        nullable=True,
    )
    media_url = Column(String(1024), nullable=True)
    media_type = Column(String(100), nullable=True)
    # Carrier-assigned id (Twilio MessageSid); unique so replayed webhooks are caught.
    provider_message_id = Column(String(64), nullable=True, unique=True)

    conversation = relationship("Conversation", back_populates="messages")
    media_attachment = relationship("MediaAttachment", back_populates="messages")
