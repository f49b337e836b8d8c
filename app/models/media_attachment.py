"""MediaAttachment model: uploaded media, reusable across messages."""

from __future__ import annotations

import uuid

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from app.db import Base
from app.utils.dates import utcnow


class MediaAttachment(Base):
    """Immutable once created; outlives the messages that reference it."""

    __tablename__ = "media_attachments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    file_name = Column(String(255), nullable=False)
    storage_url = Column(String(1024), nullable=False)
    thumbnail_url = Column(String(1024), nullable=True)
    content_type = Column(String(100), nullable=False)
    size_bytes = Column(BigInteger, nullable=False)
    width = Column(Integer, nullable=True)
    height = Column(Integer, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    user = relationship("User", back_populates="media_attachments")
    messages = relationship("Message", back_populates="media_attachment")
