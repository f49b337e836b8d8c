"""
Service bridging uploaded media to object storage and outbound sends.

Ownership is enforced on every lookup; an attachment that belongs to
someone else is reported exactly like a missing one.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Query, Session

from app.adapters.object_storage import BaseObjectStorage
from app.config import get_settings
from app.exceptions import NotFoundError, TransportError, ValidationError
from app.models.media_attachment import MediaAttachment

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = frozenset({"image/jpeg", "image/jpg", "image/png", "image/webp"})


class MediaService:
    """Upload, resolve, download and delete media attachments."""

    def __init__(
        self,
        db: Session,
        storage: BaseObjectStorage,
        max_bytes: Optional[int] = None,
    ) -> None:
        self.db = db
        self.storage = storage
        self.max_bytes = max_bytes or get_settings().media_max_bytes

    def validate_upload(self, data: bytes, content_type: Optional[str]) -> None:
        if not data:
            raise ValidationError("File is empty")
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"File exceeds the {self.max_bytes // (1024 * 1024)} MB limit"
            )
        if (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Unsupported file type")

    def upload(
        self,
        user_id: UUID,
        file_name: str,
        data: bytes,
        content_type: Optional[str],
    ) -> MediaAttachment:
        """
        Validate and store an image, then record its metadata.

        Raises:
            ValidationError: empty, too large, unsupported type or undecodable.
            TransportError: object storage failed; nothing is recorded.
        """
        self.validate_upload(data, content_type)
        stored = self.storage.upload(str(user_id), file_name, data)
        attachment = MediaAttachment(
            user_id=user_id,
            file_name=file_name or "upload",
            storage_url=stored.storage_url,
            thumbnail_url=stored.thumbnail_url,
            content_type=stored.content_type,
            size_bytes=stored.size_bytes,
            width=stored.width,
            height=stored.height,
        )
        self.db.add(attachment)
        self.db.commit()
        self.db.refresh(attachment)
        logger.info("Media %s uploaded by user %s", attachment.id, user_id)
        return attachment

    def get_media(self, user_id: UUID, media_id: UUID) -> Optional[MediaAttachment]:
        return (
            self.db.query(MediaAttachment)
            .filter(MediaAttachment.id == media_id, MediaAttachment.user_id == user_id)
            .first()
        )

    def resolve_for_send(self, user_id: UUID, media_id: UUID) -> MediaAttachment:
        """Resolve a media reference for an outbound send. Foreign or missing is NotFoundError."""
        attachment = self.get_media(user_id, media_id)
        if attachment is None:
            raise NotFoundError("Media not found")
        return attachment

    def get_media_query(self, user_id: UUID) -> Query[MediaAttachment]:
        """Get a query for the user's media, newest first (for pagination)."""
        return (
            self.db.query(MediaAttachment)
            .filter(MediaAttachment.user_id == user_id)
            .order_by(MediaAttachment.uploaded_at.desc(), MediaAttachment.id)
        )

    def download(self, user_id: UUID, media_id: UUID) -> Tuple[bytes, str, str]:
        """Return (data, content_type, file_name) for an owned attachment."""
        attachment = self.resolve_for_send(user_id, media_id)
        data = self.storage.download(attachment.storage_url)
        return data, attachment.content_type, attachment.file_name

    def delete(self, user_id: UUID, media_id: UUID) -> None:
        """
        Delete the stored object, its thumbnail, then the metadata row.

        If storage refuses, the row is kept and TransportError is raised, so
        the attachment is never orphaned in the bucket. Messages that used it
        keep their own media_url snapshot.
        """
        attachment = self.resolve_for_send(user_id, media_id)
        if not self.storage.delete(attachment.storage_url):
            logger.warning(
                "Keeping media %s: storage refused to delete %s",
                attachment.id,
                attachment.storage_url,
            )
            raise TransportError("Media could not be deleted from storage")
        if attachment.thumbnail_url and not self.storage.delete(
            attachment.thumbnail_url
        ):
            logger.warning(
                "Thumbnail %s of media %s could not be deleted",
                attachment.thumbnail_url,
                attachment.id,
            )
        self.db.delete(attachment)
        self.db.commit()
        logger.info("Media %s deleted by user %s", media_id, user_id)
