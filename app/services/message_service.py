"""
Service for message rows and the delivery-status state machine.

Messages are append-only: after insert only status, status_updated_at and
provider_message_id change. Methods here stage changes on the session;
the calling command owns the commit so a status change and the
conversation touch land in one transaction.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.config import get_settings
from app.constants.messages import MessageDirection, MessageStatus, can_transition
from app.models.conversation import Conversation
from app.models.message import Message
from app.schemas.message import MessageRead
from app.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


class MessageService:
    """Create, read and transition messages."""

    def __init__(self, db: Session, stale_after_seconds: Optional[int] = None) -> None:
        self.db = db
        self.stale_after = timedelta(
            seconds=stale_after_seconds or get_settings().sending_stale_after_seconds
        )

    def create_message(
        self,
        conversation: Conversation,
        direction: MessageDirection,
        status: MessageStatus,
        content: str = "",
        media_url: Optional[str] = None,
        media_type: Optional[str] = None,
        media_attachment_id: Optional[UUID] = None,
        provider_message_id: Optional[str] = None,
        sent_at: Optional[datetime] = None,
    ) -> Message:
        """Stage a new message and flush it so its id is assigned."""
        now = sent_at or utcnow()
        message = Message(
            conversation_id=conversation.id,
            content=content or "",
            direction=direction.value,
            status=status.value,
            sent_at=now,
            status_updated_at=now,
            media_url=media_url,
            media_type=media_type,
            media_attachment_id=media_attachment_id,
            provider_message_id=provider_message_id,
        )
        self.db.add(message)
        self.db.flush()
        return message

    def transition(
        self,
        message: Message,
        target: MessageStatus,
        at: Optional[datetime] = None,
    ) -> bool:
        """
        Move a message to `target` if the state machine allows it.

        Disallowed moves (a stale or reordered callback) are ignored and logged.
        """
        if not can_transition(message.status, target):
            logger.info(
                "Ignoring status change %s -> %s for message %s",
                message.status,
                target,
                message.id,
            )
            return False
        message.status = target.value
        message.status_updated_at = at or utcnow()
        return True

    def effective_status(
        self, message: Message, now: Optional[datetime] = None
    ) -> MessageStatus:
        """A send stuck in `sending` past the staleness threshold reads as `failed`."""
        status = MessageStatus(message.status)
        if status is MessageStatus.SENDING:
            now = now or utcnow()
            if as_utc(message.sent_at) < now - self.stale_after:
                return MessageStatus.FAILED
        return status

    def to_read(self, message: Message, now: Optional[datetime] = None) -> MessageRead:
        return MessageRead(
            id=message.id,
            conversation_id=message.conversation_id,
            content=message.content,
            direction=MessageDirection(message.direction),
            sent_at=message.sent_at,
            status=self.effective_status(message, now),
            media_url=message.media_url,
            media_type=message.media_type,
        )

    def get_message(self, message_id: int) -> Optional[Message]:
        return self.db.query(Message).filter(Message.id == message_id).first()

    def get_message_for_user(
        self, user_id: UUID, message_id: int
    ) -> Optional[Message]:
        """Fetch a message only if it belongs to one of the user's conversations."""
        return (
            self.db.query(Message)
            .join(Conversation, Message.conversation_id == Conversation.id)
            .filter(Message.id == message_id, Conversation.user_id == user_id)
            .first()
        )

    def get_by_provider_id(self, provider_message_id: str) -> Optional[Message]:
        return (
            self.db.query(Message)
            .filter(Message.provider_message_id == provider_message_id)
            .first()
        )

    def list_for_conversation(
        self, user_id: UUID, conversation_id: UUID
    ) -> List[Message]:
        """Messages in send order. Empty when the conversation is not the user's."""
        return (
            self.db.query(Message)
            .join(Conversation, Message.conversation_id == Conversation.id)
            .filter(
                Message.conversation_id == conversation_id,
                Conversation.user_id == user_id,
            )
            .order_by(Message.sent_at.asc(), Message.id.asc())
            .all()
        )

    def latest_in_conversation(self, conversation_id: UUID) -> Optional[Message]:
        return (
            self.db.query(Message)
            .filter(Message.conversation_id == conversation_id)
            .order_by(Message.sent_at.desc(), Message.id.desc())
            .first()
        )

    def unread_inbound(self, conversation_id: UUID) -> List[Message]:
        return (
            self.db.query(Message)
            .filter(
                Message.conversation_id == conversation_id,
                Message.direction == MessageDirection.INBOUND.value,
                Message.status != MessageStatus.READ.value,
            )
            .order_by(Message.sent_at.asc(), Message.id.asc())
            .all()
        )

    def reconcile_stale_sending(self, now: Optional[datetime] = None) -> List[Message]:
        """Persist `failed` for sends left in `sending` past the staleness threshold."""
        now = now or utcnow()
        cutoff = now - self.stale_after
        stale = (
            self.db.query(Message)
            .filter(
                Message.status == MessageStatus.SENDING.value,
                Message.sent_at < cutoff,
            )
            .all()
        )
        for message in stale:
            self.transition(message, MessageStatus.FAILED, at=now)
        return stale
