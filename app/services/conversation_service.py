"""
Service for conversations: resolution, listing and ordering.

A conversation is the thread between one user and one counterparty number.
Every lookup goes through `normalize_address`, so `whatsapp:+1 555` and
`+1555` resolve to the same row.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.constants.messages import MessageDirection, MessageStatus
from app.core.addresses import require_address
from app.core.locks import conversation_locks
from app.exceptions import NotFoundError, StorageError
from app.models.conversation import Conversation
from app.models.message import Message
from app.schemas.conversation import ConversationSummary
from app.services.message_service import MessageService
from app.utils.dates import as_utc, utcnow

logger = logging.getLogger(__name__)


class ConversationService:
    """Resolve, list and delete conversations for a user."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _find(self, user_id: UUID, normalized: str) -> Optional[Conversation]:
        return (
            self.db.query(Conversation)
            .filter(
                Conversation.user_id == user_id,
                Conversation.counterparty_phone_number == normalized,
            )
            .first()
        )

    def get_or_create(
        self,
        user_id: UUID,
        counterparty_address: str,
        display_name_hint: Optional[str] = None,
    ) -> Tuple[Conversation, bool]:
        """
        Return the user's conversation with a counterparty, creating it if needed.

        The check-then-insert runs under a per-(user, number) lock so concurrent
        callers in this process create exactly one row. The unique constraint
        covers other processes: the loser of an insert race re-reads the winner.

        Returns:
            (conversation, created)

        Raises:
            ValidationError: the address normalizes to nothing.
            StorageError: the row could neither be inserted nor read back.
        """
        normalized = require_address(counterparty_address)
        with conversation_locks.hold((user_id, normalized)):
            conversation = self._find(user_id, normalized)
            if conversation is not None:
                return conversation, False

            now = utcnow()
            conversation = Conversation(
                user_id=user_id,
                counterparty_phone_number=normalized,
                counterparty_name=(display_name_hint or "").strip() or normalized,
                created_at=now,
                last_message_at=now,
            )
            self.db.add(conversation)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.info(
                    "Conversation for %s/%s created concurrently; re-reading",
                    user_id,
                    normalized,
                )
                conversation = self._find(user_id, normalized)
                if conversation is None:
                    raise StorageError("Conversation could not be created")
                return conversation, False
            self.db.refresh(conversation)
            logger.info("Created conversation %s for user %s", conversation.id, user_id)
            return conversation, True

    def get_conversation(
        self, user_id: UUID, conversation_id: UUID
    ) -> Optional[Conversation]:
        """Fetch a conversation owned by the user."""
        return (
            self.db.query(Conversation)
            .filter(
                Conversation.id == conversation_id, Conversation.user_id == user_id
            )
            .first()
        )

    def require_conversation(
        self, user_id: UUID, conversation_id: UUID
    ) -> Conversation:
        conversation = self.get_conversation(user_id, conversation_id)
        if conversation is None:
            raise NotFoundError("Conversation not found")
        return conversation

    def touch(self, conversation: Conversation, at: Optional[datetime] = None) -> None:
        """Advance last_message_at. Never moves it backwards."""
        at = as_utc(at or utcnow())
        current = as_utc(conversation.last_message_at)
        if current is None or at > current:
            conversation.last_message_at = at

    def list_conversations(self, user_id: UUID) -> List[Conversation]:
        return (
            self.db.query(Conversation)
            .filter(Conversation.user_id == user_id)
            .order_by(Conversation.last_message_at.desc(), Conversation.id)
            .all()
        )

    def unread_counts(self, user_id: UUID) -> dict[UUID, int]:
        """Inbound messages not yet read, per conversation."""
        rows = (
            self.db.query(Message.conversation_id, func.count(Message.id))
            .join(Conversation, Message.conversation_id == Conversation.id)
            .filter(
                Conversation.user_id == user_id,
                Message.direction == MessageDirection.INBOUND.value,
                Message.status != MessageStatus.READ.value,
            )
            .group_by(Message.conversation_id)
            .all()
        )
        return {conversation_id: count for conversation_id, count in rows}

    def list_summaries(self, user_id: UUID) -> List[ConversationSummary]:
        """Conversation list, most recent activity first, with last message and unread count."""
        message_service = MessageService(self.db)
        counts = self.unread_counts(user_id)
        now = utcnow()
        summaries: List[ConversationSummary] = []
        for conversation in self.list_conversations(user_id):
            last = message_service.latest_in_conversation(conversation.id)
            summaries.append(
                ConversationSummary(
                    id=conversation.id,
                    counterparty_address=conversation.counterparty_phone_number,
                    counterparty_name=conversation.counterparty_name,
                    created_at=conversation.created_at,
                    last_message_at=conversation.last_message_at,
                    last_message=(
                        message_service.to_read(last, now) if last is not None else None
                    ),
                    unread_count=counts.get(conversation.id, 0),
                )
            )
        return summaries

    def delete_conversation(self, user_id: UUID, conversation_id: UUID) -> None:
        """Delete a conversation and its messages."""
        conversation = self.require_conversation(user_id, conversation_id)
        self.db.delete(conversation)
        self.db.commit()
