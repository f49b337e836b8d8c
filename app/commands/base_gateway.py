"""
Base for commands that mutate messages and fan the change out.

Holds the session and the realtime hub, owns the commit, and knows how to
announce a message's status.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.hub import RealtimeHub
from app.exceptions import StorageError
from app.models.message import Message
from app.schemas.realtime import RealtimeEventName, conversation_topic
from app.services.message_service import MessageService


class BaseGatewayCommand:
    """
    Base for message lifecycle commands.
    Provides commit-or-rollback and the MessageStatusUpdate publisher.
    """

    def __init__(self, db: Session, hub: RealtimeHub) -> None:
        self.db = db
        self.hub = hub
        self.message_service = MessageService(db)
        self.logger = logging.getLogger(self.__class__.__module__)

    def commit(self) -> None:
        """Commit the unit of work. On failure roll back and raise StorageError."""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.exception("Commit failed: %s", e)
            raise StorageError() from e

    async def publish_status(self, message: Message) -> None:
        await self.hub.publish(
            conversation_topic(message.conversation_id),
            RealtimeEventName.MESSAGE_STATUS_UPDATE,
            {
                "message_id": message.id,
                "conversation_id": str(message.conversation_id),
                "status": self.message_service.effective_status(message).value,
                "provider_message_id": message.provider_message_id,
            },
        )
