"""Command to append an inbound message to a user's conversation."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.commands.base_gateway import BaseGatewayCommand
from app.constants.messages import MessageDirection, MessageStatus
from app.core.hub import RealtimeHub
from app.exceptions import ConflictError, StorageError
from app.models.message import Message
from app.schemas.realtime import RealtimeEventName, user_topic
from app.services.conversation_service import ConversationService


class AppendInboundCommand(BaseGatewayCommand):
    """
    Persist an inbound message as `delivered` and announce it to the owner.
    The message insert and the conversation touch commit together.
    """

    def __init__(self, db: Session, hub: RealtimeHub) -> None:
        super().__init__(db, hub)
        self.conversation_service = ConversationService(db)

    async def execute(
        self,
        user_id: UUID,
        conversation_id: UUID,
        content: str,
        media_url: Optional[str] = None,
        media_type: Optional[str] = None,
        provider_message_id: Optional[str] = None,
    ) -> Message:
        """
        Raises:
            NotFoundError: the conversation is not the user's.
            ConflictError: provider_message_id is already stored (a replay).
            StorageError: persistence failed.
        """
        conversation = self.conversation_service.require_conversation(
            user_id, conversation_id
        )
        try:
            message = self.message_service.create_message(
                conversation,
                MessageDirection.INBOUND,
                MessageStatus.DELIVERED,
                content=content,
                media_url=media_url,
                media_type=media_type,
                provider_message_id=provider_message_id,
            )
            self.conversation_service.touch(conversation, message.sent_at)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Message already recorded") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.exception("Could not record inbound message: %s", e)
            raise StorageError() from e

        self.logger.info(
            "Inbound message %s appended to conversation %s",
            message.id,
            conversation.id,
        )
        payload = self.message_service.to_read(message).model_dump(mode="json")
        payload["counterparty_address"] = conversation.counterparty_phone_number
        payload["counterparty_name"] = conversation.counterparty_name
        await self.hub.publish(user_topic(user_id), RealtimeEventName.NEW_MESSAGE, payload)
        return message
