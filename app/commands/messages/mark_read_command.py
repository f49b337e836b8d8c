"""Read receipts: mark a message, or a whole conversation, as read."""

from __future__ import annotations

from typing import List
from uuid import UUID

from app.commands.base_gateway import BaseGatewayCommand
from app.constants.messages import MessageStatus
from app.exceptions import NotFoundError
from app.models.message import Message
from app.schemas.realtime import RealtimeEventName, conversation_topic
from app.services.conversation_service import ConversationService
from app.utils.dates import utcnow


class MarkReadCommand(BaseGatewayCommand):
    """Move owned messages to `read` and publish MessageRead on their conversation."""

    async def execute(self, user_id: UUID, message_id: int) -> Message:
        """
        Mark one message read. Already-read or non-readable messages are left as is.

        Raises:
            NotFoundError: the message is not in one of the user's conversations.
        """
        message = self.message_service.get_message_for_user(user_id, message_id)
        if message is None:
            raise NotFoundError("Message not found")
        if self.message_service.transition(message, MessageStatus.READ):
            self.commit()
            await self._publish_read(user_id, message)
        return message

    async def mark_conversation_read(
        self, user_id: UUID, conversation_id: UUID
    ) -> List[Message]:
        """Mark every unread inbound message of the conversation read."""
        ConversationService(self.db).require_conversation(user_id, conversation_id)
        now = utcnow()
        marked = [
            message
            for message in self.message_service.unread_inbound(conversation_id)
            if self.message_service.transition(message, MessageStatus.READ, at=now)
        ]
        if not marked:
            return []
        self.commit()
        for message in marked:
            await self._publish_read(user_id, message)
        return marked

    async def _publish_read(self, user_id: UUID, message: Message) -> None:
        await self.hub.publish(
            conversation_topic(message.conversation_id),
            RealtimeEventName.MESSAGE_READ,
            {
                "message_id": message.id,
                "conversation_id": str(message.conversation_id),
                "read_by": str(user_id),
            },
        )
