"""
Command to send an outbound message through the carrier.

Resolves media and the conversation, records the message as `sending`,
calls the carrier, then settles the status and announces it.
"""

from __future__ import annotations

import mimetypes
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.adapters.base import BaseCarrierAdapter
from app.adapters.object_storage import BaseObjectStorage
from app.commands.base_gateway import BaseGatewayCommand
from app.constants.messages import MessageDirection, MessageStatus
from app.core.addresses import require_address
from app.core.hub import RealtimeHub
from app.exceptions import StorageError, ValidationError
from app.models.message import Message
from app.schemas.carrier import OutboundMessage, OutboundSendResult
from app.schemas.message import SendMessageRequest
from app.services.contact_service import ContactService
from app.services.conversation_service import ConversationService
from app.services.media_service import MediaService


class SendOutboundCommand(BaseGatewayCommand):
    """
    Command to send an outbound message to a counterparty.
    Never returns with the message left in `sending`.
    """

    def __init__(
        self,
        db: Session,
        carrier: BaseCarrierAdapter,
        storage: BaseObjectStorage,
        hub: RealtimeHub,
    ) -> None:
        super().__init__(db, hub)
        self.carrier = carrier
        self.media_service = MediaService(db, storage)
        self.contact_service = ContactService(db)
        self.conversation_service = ConversationService(db)

    async def execute(self, user_id: UUID, body: SendMessageRequest) -> Message:
        """
        Send the message and record its outcome.

        Args:
            user_id: The sending user.
            body: Destination, content and optional media reference or URL.

        Returns:
            Message: status `sent` if the carrier accepted it, else `failed`.

        Raises:
            ValidationError: no content and no media, both media forms, or an
                empty address. Nothing is written.
            NotFoundError: media_id is missing or not the user's. Nothing is written.
            StorageError: persistence failed.
        """
        if body.media_id is not None and body.media_url:
            raise ValidationError("Provide either media_id or media_url, not both")
        if not body.content.strip() and body.media_id is None and not body.media_url:
            raise ValidationError("Message content or media is required")
        normalized = require_address(body.to)

        media_url = body.media_url
        media_type = mimetypes.guess_type(media_url)[0] if media_url else None
        attachment_id = None
        if body.media_id is not None:
            attachment = self.media_service.resolve_for_send(user_id, body.media_id)
            media_url = attachment.storage_url
            media_type = attachment.content_type
            attachment_id = attachment.id

        try:
            contact = self.contact_service.get_contact_by_phone(user_id, normalized)
            conversation, _ = self.conversation_service.get_or_create(
                user_id,
                normalized,
                contact.display_name if contact is not None else normalized,
            )
            message = self.message_service.create_message(
                conversation,
                MessageDirection.OUTBOUND,
                MessageStatus.SENDING,
                content=body.content,
                media_url=media_url,
                media_type=media_type,
                media_attachment_id=attachment_id,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            self.logger.exception("Could not record outbound message: %s", e)
            raise StorageError() from e
        self.commit()

        result = await self._send(
            OutboundMessage(to_address=normalized, body=body.content, media_url=media_url)
        )

        try:
            if result.success:
                message.provider_message_id = result.provider_message_id
                self.message_service.transition(message, MessageStatus.SENT)
            else:
                self.logger.warning(
                    "Send of message %s to %s failed: %s",
                    message.id,
                    normalized,
                    result.error,
                )
                self.message_service.transition(message, MessageStatus.FAILED)
            self.conversation_service.touch(conversation)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageError() from e
        self.commit()

        await self.publish_status(message)
        return message

    async def _send(self, outbound: OutboundMessage) -> OutboundSendResult:
        """Call the carrier; any error is a failed send. Not retried."""
        try:
            return await self.carrier.send(outbound)
        except Exception as e:
            self.logger.exception("Carrier send raised: %s", e)
            return OutboundSendResult(success=False, error=str(e))
