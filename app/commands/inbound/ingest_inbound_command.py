"""
Command to ingest an inbound carrier message.

Attributes the sender to exactly one user ("first registered owner wins"),
resolves that user's conversation, and appends the message.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from app.commands.base_gateway import BaseGatewayCommand
from app.commands.inbound.append_inbound_command import AppendInboundCommand
from app.constants.addresses import ADDRESS_MAX_LENGTH
from app.core.addresses import normalize_address
from app.core.hub import RealtimeHub
from app.exceptions import ConflictError
from app.models.message import Message
from app.services.contact_service import ContactService
from app.services.conversation_service import ConversationService


class IngestInboundCommand(BaseGatewayCommand):
    """
    Route one inbound message to its owner.

    Senders nobody has saved as a contact are rejected (logged, nothing
    stored). Replays of an already stored carrier message id are dropped.
    """

    def __init__(self, db: Session, hub: RealtimeHub) -> None:
        super().__init__(db, hub)
        self.contact_service = ContactService(db)
        self.conversation_service = ConversationService(db)

    async def execute(
        self,
        raw_from_address: str,
        body: str,
        media_url: Optional[str] = None,
        media_type: Optional[str] = None,
        provider_message_id: Optional[str] = None,
    ) -> Optional[Message]:
        """
        Returns:
            Message: the appended message.
            None: rejected, duplicate, or nothing to record.
        """
        normalized = normalize_address(raw_from_address)
        if not normalized:
            self.logger.warning("Rejected inbound message without a sender address")
            return None
        if len(normalized) > ADDRESS_MAX_LENGTH:
            self.logger.warning(
                "Rejected inbound message: sender address %r is too long",
                normalized[:ADDRESS_MAX_LENGTH],
            )
            return None
        if not (body or "").strip() and not media_url:
            self.logger.info("Ignoring empty inbound message from %s", normalized)
            return None

        if provider_message_id and self.message_service.get_by_provider_id(
            provider_message_id
        ):
            self.logger.info("Dropping duplicate inbound message %s", provider_message_id)
            return None

        owner = self.contact_service.find_first_owner(normalized)
        if owner is None:
            self.logger.warning(
                "Rejected inbound message from %s: no user has this contact",
                normalized,
            )
            return None

        conversation, _ = self.conversation_service.get_or_create(
            owner.user_id, normalized, owner.display_name
        )
        try:
            return await AppendInboundCommand(self.db, self.hub).execute(
                owner.user_id,
                conversation.id,
                body,
                media_url=media_url,
                media_type=media_type,
                provider_message_id=provider_message_id,
            )
        except ConflictError:
            self.logger.info(
                "Dropping duplicate inbound message %s (concurrent replay)",
                provider_message_id,
            )
            return None
