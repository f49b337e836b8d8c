"""Apply a carrier delivery-status callback to the message it reports on."""

from __future__ import annotations

from typing import Optional

from app.commands.base_gateway import BaseGatewayCommand
from app.constants.messages import CARRIER_STATUS_MAP
from app.models.message import Message


class ApplyDeliveryStatusCommand(BaseGatewayCommand):
    """
    Map a carrier status onto the state machine.
    Out-of-order callbacks are ignored; nothing ever moves backwards.
    """

    async def execute(
        self, provider_message_id: str, carrier_status: str
    ) -> Optional[Message]:
        """Return the message if its status changed, else None."""
        target = CARRIER_STATUS_MAP.get((carrier_status or "").lower())
        if target is None:
            self.logger.debug(
                "No transition for carrier status %r on %s",
                carrier_status,
                provider_message_id,
            )
            return None
        message = self.message_service.get_by_provider_id(provider_message_id)
        if message is None:
            self.logger.info(
                "Status %s for unknown carrier message %s",
                carrier_status,
                provider_message_id,
            )
            return None
        if not self.message_service.transition(message, target):
            return None
        self.commit()
        await self.publish_status(message)
        return message
