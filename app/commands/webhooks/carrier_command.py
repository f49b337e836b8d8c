"""
Command to handle carrier webhook callbacks.

Verifies the signature when enabled, parses the form, and routes it either
to inbound ingestion or to the delivery-status handler.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.adapters.base import BaseCarrierAdapter
from app.commands.inbound.ingest_inbound_command import IngestInboundCommand
from app.commands.messages.apply_delivery_status_command import (
    ApplyDeliveryStatusCommand,
)
from app.config import Settings, get_settings
from app.core.hub import RealtimeHub


class CarrierWebhookCommand:
    """
    Command to handle carrier webhook callbacks.
    Answers {"status": "ok"} whatever the attribution outcome, so the carrier
    does not retry a message nobody owns.
    """

    def __init__(
        self,
        db: Session,
        carrier: BaseCarrierAdapter,
        hub: RealtimeHub,
        settings: Optional[Settings] = None,
    ) -> None:
        self.db = db
        self.carrier = carrier
        self.hub = hub
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(__name__)

    async def execute(
        self,
        request_url: str,
        form: Mapping[str, str],
        headers: Mapping[str, str],
    ) -> dict[str, str]:
        """
        Execute the webhook.

        Args:
            request_url: URL the carrier posted to (used for signature checks).
            form: Decoded form fields.
            headers: Request headers.

        Returns:
            dict: {"status": "ok"}.

        Raises:
            HTTPException: 403 on an invalid signature, 400 on an unparseable form.
        """
        if self.settings.carrier_validate_signature:
            signed_url = self.settings.carrier_webhook_url or request_url
            if not self.carrier.verify_webhook(signed_url, form, headers):
                self.logger.warning("Carrier webhook signature rejected")
                raise HTTPException(status_code=403, detail="Invalid webhook signature")
        try:
            webhook = self.carrier.parse_webhook(form)
        except (ValueError, KeyError, TypeError) as e:
            self.logger.warning("Carrier webhook parse error: %s", e)
            raise HTTPException(status_code=400, detail="Invalid webhook payload") from e

        if webhook.is_status_callback:
            if webhook.provider_message_id:
                await ApplyDeliveryStatusCommand(self.db, self.hub).execute(
                    webhook.provider_message_id, webhook.carrier_status
                )
            return {"status": "ok"}

        await IngestInboundCommand(self.db, self.hub).execute(
            webhook.from_address,
            webhook.body,
            media_url=webhook.media_url,
            media_type=webhook.media_type,
            provider_message_id=webhook.provider_message_id,
        )
        return {"status": "ok"}
