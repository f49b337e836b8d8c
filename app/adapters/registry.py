"""Build the process-wide carrier adapter and object storage from settings."""

from __future__ import annotations

import logging
from typing import Mapping

from app.adapters.base import BaseCarrierAdapter
from app.adapters.object_storage import (
    BaseObjectStorage,
    S3ObjectStorage,
    UnconfiguredObjectStorage,
)
from app.adapters.twilio import TwilioAdapter, parse_twilio_form
from app.config import Settings
from app.schemas.carrier import CarrierWebhook, OutboundMessage, OutboundSendResult

logger = logging.getLogger(__name__)


class UnconfiguredCarrierAdapter(BaseCarrierAdapter):
    """Stand-in when no carrier credentials are configured: every send is rejected."""

    def parse_webhook(self, form: Mapping[str, str]) -> CarrierWebhook:
        return parse_twilio_form(form)

    async def send(self, outbound: OutboundMessage) -> OutboundSendResult:
        return OutboundSendResult(success=False, error="Carrier is not configured")


def build_carrier_adapter(settings: Settings) -> BaseCarrierAdapter:
    """Twilio when enabled and credentialed; otherwise a carrier that rejects every send."""
    if not settings.carrier_configured:
        logger.warning("Carrier is not configured; outbound sends will be marked failed")
        return UnconfiguredCarrierAdapter()
    return TwilioAdapter(
        account_sid=settings.twilio_account_sid,
        auth_token=settings.twilio_auth_token,
        from_number=settings.twilio_from_number,
        address_prefix=settings.carrier_address_prefix,
        api_base_url=settings.twilio_api_base_url,
        timeout_seconds=settings.carrier_timeout_seconds,
    )


def build_object_storage(settings: Settings) -> BaseObjectStorage:
    """S3 when a bucket is configured; otherwise storage that refuses uploads."""
    if not settings.s3_bucket:
        logger.warning("Object storage is not configured; media uploads are disabled")
        return UnconfiguredObjectStorage()
    return S3ObjectStorage.from_settings(settings)
