"""
Twilio carrier adapter (WhatsApp / SMS).

Sends through the Twilio REST API with httpx and parses Twilio's
form-encoded webhook callbacks.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging
from typing import Mapping, Optional

import httpx

from app.adapters.base import BaseCarrierAdapter
from app.schemas.carrier import CarrierWebhook, OutboundMessage, OutboundSendResult
from app.core.addresses import to_carrier_address

logger = logging.getLogger(__name__)


def parse_twilio_form(form: Mapping[str, str]) -> CarrierWebhook:
    """Map Twilio's webhook fields onto a CarrierWebhook. Only the first media item is kept."""
    provider_message_id = form.get("MessageSid") or form.get("SmsSid") or None
    media_url = form.get("MediaUrl0") or None
    status = form.get("MessageStatus") or form.get("SmsStatus") or None
    body = form.get("Body") or ""
    from_address = form.get("From") or ""
    if not provider_message_id and not from_address:
        raise ValueError("Twilio webhook has neither MessageSid nor From")
    return CarrierWebhook(
        from_address=from_address,
        body=body,
        media_url=media_url,
        media_type=(form.get("MediaContentType0") or None) if media_url else None,
        provider_message_id=provider_message_id,
        carrier_status=status.lower() if status else None,
    )


class TwilioAdapter(BaseCarrierAdapter):
    """Twilio adapter: parse webhook forms, send messages via the Messages API."""

    TWILIO_SIGNATURE_HEADER = "X-Twilio-Signature"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        address_prefix: str = "whatsapp:",
        api_base_url: str = "https://api.twilio.com",
        timeout_seconds: float = 20.0,
    ) -> None:
        self._account_sid = account_sid
        self._auth_token = auth_token
        self._from_number = from_number
        self._address_prefix = address_prefix
        self._api_base_url = api_base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._api_base_url,
                auth=(self._account_sid, self._auth_token),
                timeout=self._timeout_seconds,
            )
        return self._client

    @property
    def messages_path(self) -> str:
        return f"/2010-04-01/Accounts/{self._account_sid}/Messages.json"

    def verify_webhook(
        self,
        request_url: str,
        params: Mapping[str, str],
        request_headers: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """
        Validate X-Twilio-Signature.

        Twilio signs the full request URL followed by every form parameter,
        sorted by name, as name+value pairs (HMAC-SHA1, base64).
        """
        request_headers = request_headers or {}
        header_lower = self.TWILIO_SIGNATURE_HEADER.lower()
        signature = None
        for key, value in request_headers.items():
            if key.lower() == header_lower:
                signature = value
                break
        if not signature:
            return False
        to_sign = request_url
        for key in sorted(params.keys()):
            to_sign += f"{key}{params[key]}"
        digest = hmac.new(
            self._auth_token.encode("utf-8"), to_sign.encode("utf-8"), hashlib.sha1
        ).digest()
        expected = base64.b64encode(digest).decode("utf-8")
        return hmac.compare_digest(expected, signature.strip())

    def parse_webhook(self, form: Mapping[str, str]) -> CarrierWebhook:
        """Parse a Twilio webhook form into a normalized callback."""
        return parse_twilio_form(form)

    async def send(self, outbound: OutboundMessage) -> OutboundSendResult:
        """POST to the Messages API. A 4xx/5xx answer is a rejected send."""
        data: dict[str, str] = {
            "To": to_carrier_address(outbound.to_address, self._address_prefix),
            "From": self._from_number,
            "Body": outbound.body,
        }
        if outbound.media_url:
            data["MediaUrl"] = outbound.media_url
        response = await self._get_client().post(self.messages_path, data=data)
        if response.status_code >= 400:
            logger.warning(
                "Twilio rejected send to %s (%s): %s",
                data["To"],
                response.status_code,
                response.text[:500],
            )
            return OutboundSendResult(
                success=False, error=f"Carrier responded {response.status_code}"
            )
        payload = response.json()
        return OutboundSendResult(success=True, provider_message_id=payload.get("sid"))

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
