"""
Normalized carrier contracts.

The webhook form is converted into `CarrierWebhook`; outbound sends use
`OutboundMessage`. Independent of the carrier's wire format.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class CarrierWebhook(BaseModel):
    """Normalized webhook callback (adapter → core)."""

    from_address: str = ""
    body: str = ""
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    provider_message_id: Optional[str] = None
    # Present on delivery-status callbacks (sent, delivered, read, failed, ...).
    carrier_status: Optional[str] = None

    @property
    def is_status_callback(self) -> bool:
        """A status callback reports on a message we sent; it carries no inbound content."""
        return bool(self.carrier_status) and not self.body and not self.media_url


class OutboundMessage(BaseModel):
    """Normalized outbound message (core → adapter)."""

    to_address: str  # normalized; the adapter re-applies its channel prefix
    body: str = ""
    media_url: Optional[str] = None


class OutboundSendResult(BaseModel):
    """Result of an outbound send: accepted or not, and the carrier's id."""

    success: bool
    provider_message_id: Optional[str] = None
    error: Optional[str] = None
