"""
Carrier adapter interface.

Adapters encapsulate carrier-specific logic and expose a normalized
message format to the gateway core.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping, Optional

from app.schemas.carrier import CarrierWebhook, OutboundMessage, OutboundSendResult


class BaseCarrierAdapter(ABC):
    """Contract for carrier adapters. New carriers implement this interface."""

    @abstractmethod
    def parse_webhook(self, form: Mapping[str, str]) -> CarrierWebhook:
        """Parse a raw webhook form into a normalized callback. Raise ValueError if invalid."""
        ...

    @abstractmethod
    async def send(self, outbound: OutboundMessage) -> OutboundSendResult:
        """
        Send a message through the carrier API.

        Return success=False for a rejected send. Network errors may raise;
        callers record them as a failed send.
        """
        ...

    def verify_webhook(
        self,
        request_url: str,
        params: Mapping[str, str],
        request_headers: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """
        Verify a webhook request signature. Override if the carrier signs requests.
        Return True if valid or verification not required; False to reject.
        """
        return True

    async def aclose(self) -> None:
        """Release network resources. Called once on shutdown."""
        return None
