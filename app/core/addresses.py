"""Counterparty address normalization, shared by every inbound and outbound path."""

from __future__ import annotations

import re

from app.constants.addresses import ADDRESS_MAX_LENGTH
from app.exceptions import ValidationError

CARRIER_PREFIXES = ("whatsapp:", "sms:", "tel:")

_WHITESPACE = re.compile(r"\s+")


def normalize_address(raw: str | None) -> str:
    """
    Strip carrier prefixes and all whitespace until the value is stable.

    Idempotent: normalize_address(normalize_address(x)) == normalize_address(x).
    Returns "" for empty input; callers decide whether that is an error.
    """
    value = _WHITESPACE.sub("", raw or "")
    while True:
        lowered = value.lower()
        for prefix in CARRIER_PREFIXES:
            if lowered.startswith(prefix):
                value = _WHITESPACE.sub("", value[len(prefix) :])
                break
        else:
            return value


def require_address(raw: str | None) -> str:
    """Normalize and reject addresses that normalize to nothing or are too long."""
    normalized = normalize_address(raw)
    if not normalized:
        raise ValidationError("A counterparty phone number is required")
    if len(normalized) > ADDRESS_MAX_LENGTH:
        raise ValidationError(
            f"Phone number exceeds {ADDRESS_MAX_LENGTH} characters"
        )
    return normalized


def to_carrier_address(normalized: str, prefix: str) -> str:
    """Re-apply the carrier's channel prefix (e.g. whatsapp:) for an outbound send."""
    if not prefix or normalized.lower().startswith(prefix.lower()):
        return normalized
    return f"{prefix}{normalized}"
