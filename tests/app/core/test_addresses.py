"""Tests for counterparty address normalization."""

import pytest

from app.constants.addresses import ADDRESS_MAX_LENGTH
from app.core.addresses import normalize_address, require_address, to_carrier_address
from app.exceptions import ValidationError


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("whatsapp:+15551234567", "+15551234567"),
        ("WhatsApp: +1 555 123 4567", "+15551234567"),
        ("sms:+15551234567", "+15551234567"),
        ("whatsapp:sms:+1555", "+1555"),
        ("  +1555\t123 ", "+1555123"),
        ("", ""),
        (None, ""),
        ("whatsapp:", ""),
    ],
)
def test_normalize_address(raw, expected):
    assert normalize_address(raw) == expected


def test_normalize_address_is_idempotent():
    once = normalize_address("whatsapp: tel:+44 20 7946 0000")
    assert normalize_address(once) == once


def test_require_address_rejects_blank():
    with pytest.raises(ValidationError):
        require_address("whatsapp:  ")


def test_require_address_rejects_overlong_numbers():
    with pytest.raises(ValidationError):
        require_address("+" + "1" * ADDRESS_MAX_LENGTH)


def test_require_address_measures_the_normalized_number():
    raw = "whatsapp:" + "  ".join("+15551234567")
    assert len(raw) > ADDRESS_MAX_LENGTH
    assert require_address(raw) == "+15551234567"


def test_to_carrier_address_adds_prefix_once():
    assert to_carrier_address("+1555", "whatsapp:") == "whatsapp:+1555"
    assert to_carrier_address("whatsapp:+1555", "whatsapp:") == "whatsapp:+1555"
    assert to_carrier_address("+1555", "") == "+1555"
