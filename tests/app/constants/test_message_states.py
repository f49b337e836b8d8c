"""Tests for the message status state machine."""

import pytest

from app.constants.messages import CARRIER_STATUS_MAP, MessageStatus, can_transition


@pytest.mark.parametrize(
    "current, target",
    [
        ("sending", "sent"),
        ("sending", "failed"),
        ("sent", "delivered"),
        ("sent", "read"),
        ("sent", "failed"),
        ("delivered", "read"),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        ("delivered", "sent"),
        ("read", "delivered"),
        ("read", "failed"),
        ("failed", "sent"),
        ("sending", "delivered"),
        ("sent", "sent"),
        ("sent", "bogus"),
        ("bogus", "sent"),
    ],
)
def test_rejected_transitions(current, target):
    assert not can_transition(current, target)


def test_terminal_states_have_no_exit():
    for target in MessageStatus:
        assert not can_transition(MessageStatus.READ, target)
        assert not can_transition(MessageStatus.FAILED, target)


def test_undelivered_maps_to_failed():
    assert CARRIER_STATUS_MAP["undelivered"] is MessageStatus.FAILED
    assert "queued" not in CARRIER_STATUS_MAP
