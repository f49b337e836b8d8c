"""Message direction, status, and the status state machine."""

from enum import StrEnum


class MessageDirection(StrEnum):
    OUTBOUND = "outbound"
    INBOUND = "inbound"


class MessageStatus(StrEnum):
    """Lifecycle states. `sending` is transient; `failed` and `read` are terminal."""

    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[MessageStatus, frozenset[MessageStatus]] = {
    MessageStatus.SENDING: frozenset({MessageStatus.SENT, MessageStatus.FAILED}),
    MessageStatus.SENT: frozenset(
        {MessageStatus.DELIVERED, MessageStatus.READ, MessageStatus.FAILED}
    ),
    MessageStatus.DELIVERED: frozenset({MessageStatus.READ}),
    MessageStatus.READ: frozenset(),
    MessageStatus.FAILED: frozenset(),
}

# Carrier status callback values (Twilio MessageStatus) mapped onto our states.
# Intermediate carrier states (queued, sending, accepted) carry no transition.
CARRIER_STATUS_MAP: dict[str, MessageStatus] = {
    "sent": MessageStatus.SENT,
    "delivered": MessageStatus.DELIVERED,
    "read": MessageStatus.READ,
    "failed": MessageStatus.FAILED,
    "undelivered": MessageStatus.FAILED,
}


def can_transition(current: str, target: str) -> bool:
    """True if `current -> target` is a legal lifecycle move."""
    try:
        return MessageStatus(target) in ALLOWED_TRANSITIONS[MessageStatus(current)]
    except ValueError:
        return False
