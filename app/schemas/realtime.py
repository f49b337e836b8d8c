"""Realtime event envelope and client signal schemas."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.common import UtcDatetime
from app.utils.dates import utcnow


class RealtimeEventName(StrEnum):
    NEW_MESSAGE = "NewMessage"
    MESSAGE_STATUS_UPDATE = "MessageStatusUpdate"
    MESSAGE_READ = "MessageRead"
    TYPING_INDICATOR = "TypingIndicator"
    USER_ONLINE = "UserOnline"
    USER_OFFLINE = "UserOffline"
    JOINED = "Joined"
    LEFT = "Left"
    ERROR = "Error"


def user_topic(user_id: UUID | str) -> str:
    return f"user:{user_id}"


def conversation_topic(conversation_id: UUID | str) -> str:
    return f"conversation:{conversation_id}"


class RealtimeEvent(BaseModel):
    """Envelope delivered to every subscriber of a topic."""

    event: RealtimeEventName
    topic: Optional[str] = None  # None for broadcasts
    payload: dict[str, Any] = Field(default_factory=dict)
    emitted_at: UtcDatetime = Field(default_factory=utcnow)


class JoinSignal(BaseModel):
    action: Literal["join"]
    conversation_id: UUID


class LeaveSignal(BaseModel):
    action: Literal["leave"]
    conversation_id: UUID


class TypingSignal(BaseModel):
    action: Literal["typing"]
    conversation_id: UUID
    is_typing: bool = True


class ReadSignal(BaseModel):
    action: Literal["read"]
    conversation_id: UUID
    message_id: int


ClientSignal = Union[JoinSignal, LeaveSignal, TypingSignal, ReadSignal]


class ClientSignalEnvelope(BaseModel):
    """Parses one client frame into the matching signal by its `action`."""

    signal: ClientSignal = Field(discriminator="action")
