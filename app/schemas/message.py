"""Pydantic schemas for messages."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.constants.addresses import RAW_ADDRESS_MAX_LENGTH
from app.constants.messages import MessageDirection, MessageStatus
from app.schemas.common import UtcDatetime


class SendMessageRequest(BaseModel):
    """
    Outbound send request.

    `media_id` references an uploaded attachment; `media_url` is an already
    hosted file. At most one of them may be given.
    """

    to: str = Field(..., max_length=RAW_ADDRESS_MAX_LENGTH)
    content: str = ""
    media_id: Optional[UUID] = None
    media_url: Optional[str] = Field(None, max_length=1024)


class MessageRead(BaseModel):
    """
    Response schema for a message.

    `status` is the effective status: a send stuck in `sending` past the
    staleness threshold is reported as `failed`.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    conversation_id: UUID
    content: str
    direction: MessageDirection
    sent_at: UtcDatetime
    status: MessageStatus
    media_url: Optional[str] = None
    media_type: Optional[str] = None
