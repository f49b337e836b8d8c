"""Pydantic schemas for conversations."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.constants.addresses import RAW_ADDRESS_MAX_LENGTH
from app.schemas.common import UtcDatetime
from app.schemas.message import MessageRead


class ConversationCreate(BaseModel):
    """Explicit get-or-create request."""

    counterparty_address: str = Field(
        ..., min_length=1, max_length=RAW_ADDRESS_MAX_LENGTH
    )
    counterparty_name: Optional[str] = Field(None, max_length=100)


class ConversationRead(BaseModel):
    """A conversation without its message list."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    counterparty_address: str = Field(validation_alias="counterparty_phone_number")
    counterparty_name: str
    created_at: UtcDatetime
    last_message_at: UtcDatetime


class ConversationSummary(ConversationRead):
    """Conversation list entry: latest message and unread inbound count."""

    last_message: Optional[MessageRead] = None
    unread_count: int = 0


class MarkReadResult(BaseModel):
    conversation_id: UUID
    marked: int
