"""Pydantic schemas for contacts."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.constants.addresses import RAW_ADDRESS_MAX_LENGTH
from app.schemas.common import UtcDatetime


class ContactCreate(BaseModel):
    """Request schema for creating a contact. phone_number is normalized on save."""

    display_name: str = Field(..., min_length=1, max_length=100)
    phone_number: str = Field(
        ..., min_length=1, max_length=RAW_ADDRESS_MAX_LENGTH
    )


class ContactUpdate(BaseModel):
    """Request schema for updating a contact."""

    display_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone_number: Optional[str] = Field(
        None, min_length=1, max_length=RAW_ADDRESS_MAX_LENGTH
    )


class ContactRead(BaseModel):
    """Response schema for a contact."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    display_name: str
    phone_number: str
    created_at: UtcDatetime
    updated_at: UtcDatetime
