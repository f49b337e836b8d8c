"""Pydantic schemas for users."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.constants.addresses import RAW_ADDRESS_MAX_LENGTH
from app.schemas.common import UtcDatetime


class UserCreate(BaseModel):
    """Request schema for provisioning a user."""

    username: str = Field(..., min_length=1, max_length=50)
    phone_number: str = Field(
        ..., min_length=1, max_length=RAW_ADDRESS_MAX_LENGTH
    )
    display_name: Optional[str] = Field(None, max_length=100)


class UserRead(BaseModel):
    """Response schema for a user."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    phone_number: str
    display_name: Optional[str] = None
    created_at: UtcDatetime
