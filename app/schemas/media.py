"""Pydantic schemas for media attachments."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.schemas.common import UtcDatetime


class MediaRead(BaseModel):
    """Response schema for a stored media attachment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    file_name: str
    storage_url: str
    thumbnail_url: Optional[str] = None
    content_type: str
    size_bytes: int
    width: Optional[int] = None
    height: Optional[int] = None
    uploaded_at: UtcDatetime


class StoredObject(BaseModel):
    """What object storage hands back after an upload."""

    storage_url: str
    thumbnail_url: Optional[str] = None
    size_bytes: int
    content_type: str
    width: Optional[int] = None
    height: Optional[int] = None
