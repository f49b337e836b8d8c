"""Shared column mixins."""

from __future__ import annotations

from sqlalchemy import Column, DateTime

from app.utils.dates import utcnow


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
