"""Shared schema types."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from app.utils.dates import as_utc

# Datetimes read back from the database are naive UTC; serialize them with an offset.
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
