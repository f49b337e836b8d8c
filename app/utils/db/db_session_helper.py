"""Session scope for code running outside a request (tasks, scripts)."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

from app.db import db_manager


@contextmanager
def db_session() -> Iterator[Session]:
    with db_manager.db_session() as db:
        yield db
