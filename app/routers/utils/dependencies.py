from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.app_state import AppState
from app.db import get_db
from app.models.user import User
from app.services.user_service import UserService


def get_app_state(request: Request) -> AppState:
    """FastAPI dependency returning the process-wide collaborators."""
    return request.app.state.gateway


def resolve_user(db: Session, raw_user_id: Optional[str]) -> Optional[User]:
    """Look up the caller by id. None for a missing, malformed or unknown id."""
    if not raw_user_id:
        return None
    try:
        user_id = UUID(raw_user_id)
    except ValueError:
        return None
    return UserService(db).get_user(user_id)


def get_current_user(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id"),
    db: Session = Depends(get_db),
) -> User:
    """FastAPI dependency identifying the caller from the X-User-Id header."""
    user = resolve_user(db, x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user
