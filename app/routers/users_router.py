"""Users API: provisioning glue for local accounts."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.infra.logging_config import get_logger
from app.models.user import User
from app.core.app_state import AppState
from app.routers.utils.dependencies import get_app_state, get_current_user
from app.schemas.user import UserCreate, UserRead
from app.services.user_service import UserService

logger = get_logger("users")

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
def create_user(
    data: UserCreate,
    db: Session = Depends(get_db),
) -> UserRead:
    """Provision a user. The returned id is the caller's X-User-Id."""
    user = UserService(db).create_user(data)
    logger.info("Provisioned user %s", user.id)
    return user


@router.get("/me", response_model=UserRead)
def read_current_user(current_user: User = Depends(get_current_user)) -> UserRead:
    return current_user


@router.delete("/me", status_code=204)
def delete_current_user(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    state: AppState = Depends(get_app_state),
) -> None:
    """Delete the caller with all contacts, conversations, messages and stored media."""
    UserService(db).delete_user(current_user.id, storage=state.storage)
    logger.info("Deleted user %s", current_user.id)
