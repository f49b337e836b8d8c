from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.app_state import AppState
from app.db import get_db
from app.infra.logging_config import get_logger
from app.routers.utils.dependencies import get_app_state

logger = get_logger("health")

router = APIRouter(
    prefix="/health",
    tags=["system"],
)


@router.get("/live")
def live() -> dict:
    """Process is up."""
    return {"status": "ok"}


@router.get("/ready")
def ready(
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> dict:
    """Database reachable. Reports whether carrier and storage are configured."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Readiness check failed: %s", e)
        raise HTTPException(status_code=503, detail="Database unavailable")
    return {
        "status": "ok",
        "carrier_configured": state.settings.carrier_configured,
        "storage_configured": bool(state.settings.s3_bucket),
        "realtime_connections": state.hub.connection_count,
    }
