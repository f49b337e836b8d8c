"""Celery task settling outbound messages left in `sending`."""

from __future__ import annotations

from app.infra.celery_app import celery_app
from app.infra.logging_config import get_logger
from app.services.message_service import MessageService
from app.utils.db.db_session_helper import db_session

logger = get_logger("reconcile_sending")


@celery_app.task(name="app.tasks.reconcile_sending_task.reconcile_stale_sending_task")
def reconcile_stale_sending_task() -> int:
    """
    Mark `failed` every outbound message stuck in `sending` past the staleness
    threshold (a send whose request was cancelled mid-flight). Nothing is resent.
    """
    with db_session() as db:
        stale = MessageService(db).reconcile_stale_sending()
        count = len(stale)
    if count:
        logger.info("Marked %d stale sending message(s) as failed", count)
    return count
