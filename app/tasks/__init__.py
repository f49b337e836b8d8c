# Import celery app first
from app.infra.celery_app import celery_app

# Initialize logging configuration for Celery workers
from app.infra.logging_config import LoggingConfig
from app.tasks.reconcile_sending_task import reconcile_stale_sending_task

LoggingConfig()  # Initialize logging

__all__ = [
    "celery_app",
    "reconcile_stale_sending_task",
]
