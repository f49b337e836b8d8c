"""Celery application: Redis broker, beat schedule for periodic maintenance."""

from __future__ import annotations

from celery import Celery

from app.config import get_settings

settings = get_settings()

celery_app = Celery(
    "gateway",
    broker=settings.celery_broker_url,
    backend=settings.celery_broker_url,
    include=["app.tasks.reconcile_sending_task"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_ignore_result=True,
    beat_schedule={
        "reconcile-stale-sending": {
            "task": "app.tasks.reconcile_sending_task.reconcile_stale_sending_task",
            "schedule": float(settings.reconcile_interval_seconds),
        },
    },
)
