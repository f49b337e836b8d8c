"""Tests for the stale-sending reconciliation task."""

from datetime import timedelta
from unittest.mock import patch

from app.constants.messages import MessageDirection, MessageStatus
from app.infra.celery_app import celery_app
from app.models.message import Message
from app.tasks.reconcile_sending_task import reconcile_stale_sending_task
from app.utils.dates import utcnow
from tests.fixtures.message_fixtures import make_message


def test_reconcile_marks_stale_sends_failed(db, setup_conversation):
    stale = make_message(
        db,
        setup_conversation,
        direction=MessageDirection.OUTBOUND,
        status=MessageStatus.SENDING,
        sent_at=utcnow() - timedelta(hours=1),
    )
    fresh = make_message(
        db,
        setup_conversation,
        direction=MessageDirection.OUTBOUND,
        status=MessageStatus.SENDING,
    )

    assert reconcile_stale_sending_task() == 1

    db.expire_all()
    assert db.get(Message, stale.id).status == MessageStatus.FAILED
    assert db.get(Message, fresh.id).status == MessageStatus.SENDING


def test_reconcile_with_nothing_to_do(db, setup_conversation):
    make_message(db, setup_conversation)
    assert reconcile_stale_sending_task() == 0


def test_reconcile_runs_on_the_beat_schedule():
    schedule = celery_app.conf.beat_schedule["reconcile-stale-sending"]
    assert schedule["task"] == reconcile_stale_sending_task.name


def test_reconcile_uses_a_fresh_session(db, setup_conversation):
    with patch(
        "app.tasks.reconcile_sending_task.MessageService.reconcile_stale_sending",
        return_value=[],
    ) as reconcile:
        assert reconcile_stale_sending_task() == 0
    reconcile.assert_called_once_with()
