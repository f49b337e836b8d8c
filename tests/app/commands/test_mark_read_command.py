"""Tests for MarkReadCommand."""

from uuid import uuid4

import pytest

from app.commands.messages.mark_read_command import MarkReadCommand
from app.constants.messages import MessageDirection, MessageStatus
from app.exceptions import NotFoundError
from app.schemas.realtime import RealtimeEventName
from tests.fixtures.fakes import FakeConnection
from tests.fixtures.message_fixtures import make_message


@pytest.mark.asyncio
async def test_mark_read_publishes_receipt(db, setup_user, setup_conversation, hub):
    conn = FakeConnection()
    await hub.connect(conn, setup_user.id)
    hub.subscribe(conn, setup_conversation.id)
    message = make_message(db, setup_conversation)

    result = await MarkReadCommand(db, hub).execute(setup_user.id, message.id)

    assert result.status == MessageStatus.READ
    receipt = conn.events(RealtimeEventName.MESSAGE_READ)[0]["payload"]
    assert receipt == {
        "message_id": message.id,
        "conversation_id": str(setup_conversation.id),
        "read_by": str(setup_user.id),
    }


@pytest.mark.asyncio
async def test_mark_read_twice_publishes_once(db, setup_user, setup_conversation, hub):
    conn = FakeConnection()
    await hub.connect(conn, setup_user.id)
    hub.subscribe(conn, setup_conversation.id)
    message = make_message(db, setup_conversation)
    command = MarkReadCommand(db, hub)

    await command.execute(setup_user.id, message.id)
    await command.execute(setup_user.id, message.id)

    assert len(conn.events(RealtimeEventName.MESSAGE_READ)) == 1


@pytest.mark.asyncio
async def test_mark_read_of_foreign_message_is_not_found(
    db, setup_conversation, setup_another_user, hub
):
    message = make_message(db, setup_conversation)
    with pytest.raises(NotFoundError):
        await MarkReadCommand(db, hub).execute(setup_another_user.id, message.id)
    db.refresh(message)
    assert message.status == MessageStatus.DELIVERED


@pytest.mark.asyncio
async def test_failed_message_cannot_be_read(db, setup_user, setup_conversation, hub):
    message = make_message(
        db,
        setup_conversation,
        direction=MessageDirection.OUTBOUND,
        status=MessageStatus.FAILED,
    )
    result = await MarkReadCommand(db, hub).execute(setup_user.id, message.id)
    assert result.status == MessageStatus.FAILED


@pytest.mark.asyncio
async def test_mark_conversation_read(db, setup_user, setup_conversation, hub):
    unread = [make_message(db, setup_conversation) for _ in range(3)]
    outbound = make_message(
        db,
        setup_conversation,
        direction=MessageDirection.OUTBOUND,
        status=MessageStatus.SENT,
    )
    command = MarkReadCommand(db, hub)

    marked = await command.mark_conversation_read(setup_user.id, setup_conversation.id)

    assert sorted(m.id for m in marked) == sorted(m.id for m in unread)
    assert outbound.status == MessageStatus.SENT
    assert await command.mark_conversation_read(setup_user.id, setup_conversation.id) == []
    with pytest.raises(NotFoundError):
        await command.mark_conversation_read(setup_user.id, uuid4())
