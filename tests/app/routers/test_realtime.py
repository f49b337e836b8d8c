"""Tests for the realtime WebSocket endpoint."""

from contextlib import ExitStack
from unittest.mock import patch
from uuid import uuid4

import pytest
from fastapi import WebSocketDisconnect
from sqlalchemy.exc import OperationalError

from app.commands.messages.mark_read_command import MarkReadCommand
from app.db import engine
from tests.fixtures.message_fixtures import make_conversation, make_message


def database_down():
    return OperationalError("SELECT 1", {}, Exception("database is unavailable"))


def ws_url(user):
    return f"/ws?user_id={user.id}"


def test_unknown_user_is_refused(client):
    with pytest.raises(WebSocketDisconnect) as exc_info:
        with client.websocket_connect(f"/ws?user_id={uuid4()}"):
            pass
    assert exc_info.value.code == 1008


def test_missing_user_is_refused(client):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws"):
            pass


def test_join_then_receive_status_updates(client, setup_user, setup_conversation):
    with client.websocket_connect(ws_url(setup_user)) as ws:
        ws.send_json({"action": "join", "conversation_id": str(setup_conversation.id)})
        joined = ws.receive_json()
        assert joined["event"] == "Joined"
        assert joined["payload"] == {"conversation_id": str(setup_conversation.id)}

        sent = client.post(
            "/messages/send",
            json={"to": setup_conversation.counterparty_phone_number, "content": "hi"},
        ).json()

        update = ws.receive_json()
        assert update["event"] == "MessageStatusUpdate"
        assert update["topic"] == f"conversation:{setup_conversation.id}"
        assert update["payload"]["message_id"] == sent["id"]
        assert update["payload"]["status"] == "sent"


def test_inbound_message_reaches_user_topic(client, setup_user, setup_contact):
    with client.websocket_connect(ws_url(setup_user)) as ws:
        client.post(
            "/webhooks/carrier",
            data={
                "MessageSid": "SM300",
                "From": f"whatsapp:{setup_contact.phone_number}",
                "Body": "incoming",
            },
        )
        event = ws.receive_json()

    assert event["event"] == "NewMessage"
    assert event["topic"] == f"user:{setup_user.id}"
    assert event["payload"]["content"] == "incoming"
    assert event["payload"]["status"] == "delivered"


def test_typing_reaches_other_devices_only(client, setup_user, setup_conversation):
    join = {"action": "join", "conversation_id": str(setup_conversation.id)}
    with client.websocket_connect(ws_url(setup_user)) as phone:
        phone.send_json(join)
        assert phone.receive_json()["event"] == "Joined"
        with client.websocket_connect(ws_url(setup_user)) as laptop:
            assert phone.receive_json()["event"] == "UserOnline"
            laptop.send_json(join)
            assert laptop.receive_json()["event"] == "Joined"

            phone.send_json(
                {
                    "action": "typing",
                    "conversation_id": str(setup_conversation.id),
                    "is_typing": True,
                }
            )
            typing = laptop.receive_json()
            assert typing["event"] == "TypingIndicator"
            assert typing["payload"]["user_id"] == str(setup_user.id)
            assert typing["payload"]["username"] == (
                setup_user.display_name or setup_user.username
            )
            assert typing["payload"]["is_typing"] is True


def test_read_signal_publishes_receipt(client, db, setup_user, setup_conversation):
    message = make_message(db, setup_conversation)
    with client.websocket_connect(ws_url(setup_user)) as ws:
        ws.send_json({"action": "join", "conversation_id": str(setup_conversation.id)})
        ws.receive_json()
        ws.send_json(
            {
                "action": "read",
                "conversation_id": str(setup_conversation.id),
                "message_id": message.id,
            }
        )
        receipt = ws.receive_json()

    assert receipt["event"] == "MessageRead"
    assert receipt["payload"]["message_id"] == message.id
    assert receipt["payload"]["read_by"] == str(setup_user.id)


def test_bad_frames_get_errors(client, db, setup_user, setup_another_user):
    theirs = make_conversation(db, setup_another_user, "+1999")
    with client.websocket_connect(ws_url(setup_user)) as ws:
        ws.send_text("{not json")
        assert ws.receive_json()["payload"] == {"detail": "Invalid JSON"}

        ws.send_json({"action": "dance"})
        assert ws.receive_json()["payload"] == {"detail": "Invalid signal"}

        ws.send_json({"action": "join", "conversation_id": str(theirs.id)})
        error = ws.receive_json()
        assert error["event"] == "Error"
        assert error["payload"] == {"detail": "Conversation not found"}


def test_idle_sockets_hold_no_database_connections(
    client, setup_user, setup_conversation
):
    url = ws_url(setup_user)
    join = {"action": "join", "conversation_id": str(setup_conversation.id)}
    baseline = engine.pool.checkedout()

    with ExitStack() as stack:
        for _ in range(20):
            ws = stack.enter_context(client.websocket_connect(url))
            ws.send_json(join)
            assert ws.receive_json()["event"] == "Joined"

        assert engine.pool.checkedout() == baseline
        assert client.get("/users/me").status_code == 200


def test_user_lookup_failure_closes_with_server_error(client, setup_user):
    with patch("app.routers.realtime.resolve_user", side_effect=database_down()):
        with pytest.raises(WebSocketDisconnect) as exc_info:
            with client.websocket_connect(ws_url(setup_user)):
                pass
    assert exc_info.value.code == 1011


def test_signal_failure_closes_with_server_error(
    client, db, setup_user, setup_conversation
):
    message = make_message(db, setup_conversation)
    with patch.object(MarkReadCommand, "execute", side_effect=database_down()):
        with client.websocket_connect(ws_url(setup_user)) as ws:
            ws.send_json(
                {
                    "action": "read",
                    "conversation_id": str(setup_conversation.id),
                    "message_id": message.id,
                }
            )
            with pytest.raises(WebSocketDisconnect) as exc_info:
                ws.receive_json()
    assert exc_info.value.code == 1011
