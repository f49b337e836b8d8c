"""
Realtime WebSocket endpoint.

Clients connect to /ws?user_id=<id>, then send JSON signals:
join/leave a conversation, typing indicators and read receipts. Server
events arrive as {"event", "topic", "payload", "emitted_at"} envelopes.

A socket never holds a database session while idle: the user lookup and
each signal get their own short-lived session.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.commands.messages.mark_read_command import MarkReadCommand
from app.core.hub import RealtimeHub
from app.db import SessionLocal
from app.exceptions import GatewayError
from app.infra.logging_config import get_logger
from app.routers.utils.dependencies import resolve_user
from app.schemas.realtime import (
    ClientSignalEnvelope,
    JoinSignal,
    LeaveSignal,
    ReadSignal,
    RealtimeEventName,
    TypingSignal,
    conversation_topic,
)
from app.services.conversation_service import ConversationService

logger = get_logger("realtime")

router = APIRouter(tags=["realtime"])


@dataclass(frozen=True)
class SocketUser:
    """What a socket keeps about its user between signals."""

    id: UUID
    name: str


def _load_user(raw_user_id: Optional[str]) -> Optional[SocketUser]:
    with SessionLocal() as db:
        user = resolve_user(db, raw_user_id)
        if user is None:
            return None
        return SocketUser(id=user.id, name=user.display_name or user.username)


async def _handle_signal(
    websocket: WebSocket,
    hub: RealtimeHub,
    db: Session,
    user: SocketUser,
    frame: Any,
) -> None:
    try:
        signal = ClientSignalEnvelope.model_validate({"signal": frame}).signal
    except PydanticValidationError:
        await hub.send_to(
            websocket, RealtimeEventName.ERROR, {"detail": "Invalid signal"}
        )
        return

    conversation = ConversationService(db).get_conversation(
        user.id, signal.conversation_id
    )
    if conversation is None:
        await hub.send_to(
            websocket, RealtimeEventName.ERROR, {"detail": "Conversation not found"}
        )
        return
    conversation_id = str(conversation.id)

    if isinstance(signal, JoinSignal):
        hub.subscribe(websocket, conversation.id)
        await hub.send_to(
            websocket, RealtimeEventName.JOINED, {"conversation_id": conversation_id}
        )
    elif isinstance(signal, LeaveSignal):
        hub.unsubscribe(websocket, conversation.id)
        await hub.send_to(
            websocket, RealtimeEventName.LEFT, {"conversation_id": conversation_id}
        )
    elif isinstance(signal, TypingSignal):
        await hub.publish(
            conversation_topic(conversation.id),
            RealtimeEventName.TYPING_INDICATOR,
            {
                "conversation_id": conversation_id,
                "user_id": str(user.id),
                "username": user.name,
                "is_typing": signal.is_typing,
            },
            exclude=websocket,
        )
    elif isinstance(signal, ReadSignal):
        try:
            await MarkReadCommand(db, hub).execute(user.id, signal.message_id)
        except GatewayError as e:
            if e.status_code >= 500:
                raise
            await hub.send_to(websocket, RealtimeEventName.ERROR, {"detail": e.message})


@router.websocket("/ws")
async def realtime_socket(websocket: WebSocket, user_id: Optional[str] = None) -> None:
    """Live event stream for one device of one user."""
    try:
        user = _load_user(user_id)
    except SQLAlchemyError as e:
        logger.error("Realtime connect failed: user lookup error: %s", e)
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return
    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    hub: RealtimeHub = websocket.app.state.gateway.hub

    await websocket.accept()
    await hub.connect(websocket, user.id)
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except json.JSONDecodeError:
                await hub.send_to(
                    websocket, RealtimeEventName.ERROR, {"detail": "Invalid JSON"}
                )
                continue
            try:
                with SessionLocal() as db:
                    await _handle_signal(websocket, hub, db, user, frame)
            except (GatewayError, SQLAlchemyError) as e:
                logger.error("Closing realtime socket of user %s: %s", user.id, e)
                await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
                break
    except WebSocketDisconnect:
        logger.debug("Client of user %s disconnected", user.id)
    finally:
        await hub.disconnect(websocket)
