"""Messages API: outbound send, conversation history and read receipts."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.commands.messages.mark_read_command import MarkReadCommand
from app.commands.outbound.send_outbound_command import SendOutboundCommand
from app.core.app_state import AppState
from app.db import get_db
from app.infra.logging_config import get_logger
from app.models.user import User
from app.routers.utils.dependencies import get_app_state, get_current_user
from app.schemas.message import MessageRead, SendMessageRequest
from app.services.message_service import MessageService

logger = get_logger("messages")

router = APIRouter(
    prefix="/messages",
    tags=["messages"],
    responses={404: {"description": "Not found"}},
)


@router.post("/send", response_model=MessageRead)
async def send_message(
    body: SendMessageRequest,
    current_user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> MessageRead:
    """
    Send a message to a counterparty. The carrier outcome is reported in
    `status` (`sent` or `failed`); a failed send still answers 200.
    """
    command = SendOutboundCommand(db, state.carrier, state.storage, state.hub)
    message = await command.execute(current_user.id, body)
    logger.info(
        "User %s sent message %s (%s)", current_user.id, message.id, message.status
    )
    return MessageService(db).to_read(message)


@router.get("/conversations/{conversation_id}", response_model=List[MessageRead])
def list_conversation_messages(
    conversation_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> List[MessageRead]:
    """Messages of a conversation in send order. Empty if the conversation is not yours."""
    svc = MessageService(db)
    return [
        svc.to_read(message)
        for message in svc.list_for_conversation(current_user.id, conversation_id)
    ]


@router.post("/{message_id}/read", response_model=MessageRead)
async def mark_message_read(
    message_id: int,
    current_user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> MessageRead:
    """Record a read receipt for one message."""
    message = await MarkReadCommand(db, state.hub).execute(current_user.id, message_id)
    return MessageService(db).to_read(message)
