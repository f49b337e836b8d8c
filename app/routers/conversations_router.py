"""Conversations API: listing, explicit creation and read-all."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.commands.messages.mark_read_command import MarkReadCommand
from app.core.app_state import AppState
from app.db import get_db
from app.models.user import User
from app.routers.utils.dependencies import get_app_state, get_current_user
from app.schemas.conversation import (
    ConversationCreate,
    ConversationRead,
    ConversationSummary,
    MarkReadResult,
)
from app.services.contact_service import ContactService
from app.services.conversation_service import ConversationService

router = APIRouter(
    prefix="/conversations",
    tags=["conversations"],
    responses={404: {"description": "Not found"}},
)


@router.get("", response_model=List[ConversationSummary])
def list_conversations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> List[ConversationSummary]:
    """List conversations, most recent activity first."""
    return ConversationService(db).list_summaries(current_user.id)


@router.post("", response_model=ConversationRead)
def create_conversation(
    data: ConversationCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ConversationRead:
    """Get or create the conversation with a counterparty."""
    hint = data.counterparty_name
    if not hint:
        contact = ContactService(db).get_contact_by_phone(
            current_user.id, data.counterparty_address
        )
        hint = contact.display_name if contact is not None else None
    conversation, _ = ConversationService(db).get_or_create(
        current_user.id, data.counterparty_address, hint
    )
    return ConversationRead.model_validate(conversation)


@router.get("/{conversation_id}", response_model=ConversationRead)
def get_conversation(
    conversation_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ConversationRead:
    conversation = ConversationService(db).require_conversation(
        current_user.id, conversation_id
    )
    return ConversationRead.model_validate(conversation)


@router.post("/{conversation_id}/read", response_model=MarkReadResult)
async def mark_conversation_read(
    conversation_id: UUID,
    current_user: User = Depends(get_current_user),
    state: AppState = Depends(get_app_state),
    db: Session = Depends(get_db),
) -> MarkReadResult:
    """Mark every unread inbound message of the conversation read."""
    marked = await MarkReadCommand(db, state.hub).mark_conversation_read(
        current_user.id, conversation_id
    )
    return MarkReadResult(conversation_id=conversation_id, marked=len(marked))


@router.delete("/{conversation_id}", status_code=204)
def delete_conversation(
    conversation_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> None:
    """Delete a conversation and its messages."""
    ConversationService(db).delete_conversation(current_user.id, conversation_id)
