"""
Webhook routes for carrier callbacks.

The carrier POSTs form-encoded updates here: inbound messages and
delivery-status changes. Webhooks carry no user identity; they are
authenticated by the carrier's request signature when enabled.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.commands.webhooks.carrier_command import CarrierWebhookCommand
from app.core.app_state import AppState
from app.db import get_db
from app.routers.utils.dependencies import get_app_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/carrier")
async def carrier_webhook(
    request: Request,
    db: Session = Depends(get_db),
    state: AppState = Depends(get_app_state),
) -> dict[str, str]:
    """
    Receive a carrier callback. Route it, then return 200 {"status": "ok"}.
    Validate X-Twilio-Signature if CARRIER_VALIDATE_SIGNATURE is set.
    """
    form = await request.form()
    fields = {key: str(value) for key, value in form.items()}
    command = CarrierWebhookCommand(db, state.carrier, state.hub, state.settings)
    return await command.execute(str(request.url), fields, dict(request.headers))
