"""Webhook command handlers."""

from app.commands.webhooks.carrier_command import CarrierWebhookCommand

__all__ = ["CarrierWebhookCommand"]
