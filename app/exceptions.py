"""
Gateway error taxonomy.

Services and commands raise these; `app.main` maps them to generic HTTP
responses. Messages are safe to show to the caller; anything diagnostic goes
to the log instead.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for errors surfaced at the API boundary."""

    status_code = 500
    public_detail = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.public_detail)
        self.message = message or self.public_detail


class ValidationError(GatewayError):
    """Malformed input, rejected before any mutation."""

    status_code = 422
    public_detail = "Invalid request"


class NotFoundError(GatewayError):
    """Missing, or owned by someone else. Never distinguishes the two."""

    status_code = 404
    public_detail = "Not found"


class TransportError(GatewayError):
    """Carrier or object-storage call failed."""

    status_code = 502
    public_detail = "Upstream service failed"


class StorageError(GatewayError):
    """Persistence failure; the current operation was rolled back."""

    status_code = 500
    public_detail = "Internal server error"


class ConflictError(GatewayError):
    """The record already exists (duplicate contact, username or carrier message id)."""

    status_code = 409
    public_detail = "Already exists"
