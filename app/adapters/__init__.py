"""Carrier and object-storage adapters."""

from app.adapters.base import BaseCarrierAdapter
from app.adapters.object_storage import (
    BaseObjectStorage,
    S3ObjectStorage,
    UnconfiguredObjectStorage,
)
from app.adapters.registry import (
    UnconfiguredCarrierAdapter,
    build_carrier_adapter,
    build_object_storage,
)
from app.adapters.twilio import TwilioAdapter

__all__ = [
    "BaseCarrierAdapter",
    "BaseObjectStorage",
    "S3ObjectStorage",
    "TwilioAdapter",
    "UnconfiguredCarrierAdapter",
    "UnconfiguredObjectStorage",
    "build_carrier_adapter",
    "build_object_storage",
]
