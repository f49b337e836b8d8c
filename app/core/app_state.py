from __future__ import annotations

from app.adapters.base import BaseCarrierAdapter
from app.adapters.object_storage import BaseObjectStorage
from app.adapters.registry import build_carrier_adapter, build_object_storage
from app.config import Settings
from app.core.hub import RealtimeHub


class AppState:
    """Process-wide collaborators, built once at startup and kept on `app.state.gateway`."""

    def __init__(
        self,
        settings: Settings,
        carrier: BaseCarrierAdapter | None = None,
        storage: BaseObjectStorage | None = None,
        hub: RealtimeHub | None = None,
    ) -> None:
        self.settings = settings
        self.carrier = carrier or build_carrier_adapter(settings)
        self.storage = storage or build_object_storage(settings)
        self.hub = hub or RealtimeHub(settings.realtime_send_timeout_seconds)

    async def aclose(self) -> None:
        await self.carrier.aclose()
