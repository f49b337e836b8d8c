"""
Realtime fan-out hub.

Tracks which live connections belong to which user and which topics they
subscribe to, and delivers event envelopes to topic members. Membership is
ephemeral: it is lost on restart and rebuilt as clients reconnect.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Optional, Protocol
from uuid import UUID

from app.schemas.realtime import (
    RealtimeEvent,
    RealtimeEventName,
    conversation_topic,
    user_topic,
)

logger = logging.getLogger(__name__)


class Connection(Protocol):
    """Anything that can push JSON to a client (a Starlette WebSocket qualifies)."""

    async def send_json(self, data: Any) -> None: ...


class RealtimeHub:
    """
    Topic membership for live connections.

    Mutations and snapshots run under a lock; sends happen outside it, so a
    slow client never blocks membership changes. Sends to a topic's members
    run concurrently, each bounded by `send_timeout`; a connection whose
    send fails or times out is dropped.
    """

    def __init__(self, send_timeout: float = 5.0) -> None:
        self.send_timeout = send_timeout
        self._lock = threading.Lock()
        self._users: dict[Connection, UUID] = {}
        self._topics: dict[str, set[Connection]] = {}
        self._memberships: dict[Connection, set[str]] = {}

    def _join(self, connection: Connection, topic: str) -> None:
        self._topics.setdefault(topic, set()).add(connection)
        self._memberships.setdefault(connection, set()).add(topic)

    def _leave(self, connection: Connection, topic: str) -> None:
        members = self._topics.get(topic)
        if members is not None:
            members.discard(connection)
            if not members:
                del self._topics[topic]
        topics = self._memberships.get(connection)
        if topics is not None:
            topics.discard(topic)

    def _drop(self, connection: Connection) -> Optional[UUID]:
        user_id = self._users.pop(connection, None)
        for topic in self._memberships.pop(connection, set()):
            members = self._topics.get(topic)
            if members is not None:
                members.discard(connection)
                if not members:
                    del self._topics[topic]
        return user_id

    def user_of(self, connection: Connection) -> Optional[UUID]:
        with self._lock:
            return self._users.get(connection)

    def members(self, topic: str) -> set[Connection]:
        with self._lock:
            return set(self._topics.get(topic, ()))

    def topics_of(self, connection: Connection) -> set[str]:
        with self._lock:
            return set(self._memberships.get(connection, ()))

    def is_online(self, user_id: UUID) -> bool:
        return bool(self.members(user_topic(user_id)))

    @property
    def connection_count(self) -> int:
        with self._lock:
            return len(self._users)

    async def connect(self, connection: Connection, user_id: UUID) -> None:
        """Register a connection under its user topic and announce the user online."""
        with self._lock:
            self._users[connection] = user_id
            self._join(connection, user_topic(user_id))
        logger.info("Realtime connection opened for user %s", user_id)
        await self.broadcast(
            RealtimeEventName.USER_ONLINE,
            {"user_id": str(user_id)},
            exclude=connection,
        )

    async def disconnect(self, connection: Connection) -> None:
        """Drop every membership of a connection and announce the user offline."""
        with self._lock:
            user_id = self._drop(connection)
        if user_id is None:
            return
        logger.info("Realtime connection closed for user %s", user_id)
        await self.broadcast(RealtimeEventName.USER_OFFLINE, {"user_id": str(user_id)})

    def subscribe(self, connection: Connection, conversation_id: UUID) -> str:
        """Join a conversation topic. Ownership is checked by the caller."""
        topic = conversation_topic(conversation_id)
        with self._lock:
            if connection in self._users:
                self._join(connection, topic)
        return topic

    def unsubscribe(self, connection: Connection, conversation_id: UUID) -> str:
        topic = conversation_topic(conversation_id)
        with self._lock:
            self._leave(connection, topic)
        return topic

    async def _deliver(
        self, targets: set[Connection], event: RealtimeEvent
    ) -> int:
        data = event.model_dump(mode="json")
        connections = list(targets)
        results = await asyncio.gather(
            *(
                asyncio.wait_for(connection.send_json(data), self.send_timeout)
                for connection in connections
            ),
            return_exceptions=True,
        )
        failed: list[Connection] = []
        for connection, result in zip(connections, results):
            if isinstance(result, BaseException):
                logger.warning(
                    "Dropping realtime connection after send failure: %r", result
                )
                failed.append(connection)
        delivered = len(connections) - len(failed)
        if failed:
            with self._lock:
                for connection in failed:
                    self._drop(connection)
        return delivered

    async def publish(
        self,
        topic: str,
        event: RealtimeEventName,
        payload: dict[str, Any],
        exclude: Optional[Connection] = None,
    ) -> int:
        """Deliver an event to every member of a topic. Returns the number of successful sends."""
        targets = self.members(topic)
        targets.discard(exclude)
        if not targets:
            return 0
        return await self._deliver(
            targets, RealtimeEvent(event=event, topic=topic, payload=payload)
        )

    async def broadcast(
        self,
        event: RealtimeEventName,
        payload: dict[str, Any],
        exclude: Optional[Connection] = None,
    ) -> int:
        with self._lock:
            targets = set(self._users)
        targets.discard(exclude)
        if not targets:
            return 0
        return await self._deliver(targets, RealtimeEvent(event=event, payload=payload))

    async def send_to(
        self, connection: Connection, event: RealtimeEventName, payload: dict[str, Any]
    ) -> None:
        """Reply to a single connection (acks and errors)."""
        await self._deliver({connection}, RealtimeEvent(event=event, payload=payload))
