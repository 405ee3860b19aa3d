"""WebSocket connection manager for the tag change stream.

Connections subscribe to channels (one per tag collection). The manager
is registered as an EventDispatcher subscriber; every committed tag change
event is pushed to the connections of the event's collection.

Delivery is local to this instance and best-effort: a connection whose send
fails or times out is dropped and the client is expected to reconnect and
re-read the listing.
"""

from __future__ import annotations

import asyncio
from collections import defaultdict
import contextlib
from dataclasses import dataclass, field
import logging
import time
from typing import TYPE_CHECKING, Any
from uuid import uuid4

from campus_service.core.settings import get_websocket_settings
from campus_service.features.tags.events import TagArchived, TagChangeEvent, TagDeleted

if TYPE_CHECKING:
    from datetime import datetime

    from fastapi import WebSocket

    from campus_service.core.events import DomainEvent
    from campus_service.core.settings import WebSocketSettings

logger = logging.getLogger(__name__)


@dataclass
class ConnectionInfo:
    """Metadata about a WebSocket connection."""

    connection_id: str
    websocket: WebSocket
    channels: set[str] = field(default_factory=set)
    user_id: str | None = None
    sub_after: datetime | None = None
    connected_at: float = field(default_factory=time.time)

    def accepts(self, event: TagChangeEvent) -> bool:
        """Apply the ``sub_after`` filter; removals are always delivered."""
        if self.sub_after is None or event.tag is None or isinstance(event, (TagArchived, TagDeleted)):
            return True
        return event.tag.last_update_time > self.sub_after


class ConnectionManager:
    """Tracks WebSocket connections per channel.

    Example:
        manager = ConnectionManager()
        dispatcher.subscribe(manager.handle_event, name="realtime")

        connection_id = await manager.connect(websocket, ["tags"])
        try:
            async for message in websocket.iter_text():
                ...
        finally:
            await manager.disconnect(connection_id)
    """

    def __init__(self, settings: WebSocketSettings | None = None) -> None:
        self._settings = settings or get_websocket_settings()
        # connection_id -> ConnectionInfo
        self._connections: dict[str, ConnectionInfo] = {}
        # channel -> set of connection_ids
        self._channel_connections: dict[str, set[str]] = defaultdict(set)

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    async def connect(
        self,
        websocket: WebSocket,
        channels: list[str] | None = None,
        user_id: str | None = None,
        sub_after: datetime | None = None,
    ) -> str:
        """Accept a WebSocket and subscribe it to ``channels``.

        With ``sub_after``, added and updated events of tags last updated at
        or before that instant are not sent to this connection.

        Raises:
            ConnectionRefusedError: If max connections reached
        """
        if len(self._connections) >= self._settings.max_connections:
            logger.warning(
                "Connection refused: max connections reached",
                extra={"max": self._settings.max_connections},
            )
            raise ConnectionRefusedError("Maximum connections reached")

        await websocket.accept()

        connection_id = str(uuid4())
        self._connections[connection_id] = ConnectionInfo(
            connection_id=connection_id,
            websocket=websocket,
            user_id=user_id,
            sub_after=sub_after,
        )
        for channel in channels or []:
            self.subscribe(connection_id, channel)

        logger.info(
            "WebSocket connected",
            extra={
                "connection_id": connection_id,
                "channels": channels or [],
                "total_connections": len(self._connections),
            },
        )
        return connection_id

    async def disconnect(self, connection_id: str) -> None:
        conn_info = self._connections.pop(connection_id, None)
        if conn_info is None:
            return

        for channel in conn_info.channels:
            self._channel_connections[channel].discard(connection_id)
            if not self._channel_connections[channel]:
                del self._channel_connections[channel]

        with contextlib.suppress(Exception):
            await conn_info.websocket.close()

        logger.info(
            "WebSocket disconnected",
            extra={
                "connection_id": connection_id,
                "duration_seconds": time.time() - conn_info.connected_at,
                "total_connections": len(self._connections),
            },
        )

    def subscribe(self, connection_id: str, channel: str) -> bool:
        conn_info = self._connections.get(connection_id)
        if conn_info is None:
            return False
        conn_info.channels.add(channel)
        self._channel_connections[channel].add(connection_id)
        return True

    async def broadcast(self, channel: str, message: dict[str, Any]) -> int:
        """Send ``message`` to every connection of ``channel``.

        Returns:
            Number of connections the message was delivered to.
        """
        sent = 0
        for connection_id in list(self._channel_connections.get(channel, ())):
            if await self.send_to_connection(connection_id, message):
                sent += 1
        return sent

    async def send_to_connection(self, connection_id: str, message: dict[str, Any]) -> bool:
        conn_info = self._connections.get(connection_id)
        if conn_info is None:
            return False
        try:
            await asyncio.wait_for(
                conn_info.websocket.send_json(message),
                timeout=self._settings.send_timeout,
            )
            return True
        except Exception as e:
            logger.warning(
                "Failed to send message to connection",
                extra={"connection_id": connection_id, "error": str(e)},
            )
            # Connection is likely dead, remove it
            await self.disconnect(connection_id)
            return False

    async def handle_event(self, event: DomainEvent) -> None:
        """EventDispatcher subscriber: forward tag changes to their collection."""
        if not isinstance(event, TagChangeEvent):
            return
        message = event.to_message()
        sent = 0
        for connection_id in list(self._channel_connections.get(event.collection, ())):
            conn_info = self._connections.get(connection_id)
            if conn_info is None or not conn_info.accepts(event):
                continue
            if await self.send_to_connection(connection_id, message):
                sent += 1
        logger.debug(
            "Tag change broadcast",
            extra={"event_type": event.event_type, "collection": event.collection, "sent": sent},
        )

    async def close_all(self) -> None:
        """Close every connection (application shutdown)."""
        for connection_id in list(self._connections):
            await self.disconnect(connection_id)
