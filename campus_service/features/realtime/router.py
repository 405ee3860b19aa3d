"""WebSocket router for the tag change stream.

Endpoint:
    WS /realtime/tags?collection=tags&subAfter=1760000000000

``subAfter`` (epoch milliseconds, optional) drops added and updated events
of tags whose last update is not later than that instant.

Server → client:
    {"type": "connected", "connectionId": "...", "collection": "tags"}
    {"event": "archived", "collection": "tags", "tagId": "...", "tag": {...}, ...}
    {"type": "pong"}

Client → server:
    "ping" or {"type": "ping"}; anything else is ignored.
"""

from __future__ import annotations

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from campus_service.core.database import from_epoch_millis
from campus_service.core.settings import get_websocket_settings
from campus_service.features.tags.missions import COLLECTIONS

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/realtime", tags=["realtime"])


def _is_ping(raw: str) -> bool:
    if raw.strip().lower() == "ping":
        return True
    try:
        message = json.loads(raw)
    except ValueError:
        return False
    return isinstance(message, dict) and message.get("type") == "ping"


@router.websocket("/tags")
async def tag_changes(
    websocket: WebSocket,
    collection: Annotated[str, Query(description="Tag collection to follow")] = "tags",
    sub_after: Annotated[str | None, Query(alias="subAfter", description="Epoch milliseconds")] = None,
) -> None:
    """Stream added / updated / archived / deleted events of a collection."""
    if not get_websocket_settings().enabled:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER, reason="WebSocket disabled")
        return
    if collection not in COLLECTIONS:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Unknown collection")
        return
    after = None
    if sub_after is not None:
        try:
            after = from_epoch_millis(int(sub_after))
        except (ValueError, OverflowError):
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Invalid subAfter timestamp")
            return

    manager = websocket.app.state.realtime
    try:
        connection_id = await manager.connect(websocket, channels=[collection], sub_after=after)
    except ConnectionRefusedError:
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER, reason="Too many connections")
        return

    try:
        await websocket.send_json(
            {"type": "connected", "connectionId": connection_id, "collection": collection}
        )
        while True:
            raw = await websocket.receive_text()
            if _is_ping(raw):
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        logger.debug("Client closed the change stream", extra={"connection_id": connection_id})
    finally:
        await manager.disconnect(connection_id)
