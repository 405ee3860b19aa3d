"""Realtime WebSocket infrastructure."""

from campus_service.infra.realtime.manager import ConnectionInfo, ConnectionManager

__all__ = ["ConnectionInfo", "ConnectionManager"]
