"""
Warden - WebSocket Manager
============================
Pushes console events to every connected browser.

Message types (server -> client):
    - "alert"    : The visible alert changed ({"alert": {...}} or {"alert": null})
    - "navigate" : The browser must replace its route ({"path": "/login?next=/"})

Message types (client -> server):
    - "route"    : The browser reports its current route ({"path": "/instances"})

Message format:
    {
        "type": "alert",
        "data": { ... },
        "timestamp": "2026-10-19T12:00:00+00:00"
    }
"""

import json
import logging
from datetime import datetime, timezone
from fastapi import WebSocket
from typing import Any

from client.alerts import AlertMessage

logger = logging.getLogger(__name__)


class WebSocketManager:
    """
    Manages browser WebSocket connections and message broadcasting.

    Attributes:
        active_connections: Set of currently connected WebSocket instances.
    """

    def __init__(self):
        self.active_connections: set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept a new WebSocket connection and add it to the active set."""
        await websocket.accept()
        self.active_connections.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self.active_connections.discard(websocket)

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> None:
        """Send a message to one client."""
        await websocket.send_text(_encode(message))

    async def broadcast(self, message: dict[str, Any]) -> None:
        """
        Send a message to all connected clients.

        Clients whose send fails are dropped from the active set.
        """
        payload = _encode(message)
        disconnected = set()

        for ws in list(self.active_connections):
            try:
                await ws.send_text(payload)
            except Exception as e:
                # Client disconnected unexpectedly
                logger.debug("Dropping WebSocket client: %s", e)
                disconnected.add(ws)

        self.active_connections -= disconnected

    async def send_alert(self, alert: AlertMessage | None) -> None:
        """Broadcast the visible alert (None when cleared)."""
        await self.broadcast({"type": "alert", "data": alert_payload(alert)})

    async def send_navigate(self, path: str) -> None:
        """Ask every browser to replace its route."""
        await self.broadcast({"type": "navigate", "data": {"path": path}})

    @property
    def client_count(self) -> int:
        return len(self.active_connections)


def alert_payload(alert: AlertMessage | None) -> dict[str, Any]:
    return {"alert": alert.to_dict() if alert else None}


def _encode(message: dict[str, Any]) -> str:
    if "timestamp" not in message:
        message["timestamp"] = datetime.now(timezone.utc).isoformat()
    return json.dumps(message, ensure_ascii=False)
