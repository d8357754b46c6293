"""
Live update relay.

Pushes change events to every connected WebSocket client. Delivery is
best effort: a client that fails to receive is dropped and nothing is
reported back to the sender.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import WebSocket

from app.logger import get_logger

logger = get_logger(__name__)

# Client events that are re-broadcast to everyone else
CLIENT_EVENTS = {
    "taskUpdate": "taskUpdated",
    "projectUpdate": "projectUpdated",
}


class NotificationRelay:
    """Manages WebSocket connections and fans events out to them."""

    def __init__(self):
        self.active_connections: Dict[int, WebSocket] = {}

    @property
    def connection_count(self) -> int:
        return len(self.active_connections)

    async def connect(self, websocket: WebSocket) -> int:
        """Accept and store a new WebSocket connection"""
        await websocket.accept()
        connection_id = id(websocket)
        self.active_connections[connection_id] = websocket
        logger.info(f"Client {connection_id} connected. Total connections: {self.connection_count}")
        return connection_id

    def disconnect(self, connection_id: int) -> None:
        """Remove a WebSocket connection"""
        if self.active_connections.pop(connection_id, None) is not None:
            logger.info(f"Client {connection_id} disconnected. Total connections: {self.connection_count}")

    async def broadcast(self, event: str, data: Any, exclude: Optional[int] = None) -> None:
        """Send an event to all connected clients except ``exclude``."""
        message = {
            "event": event,
            "data": data,
            "timestamp": datetime.now().isoformat(),
        }
        for connection_id, connection in list(self.active_connections.items()):
            if connection_id == exclude:
                continue
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Dropping client {connection_id} after failed send of {event}: {e}")
                self.disconnect(connection_id)

    async def handle_client_message(self, connection_id: int, message: Dict[str, Any]) -> None:
        """Relay a client-originated update to the other clients."""
        outgoing = CLIENT_EVENTS.get(message.get("event"))
        if outgoing is None:
            logger.debug(f"Ignoring unknown client event from {connection_id}: {message.get('event')}")
            return
        await self.broadcast(outgoing, message.get("data"), exclude=connection_id)


# Global relay instance
relay = NotificationRelay()
