import logging
from typing import Dict, List, Optional
from fastapi import WebSocket
import uuid

logger = logging.getLogger(__name__)

class ConnectionManager:
    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket) -> str:
        """Connect a websocket and return its client_id"""
        await websocket.accept()
        client_id = str(uuid.uuid4())
        self.active_connections[client_id] = websocket
        logger.info(f"Client {client_id} connected ({len(self.active_connections)} active)")
        return client_id

    async def disconnect(self, websocket: WebSocket) -> None:
        """Disconnect a websocket"""
        client_id = self._client_id(websocket)
        if client_id:
            del self.active_connections[client_id]
            logger.info(f"Client {client_id} disconnected")

    async def send_personal_message(self, websocket: WebSocket, topic: str, payload: dict):
        """Send a message to a specific client"""
        message = {"topic": topic, "payload": payload}
        await websocket.send_json(message)

    async def broadcast_message(self, topic: str, payload: dict):
        """Broadcast a message to all connected clients"""
        message = {"topic": topic, "payload": payload}
        disconnected: List[WebSocket] = []

        for client_id, connection in list(self.active_connections.items()):
            try:
                await connection.send_json(message)
            except Exception as e:
                logger.warning(f"Failed to send '{topic}' to {client_id}: {e}")
                disconnected.append(connection)

        # Clean up disconnected clients
        for connection in disconnected:
            await self.disconnect(connection)

    def _client_id(self, websocket: WebSocket) -> Optional[str]:
        for client_id, conn in self.active_connections.items():
            if conn is websocket:
                return client_id
        return None
