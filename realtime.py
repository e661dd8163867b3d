# realtime.py
import json
import logging

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class RealtimeHub:
    """Connected WebSocket clients. Broadcasts go to every client; clients filter by userId."""

    def __init__(self):
        self.connections = set()

    async def connect(self, websocket: WebSocket):
        await websocket.accept()
        self.connections.add(websocket)
        logger.info(f"Client connected to WebSocket ({len(self.connections)} open)")

    def disconnect(self, websocket: WebSocket):
        self.connections.discard(websocket)
        logger.info(f"Client disconnected from WebSocket ({len(self.connections)} open)")

    async def broadcast(self, payload):
        message = json.dumps(payload, default=str)
        sent = 0
        for websocket in list(self.connections):
            try:
                await websocket.send_text(message)
                sent += 1
            except Exception as e:
                logger.warning(f"Dropping WebSocket client after send error: {e}")
                self.connections.discard(websocket)
        return sent
