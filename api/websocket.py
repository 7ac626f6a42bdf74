"""WebSocket handler for best-effort job progress updates."""
import asyncio
import json
import logging
from typing import Optional, Set, Dict
from fastapi import WebSocket, WebSocketDisconnect
import redis.asyncio as redis
from shared.config import settings

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages WebSocket connections watching job updates."""

    def __init__(self):
        # Map of job_id to set of WebSocket connections
        self.active_connections: Dict[str, Set[WebSocket]] = {}
        # Connections watching every job
        self.global_connections: Set[WebSocket] = set()

    async def connect(self, websocket: WebSocket, job_id: Optional[str] = None):
        """Accept a new WebSocket connection."""
        await websocket.accept()

        if job_id:
            self.active_connections.setdefault(job_id, set()).add(websocket)
        else:
            self.global_connections.add(websocket)

    def disconnect(self, websocket: WebSocket, job_id: Optional[str] = None):
        """Remove a WebSocket connection."""
        if job_id and job_id in self.active_connections:
            self.active_connections[job_id].discard(websocket)
            if not self.active_connections[job_id]:
                del self.active_connections[job_id]
        else:
            self.global_connections.discard(websocket)

    async def send_to_job(self, job_id: str, message: dict):
        """Send message to all connections watching a specific job."""
        connections = list(self.active_connections.get(job_id, ()))
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception:
                self.disconnect(connection, job_id)

    async def broadcast(self, message: dict):
        """Send message to every connection watching all jobs."""
        for connection in list(self.global_connections):
            try:
                await connection.send_json(message)
            except Exception:
                self.global_connections.discard(connection)

    async def dispatch(self, message: dict):
        """Route one update to its job watchers and the global watchers."""
        job_id = message.get("job_id")
        if job_id:
            await self.send_to_job(job_id, message)
        await self.broadcast(message)


# Global connection manager
manager = ConnectionManager()


async def redis_subscriber(redis_client: redis.Redis):
    """Subscribe to the update channel and forward updates to WebSocket clients."""
    pubsub = redis_client.pubsub()
    await pubsub.subscribe(settings.redis_update_channel)

    try:
        async for message in pubsub.listen():
            if message["type"] != "message":
                continue
            try:
                data = json.loads(message["data"])
            except json.JSONDecodeError:
                logger.warning(f"Dropping malformed update: {message['data']!r}")
                continue
            await manager.dispatch(data)
    except asyncio.CancelledError:
        pass
    finally:
        await pubsub.unsubscribe(settings.redis_update_channel)
        await pubsub.aclose()


async def websocket_endpoint(websocket: WebSocket, job_id: Optional[str] = None):
    """WebSocket endpoint for job updates."""
    await manager.connect(websocket, job_id)

    try:
        while True:
            # Keep connection alive with heartbeat
            try:
                data = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.ws_heartbeat_interval
                )
                # Handle ping/pong
                if data == "ping":
                    await websocket.send_text("pong")
            except asyncio.TimeoutError:
                # Send heartbeat
                await websocket.send_json({"type": "heartbeat"})
    except WebSocketDisconnect:
        manager.disconnect(websocket, job_id)
