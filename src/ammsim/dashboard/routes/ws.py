"""WebSocket hub broadcasting metrics snapshots to feed clients."""

from __future__ import annotations

import json

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ammsim.models import MetricsSnapshot

log = structlog.get_logger(__name__)

router = APIRouter()


class MetricsHub:
    """Manages WebSocket connections and broadcasts JSON snapshots to all clients."""

    def __init__(self) -> None:
        self.connections: list[WebSocket] = []

    async def connect(self, ws: WebSocket) -> None:
        """Accept a WebSocket connection and add it to the active connections list."""
        await ws.accept()
        self.connections.append(ws)
        log.info("metrics_ws_connected", total=len(self.connections))

    def disconnect(self, ws: WebSocket) -> None:
        """Remove a WebSocket connection from the active connections list."""
        if ws in self.connections:
            self.connections.remove(ws)
        log.info("metrics_ws_disconnected", total=len(self.connections))

    async def broadcast(self, payload: str) -> None:
        """Send a text payload to all connected clients, removing broken connections."""
        for ws in self.connections.copy():
            try:
                await ws.send_text(payload)
            except Exception:
                self.connections.remove(ws)
                log.warning("metrics_ws_broadcast_error", remaining=len(self.connections))

    async def publish(self, snapshot: MetricsSnapshot) -> None:
        """Sampler publisher: serialise and broadcast one snapshot."""
        if not self.connections:
            return
        await self.broadcast(json.dumps(snapshot.to_dict()))


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """WebSocket endpoint streaming every sampled snapshot."""
    ws_hub: MetricsHub = websocket.app.state.hub
    await ws_hub.connect(websocket)
    try:
        while True:
            # Consume messages to keep connection alive
            await websocket.receive_text()
    except WebSocketDisconnect:
        ws_hub.disconnect(websocket)
