"""WebSocket connection manager.

Holds active connections and the live-query subscriptions each one owns.
Use via app.state.ws_manager (set in lifespan). Subscriptions are torn down
when their connection goes away.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from fastapi import WebSocket

from apa.application.live_query import Subscription

logger = logging.getLogger(__name__)


class _Connection:
    def __init__(self) -> None:
        self.subscriptions: list[Subscription] = []
        self.send_lock = asyncio.Lock()


class ConnectionManager:
    """Manages WebSocket connections and their subscriptions.

    - send() serializes writes per connection (snapshot tasks and the
      receive loop share the socket).
    - disconnect() unsubscribes everything the connection started.
    - connection_count is lock-protected for concurrent access.
    """

    def __init__(self) -> None:
        """Initialize with no connections."""
        self._connections: dict[WebSocket, _Connection] = {}
        self._lock = asyncio.Lock()

    async def connect(self, websocket: WebSocket) -> None:
        """Accept and register a new connection."""
        await websocket.accept()
        async with self._lock:
            self._connections[websocket] = _Connection()

    async def track(self, websocket: WebSocket, subscription: Subscription) -> None:
        """Attach a live-query subscription to a connection (stopped on disconnect)."""
        async with self._lock:
            connection = self._connections.get(websocket)
        if connection is None:
            await subscription.unsubscribe()
            return
        connection.subscriptions.append(subscription)

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> bool:
        """Send JSON to one connection. Returns False if it is gone or the send failed."""
        async with self._lock:
            connection = self._connections.get(websocket)
        if connection is None:
            return False
        async with connection.send_lock:
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.debug("WebSocket send failed: %s", e)
                return False
        return True

    async def disconnect(self, websocket: WebSocket) -> None:
        """Remove a connection and stop its subscriptions (call on disconnect)."""
        async with self._lock:
            connection = self._connections.pop(websocket, None)
        if connection is None:
            return
        for subscription in connection.subscriptions:
            await subscription.unsubscribe()

    async def close_all(self) -> None:
        """Disconnect every client (app shutdown)."""
        async with self._lock:
            websockets = list(self._connections)
        for websocket in websockets:
            await self.disconnect(websocket)
            try:
                await websocket.close(code=1001)
            except Exception as e:
                logger.debug("WebSocket close failed: %s", e)

    async def get_connection_count(self) -> int:
        """Return the number of active connections (lock-safe)."""
        async with self._lock:
            return len(self._connections)
