"""WebSocket connection manager.

Used by the live-feed endpoint to track connections and their live-query
subscriptions.
"""

from apa.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
