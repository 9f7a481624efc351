"""Request id middleware.

Every HTTP request and WebSocket connection gets an id: the client's
X-Request-ID when it is a short token of safe characters, otherwise a fresh
uuid4 hex. HTTP responses echo it. The id is bound to the request context
for log lines (see apa.shared.context).
"""

import re
import uuid
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from apa.shared.context import bind_request_id, reset_request_id

Scope = MutableMapping[str, Any]
Message = MutableMapping[str, Any]
Receive = Callable[[], Awaitable[Message]]
Send = Callable[[Message], Awaitable[None]]
ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

_SAFE_ID = re.compile(r"[A-Za-z0-9_-]{1,64}")


def _client_request_id(scope: Scope, header: bytes) -> str | None:
    for name, value in scope.get("headers") or ():
        if name.lower() == header:
            candidate = value.decode("latin-1").strip()
            return candidate if _SAFE_ID.fullmatch(candidate) else None
    return None


class RequestIDMiddleware:
    """Raw ASGI middleware (lifespan scopes pass through)."""

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID") -> None:
        self.app = app
        self.header_name = header_name
        self._header = header_name.lower().encode("latin-1")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] not in ("http", "websocket"):
            await self.app(scope, receive, send)
            return
        request_id = _client_request_id(scope, self._header) or uuid.uuid4().hex
        scope.setdefault("state", {})["request_id"] = request_id

        async def send_with_id(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (self._header, request_id.encode("latin-1")),
                ]
            await send(message)

        token = bind_request_id(request_id)
        try:
            await self.app(scope, receive, send_with_id)
        finally:
            reset_request_id(token)
