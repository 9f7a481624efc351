"""Request-scoped context (contextvars).

The request id is set by RequestIDMiddleware for each HTTP request and
WebSocket connection and read by the logging filter, so every log line
written while serving a request carries its id.
"""

from contextvars import ContextVar, Token

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


def get_request_id() -> str:
    return _request_id.get()


def bind_request_id(request_id: str) -> Token[str]:
    """Set the current request id; pass the token to reset_request_id when done."""
    return _request_id.set(request_id)


def reset_request_id(token: Token[str]) -> None:
    _request_id.reset(token)
