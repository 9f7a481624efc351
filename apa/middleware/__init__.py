"""ASGI middleware."""

from apa.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
