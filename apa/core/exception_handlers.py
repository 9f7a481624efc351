"""HTTP boundary for errors.

Every failure leaves the API as {"error", "message", "details"}. Domain errors
carry their own code; the status comes from STATUS_BY_CODE. Framework errors
(bad query params, unknown routes) and unexpected exceptions are folded into
the same body.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from apa.core.config import get_settings
from apa.domain.exceptions import ApaException

logger = logging.getLogger(__name__)

STATUS_BY_CODE: dict[str, int] = {
    "VALIDATION_ERROR": 400,
    "AUTHENTICATION_ERROR": 401,
    "PERMISSION_DENIED": 403,
    "RESOURCE_NOT_FOUND": 404,
    "FEATURE_DISABLED": 404,
    "ILLEGAL_TRANSITION": 409,
    "DUPLICATE_ACTIVE_LEAD": 409,
    "RECORD_ALREADY_EXISTS": 409,
    "IMAGE_UPLOAD_ERROR": 502,
    "AUTH_PROVIDER_ERROR": 502,
    "CONFIGURATION_PENDING": 503,
    "SERVICE_UNAVAILABLE": 503,
}

# Seconds a client should wait before retrying a transient store failure.
RETRY_AFTER_SECONDS = 5


def error_response(
    status_code: int,
    code: str,
    message: Any,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = {"error": code, "message": message, "details": details}
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)


def _on_apa_exception(request: Request, exc: ApaException) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.error_code, 400)
    headers = None
    if exc.error_code == "SERVICE_UNAVAILABLE":
        headers = {"Retry-After": str(RETRY_AFTER_SECONDS)}
    if status_code >= 500:
        # Upstream or setup trouble; the request itself was fine.
        logger.warning(
            "%s %s failed with %s: %s",
            request.method,
            request.url.path,
            exc.error_code,
            exc.message,
        )
    return error_response(status_code, exc.error_code, exc.message, exc.details, headers)


def _on_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed path/query parameters are reported like any other validation error."""
    return error_response(400, "VALIDATION_ERROR", "Invalid request parameters", exc.errors())


def _on_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, "HTTP_ERROR", exc.detail, headers=exc.headers)


def _on_rate_limited(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return error_response(429, "RATE_LIMITED", f"Too many requests: {exc.detail}")


def _on_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = str(exc) if get_settings().debug else "Internal server error"
    return error_response(500, "INTERNAL_ERROR", message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApaException, _on_apa_exception)
    app.add_exception_handler(RequestValidationError, _on_request_validation)
    app.add_exception_handler(StarletteHTTPException, _on_http_exception)
    app.add_exception_handler(RateLimitExceeded, _on_rate_limited)
    app.add_exception_handler(Exception, _on_unexpected)
