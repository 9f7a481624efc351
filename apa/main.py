"""ASGI entry point: `uvicorn apa.main:app`.

create_app() only wires things together. Startup work lives in
apa.core.lifespan, error mapping in apa.core.exception_handlers. Settings are
read when create_app() runs, so tests can set the environment first.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apa.api.v1 import api_router
from apa.core.config import get_settings
from apa.core.exception_handlers import register_exception_handlers
from apa.core.lifespan import create_lifespan
from apa.core.limiter import limiter
from apa.middleware import RequestIDMiddleware

API_PREFIX = "/api/v1"


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    # slowapi reads the limiter from app.state; disabled limits still decorate routes.
    limiter.enabled = settings.rate_limit_enabled
    app.state.limiter = limiter
    register_exception_handlers(app)

    # Last added runs first, so every response (CORS preflight too) gets a request id.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[settings.request_id_header],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)

    app.include_router(api_router, prefix=API_PREFIX)
    return app


app = create_app()
