"""
FastAPI application factory for the airstats REST API.

Serves read-only JSON views of the datasets; every error body is
``{"error": "<message>"}``.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from airstats.client import AirstatsClient
from airstats.config import Settings
from airstats.exceptions import (
    AirstatsError, InvalidParameterError, RecordNotFoundError,
)

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RecordNotFoundError)
    async def not_found_handler(request: Request, exc: RecordNotFoundError):
        return _error(404, str(exc))

    @app.exception_handler(InvalidParameterError)
    async def invalid_parameter_handler(request: Request, exc: InvalidParameterError):
        return _error(400, str(exc))

    @app.exception_handler(AirstatsError)
    async def upstream_handler(request: Request, exc: AirstatsError):
        logger.error("Request %s failed: %s", request.url.path, exc)
        return _error(500, f"Server error: {exc}")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_handler(request: Request, exc: RequestValidationError):
        messages = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        return _error(400, f"Invalid request: {messages}")


def create_app(settings: Optional[Settings] = None,
               client: Optional[AirstatsClient] = None) -> FastAPI:
    """
    FastAPI application factory.

    Args:
        settings: Process settings; read from the environment when omitted
        client: Prebuilt client (tests inject one backed by a fake store)
    """
    if settings is None:
        settings = Settings.from_env()
    if client is None:
        client = AirstatsClient.from_settings(settings)

    app = FastAPI(
        title="airstats API",
        description="Localized statistical datasets from the records table service",
        version="0.1.0",
    )
    app.state.settings = settings
    app.state.client = client

    _register_error_handlers(app)

    # Register routers
    from airstats.api.routers.datasets import router as datasets_router
    from airstats.api.routers.data import router as data_router
    from airstats.api.routers.reference import router as reference_router
    from airstats.api.routers.cache import router as cache_router

    app.include_router(datasets_router)
    app.include_router(data_router)
    app.include_router(reference_router)
    app.include_router(cache_router)

    return app
