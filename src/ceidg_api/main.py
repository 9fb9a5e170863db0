# src/ceidg_api/main.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Application Entry (Adapters Bootstrap)

Synopsis:
    FastAPI bootstrap that wires middleware, exception handlers and routers.
    Provides an application factory (`create_app`) and a module-level eager
    app (`app`) for tooling and ASGI servers.

Design:
    • Bootstrap only (no business logic).
    • Lifespan loads the CEIDG provider settings (the API key is required),
      builds the lookup object graph and closes it on shutdown. Importing
      this module therefore never needs CEIDG credentials.
    • Root JSON logging configured at import time.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.responses import Response as StarletteResponse

from ceidg_api import __version__
from ceidg_api.adapters.routers.companies_router import router as companies_router
from ceidg_api.adapters.routers.metrics_router import router as metrics_router
from ceidg_api.config.settings import Settings, get_settings
from ceidg_api.dependencies.ceidg import build_ceidg_services, close_ceidg_services
from ceidg_api.infrastructure.external_apis.ceidg.settings import CeidgSettings
from ceidg_api.infrastructure.http.errors import (
    handle_http_exception,
    handle_unhandled_exception,
    handle_validation_error,
)
from ceidg_api.infrastructure.logging.logger import (
    configure_root_logging,
    get_json_logger,
)
from ceidg_api.infrastructure.middleware.request_id import RequestIdMiddleware

configure_root_logging()
logger = get_json_logger(__name__)


def _stable_operation_id(route: APIRoute) -> str:
    """Deterministic operationId, e.g. ``get__v1_ceidg_companies_nip``."""
    methods = ",".join(sorted(route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "")
    return f"{methods.lower()}_{path.lower()}"


@asynccontextmanager
async def runtime_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the CEIDG lookup services and release them on shutdown.

    Args:
        app: FastAPI application instance.

    Yields:
        None: Control back to FastAPI to serve requests.
    """
    settings = get_settings()
    configure_root_logging(settings.log_level)
    services = build_ceidg_services(settings, CeidgSettings())
    app.state.settings = settings
    app.state.ceidg = services
    app.state.find_company_uc = services.use_case
    try:
        yield
    finally:
        await close_ceidg_services(services)
        logger.info("service_shutdown", extra={"extra": {"service": settings.service_name}})


def _patch_exception_handlers(app: FastAPI) -> None:
    """Replace default exception handlers with ErrorEnvelope renderers."""

    async def _http_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, HTTPException):
            raise exc
        return await handle_http_exception(request, exc)

    async def _validation_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, RequestValidationError):
            raise exc
        return await handle_validation_error(request, exc)

    async def _unhandled_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        return await handle_unhandled_exception(request, exc)

    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Fully configured application instance.
    """
    settings: Settings = get_settings()
    service_version = settings.service_version or __version__

    app = FastAPI(
        title="CEIDG API",
        version=service_version,
        description="Lookup of Polish sole-proprietorship records in CEIDG by NIP.",
        lifespan=runtime_lifespan,
        generate_unique_id_function=_stable_operation_id,
    )

    _patch_exception_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    app.include_router(companies_router)
    app.include_router(metrics_router)

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> JSONResponse:
        """Liveness probe."""
        return JSONResponse({"status": "ok"})

    logger.info(
        "service_startup",
        extra={
            "extra": {
                "service": settings.service_name,
                "env": settings.environment.value,
                "version": service_version,
            }
        },
    )
    return app


# Eager app for ASGI servers and tooling.
app: FastAPI = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "ceidg_api.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=int(os.getenv("PORT", "8080")),
    )
