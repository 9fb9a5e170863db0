# src/ceidg_api/infrastructure/http/errors.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Framework-level exception handlers rendering ``ErrorEnvelope`` payloads.

Handlers:
    * ``RequestValidationError`` → 422 ``VALIDATION_ERROR``
    * ``HTTPException`` → its status with ``HTTP_ERROR`` (404 for unknown routes)
    * anything else → 500 ``INTERNAL_ERROR`` (logged, never echoed)

The ``trace_id`` of every envelope is the request id assigned by
:class:`~ceidg_api.infrastructure.middleware.request_id.RequestIdMiddleware`.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from starlette.responses import Response

from ceidg_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)


def _trace_id(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


def _headers(trace_id: str | None, extra: dict[str, str] | None = None) -> dict[str, str]:
    headers = dict(extra or {})
    if trace_id:
        headers["X-Request-ID"] = trace_id
    return headers


def error_envelope(
    *,
    code: str,
    http_status: int,
    message: str,
    details: dict[str, Any] | None = None,
    trace_id: str | None = None,
) -> dict[str, Any]:
    err: dict[str, Any] = {
        "code": code,
        "http_status": http_status,
        "message": message,
        "details": details or {},
        "trace_id": trace_id,
    }
    return {"error": err}


async def handle_validation_error(request: Request, exc: RequestValidationError) -> Response:
    trace_id = _trace_id(request)
    payload = error_envelope(
        code="VALIDATION_ERROR",
        http_status=422,
        message="Request validation failed",
        details={"errors": jsonable_encoder(exc.errors())},
        trace_id=trace_id,
    )
    return JSONResponse(status_code=422, content=payload, headers=_headers(trace_id))


async def handle_http_exception(request: Request, exc: HTTPException) -> Response:
    trace_id = _trace_id(request)
    payload = error_envelope(
        code="HTTP_ERROR",
        http_status=exc.status_code,
        message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
        details=None if isinstance(exc.detail, str) else {"detail": exc.detail},
        trace_id=trace_id,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=payload,
        headers=_headers(trace_id, dict(exc.headers or {})),
    )


async def handle_unhandled_exception(request: Request, exc: Exception) -> Response:
    trace_id = _trace_id(request)
    logger.error(
        "http.unhandled_exception",
        exc_info=exc,
        extra={"extra": {"path": request.url.path, "error_type": type(exc).__name__}},
    )
    payload = error_envelope(
        code="INTERNAL_ERROR",
        http_status=500,
        message="Internal server error",
        trace_id=trace_id,
    )
    return JSONResponse(status_code=500, content=payload, headers=_headers(trace_id))
