# src/ceidg_api/adapters/schemas/http/envelopes.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""HTTP Envelopes (Adapters Layer).

Purpose:
    Canonical transport-facing HTTP envelopes:
      - ErrorEnvelope
      - SuccessEnvelope[T]
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ceidg_api.adapters.schemas.http.base import BaseHTTPSchema

__all__ = [
    "ErrorObject",
    "ErrorEnvelope",
    "SuccessEnvelope",
]


class ErrorObject(BaseModel):
    """Structured error object inside ErrorEnvelope.

    Error codes are UPPER_SNAKE_CASE, stable across releases, and testable:
        - COMPANY_NOT_FOUND: no company for the NIP (or malformed NIP).
        - CEIDG_UNAVAILABLE: registry unavailable; retry after ``Retry-After``.
        - VALIDATION_ERROR: request validation failed.
        - INTERNAL_ERROR: unexpected server error.
    """

    model_config = ConfigDict(
        title="ErrorObject",
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "code": "CEIDG_UNAVAILABLE",
                    "http_status": 503,
                    "message": "Unable to fetch company data from CEIDG. Please try again later.",
                    "details": {"retry_after_s": 60},
                    "trace_id": "req-123",
                }
            ]
        },
    )

    code: str = Field(..., description="Stable machine-readable error code.")
    http_status: int = Field(..., description="Associated HTTP status.")
    message: str = Field(..., description="Human-readable error description.")
    details: dict[str, Any] | None = Field(
        default=None,
        description="Optional structured details safe for clients.",
    )
    trace_id: str | None = Field(
        default=None,
        description="Request correlation identifier.",
    )


class ErrorEnvelope(BaseHTTPSchema):
    r"""Canonical error envelope: {"error": ErrorObject}."""

    model_config = ConfigDict(
        title="ErrorEnvelope",
        extra="forbid",
        json_schema_extra={
            "examples": [
                {
                    "error": {
                        "code": "COMPANY_NOT_FOUND",
                        "http_status": 404,
                        "message": "Company with NIP 1234567890 not found in CEIDG registry",
                        "details": {},
                        "trace_id": "req-456",
                    }
                }
            ]
        },
    )

    error: ErrorObject = Field(..., description="Structured error details.")


class SuccessEnvelope[T](BaseHTTPSchema):
    r"""Success envelope for non-paginated responses: {"data": T}."""

    model_config = ConfigDict(
        title="SuccessEnvelope",
        extra="forbid",
    )

    data: T = Field(..., description="Returned resource or value.")
