# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Presenter primitives shared by HTTP routers.

A presenter turns an application result into an envelope plus the headers
that go with it; routers only copy the outcome onto the framework response.

    * success → ``SuccessEnvelope`` with a strong ``ETag`` over the
      canonical JSON body, and ``X-Request-ID``;
    * error → ``ErrorEnvelope`` with ``X-Request-ID`` and any extra headers
      (e.g. ``Retry-After``), never an ETag.

Layer:
    adapters/presenters
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from fastapi import Response

from ceidg_api.adapters.schemas.http.envelopes import (
    ErrorEnvelope,
    ErrorObject,
    SuccessEnvelope,
)

_REQUEST_ID_HEADER = "X-Request-ID"


def strong_etag(document: Mapping[str, Any]) -> str:
    """SHA-256 of ``document`` serialized with sorted keys, as a quoted ETag."""
    canonical = json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return '"' + hashlib.sha256(canonical.encode("utf-8")).hexdigest() + '"'


@dataclass(slots=True)
class PresentResult[T]:
    """Envelope to render with its headers and optional status override."""

    body: T | None
    headers: Mapping[str, str] = field(default_factory=dict)
    status_code: int | None = None


class BasePresenter:
    """Envelope and header assembly; no business decisions."""

    @staticmethod
    def _correlation(trace_id: str | None) -> dict[str, str]:
        return {_REQUEST_ID_HEADER: trace_id} if trace_id else {}

    def present_success(
        self,
        *,
        data: Any,
        trace_id: str | None = None,
    ) -> PresentResult[SuccessEnvelope[Any]]:
        envelope = SuccessEnvelope[Any](data=data)
        headers = self._correlation(trace_id)
        headers["ETag"] = strong_etag(envelope.model_dump(mode="json"))
        return PresentResult(body=envelope, headers=headers)

    def present_error(
        self,
        *,
        code: str,
        http_status: int,
        message: str,
        trace_id: str | None = None,
        details: dict[str, Any] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> PresentResult[ErrorEnvelope]:
        envelope = ErrorEnvelope(
            error=ErrorObject(
                code=code,
                http_status=http_status,
                message=message,
                details=details or {},
                trace_id=trace_id,
            )
        )
        out = {**(headers or {}), **self._correlation(trace_id)}
        return PresentResult(body=envelope, headers=out, status_code=http_status)

    @staticmethod
    def apply_headers(response: Response, result: PresentResult[Any]) -> None:
        """Copy headers and any status override onto ``response``."""
        for name, value in result.headers.items():
            response.headers[name] = value
        if result.status_code is not None:
            response.status_code = result.status_code
