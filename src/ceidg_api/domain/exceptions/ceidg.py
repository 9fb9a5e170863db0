# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
CEIDG Domain Exceptions

Purpose:
    Error conditions raised while looking up companies in the CEIDG registry.
    The application layer collapses them into two caller-facing signals:

      * ``CompanyNotFound`` (including ``InvalidNipFormat``): no record.
      * ``RegistryUnavailable``: retryable failure, carries a retry hint.

    ``CeidgUpstreamError``, ``CeidgTransportError`` and ``LookupComputeFailed``
    describe the underlying cause and are logged, never shown to callers.

Layer: domain/exceptions
"""
from __future__ import annotations

from .base import DomainError


class CompanyNotFound(DomainError):
    """No company is registered under the requested NIP."""

    code = "COMPANY_NOT_FOUND"


class InvalidNipFormat(CompanyNotFound):
    """The candidate NIP does not have the shape of ten decimal digits."""

    code = "INVALID_NIP_FORMAT"


class CeidgUpstreamError(DomainError):
    """CEIDG answered with a non-transient error status."""

    code = "CEIDG_UPSTREAM_ERROR"

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(
            f"CEIDG API error (status {status_code})",
            details={"status_code": status_code, "body": body},
        )
        self.status_code = status_code
        self.body = body


class CeidgTransportError(DomainError):
    """CEIDG could not be reached (connection failure or timeout)."""

    code = "CEIDG_TRANSPORT_ERROR"

    def __init__(self, reason: str) -> None:
        super().__init__(f"CEIDG transport failure: {reason}", details={"reason": reason})
        self.reason = reason


class LookupComputeFailed(DomainError):
    """The cache-miss computation for a NIP raised; nothing was cached."""

    code = "LOOKUP_COMPUTE_FAILED"

    def __init__(self, key: str, cause: BaseException) -> None:
        super().__init__(
            f"lookup computation failed for {key}",
            details={"key": key, "cause": type(cause).__name__},
        )
        self.key = key
        self.cause = cause


class RegistryUnavailable(DomainError):
    """The registry cannot answer right now; callers should retry later."""

    code = "CEIDG_UNAVAILABLE"

    def __init__(self, message: str = "", *, retry_after_s: int = 60) -> None:
        super().__init__(message, details={"retry_after_s": retry_after_s})
        self.retry_after_s = retry_after_s
