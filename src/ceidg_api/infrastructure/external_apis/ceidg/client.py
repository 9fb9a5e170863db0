# src/ceidg_api/infrastructure/external_apis/ceidg/client.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""CEIDG Transport Client (v3), async and instrumented.

This transport is framework-agnostic and provides:

* Async HTTP (httpx) with a fixed per-request timeout.
* Bearer-token auth and ``Accept: application/json`` on every call.
* ``X-Request-ID`` propagation from the logging context.
* Classification of every response into a tagged outcome
  (see :mod:`ceidg_api.infrastructure.external_apis.ceidg.classifier`).
  ``httpx`` exceptions never cross this boundary.
* Prometheus latency/outcome metrics per endpoint (``summary``/``detail``).

No retries are performed: CEIDG quotas are per caller, and the lookup cache
already collapses duplicate requests.
"""

from __future__ import annotations

import time
from typing import Final

import httpx

from ceidg_api.infrastructure.external_apis.ceidg.classifier import (
    ClassifiedOutcome,
    TransportFailure,
    classify,
)
from ceidg_api.infrastructure.external_apis.ceidg.settings import CeidgSettings
from ceidg_api.infrastructure.logging.logger import get_json_logger, get_request_id
from ceidg_api.infrastructure.observability.metrics_ceidg import observe_upstream_call

__all__ = ["CeidgClient", "ENDPOINT_SUMMARY", "ENDPOINT_DETAIL"]

logger = get_json_logger(__name__)

ENDPOINT_SUMMARY: Final[str] = "summary"
ENDPOINT_DETAIL: Final[str] = "detail"

_DEFAULT_HEADERS: Final[dict[str, str]] = {
    "Accept": "application/json",
    "User-Agent": "ceidg-api-client/1.0",
}


class CeidgClient:
    """Instrumented transport client for the CEIDG v3 API."""

    def __init__(
        self,
        settings: CeidgSettings,
        *,
        http: httpx.AsyncClient | None = None,
        timeout_s: float | None = None,
    ) -> None:
        """Initialize the transport client.

        Args:
            settings: Provider settings loaded from environment or DI.
            http: Optional shared ``httpx.AsyncClient``. If omitted, a client
                is created and owned by this instance.
            timeout_s: Optional per-request timeout override in seconds.
                When omitted, ``settings.timeout_s`` is used.
        """
        self._settings = settings
        self._base_url = str(settings.base_url)
        self._timeout = float(timeout_s if timeout_s is not None else settings.timeout_s)

        self._owns_client = http is None
        self._client = http or httpx.AsyncClient(
            timeout=self._timeout,
            headers=_DEFAULT_HEADERS.copy(),
        )
        if http is not None:
            # Baseline headers on an injected client, without clobbering.
            for key, value in _DEFAULT_HEADERS.items():
                self._client.headers.setdefault(key, value)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance owns it."""
        if self._owns_client:
            await self._client.aclose()

    async def search_by_nip(self, nip: str) -> ClassifiedOutcome:
        """Query the search endpoint for a canonical NIP.

        Args:
            nip: Ten-digit NIP.

        Returns:
            Classified outcome of ``GET <base_url>?nip=<nip>``.
        """
        return await self._get(self._base_url, endpoint=ENDPOINT_SUMMARY, params={"nip": nip})

    async def fetch_link(self, url: str) -> ClassifiedOutcome:
        """Fetch an absolute detail link returned by the search endpoint.

        Args:
            url: Absolute URL taken from the summary record's ``link``.

        Returns:
            Classified outcome of the GET.
        """
        return await self._get(url, endpoint=ENDPOINT_DETAIL)

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._settings.api_key.get_secret_value()}",
        }
        rid = get_request_id()
        if rid:
            headers["X-Request-ID"] = rid
        return headers

    async def _get(
        self,
        url: str,
        *,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> ClassifiedOutcome:
        start = time.perf_counter()
        outcome: ClassifiedOutcome
        try:
            resp = await self._client.get(
                url,
                params=params,
                headers=self._headers(),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as exc:
            outcome = TransportFailure(reason=f"timeout after {self._timeout:g}s: {exc!s}")
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            outcome = TransportFailure(reason=str(exc) or type(exc).__name__)
        else:
            outcome = classify(resp.status_code, resp.content)

        elapsed = time.perf_counter() - start
        observe_upstream_call(endpoint=endpoint, outcome=outcome.label, seconds=elapsed)
        logger.debug(
            "ceidg.http.response",
            extra={
                "extra": {
                    "endpoint": endpoint,
                    "outcome": outcome.label,
                    "duration_ms": round(elapsed * 1000.0, 2),
                }
            },
        )
        return outcome
