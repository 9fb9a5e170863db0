# src/ceidg_api/application/use_cases/companies/find_company_by_nip.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Use Case: Find Company by NIP

Purpose:
    Top-level lookup entry point composing validation, the single-flight
    lookup cache, the registry gateway, and the company mapper.

Flow:
    1. Normalize the raw NIP. Malformed input raises ``InvalidNipFormat``
       immediately and never reaches the cache or upstream.
    2. ``LookupCache.get_or_compute`` with a loader that fetches and maps.
    3. ``NotFound`` / ``InvalidFormat`` become a cached absent result and are
       surfaced as ``CompanyNotFound``.
    4. Upstream errors and transport failures are never cached and are
       surfaced as ``RegistryUnavailable`` with a retry hint.

Layer: application/use_cases
"""

from __future__ import annotations

from dataclasses import replace

from ceidg_api.adapters.mappers.company_mapper import CompanyMapper
from ceidg_api.domain.entities.company import CompanyRecord
from ceidg_api.domain.exceptions.ceidg import (
    CeidgTransportError,
    CeidgUpstreamError,
    CompanyNotFound,
    InvalidNipFormat,
    LookupComputeFailed,
    RegistryUnavailable,
)
from ceidg_api.domain.interfaces.gateways.company_registry_gateway import (
    CompanyRegistryGateway,
    RegistryError,
    RegistryFound,
    RegistryInvalidFormat,
    RegistryNotFound,
    RegistryTransportFailure,
)
from ceidg_api.domain.value_objects.nip import Nip
from ceidg_api.infrastructure.caching.lookup_cache import LookupCache
from ceidg_api.infrastructure.logging.logger import get_json_logger

logger = get_json_logger(__name__)

_UNAVAILABLE_MESSAGE = "Unable to fetch company data from CEIDG. Please try again later."


class FindCompanyByNip:
    """Use case to look up a company in CEIDG.

    Args:
        gateway: Registry gateway implementation.
        cache: Single-flight lookup cache.
        retry_after_s: Retry hint attached to ``RegistryUnavailable``.

    Raises:
        CompanyNotFound: No record (``InvalidNipFormat`` for malformed input).
        RegistryUnavailable: Upstream error, transport failure, or any other
            failure while computing the lookup.
    """

    def __init__(
        self,
        gateway: CompanyRegistryGateway,
        cache: LookupCache,
        *,
        retry_after_s: int = 60,
    ) -> None:
        self._gateway = gateway
        self._cache = cache
        self._retry_after_s = retry_after_s

    async def execute(self, raw_nip: str) -> CompanyRecord:
        """Return the company registered under ``raw_nip``.

        Args:
            raw_nip: Candidate NIP; separators are tolerated.

        Returns:
            The company record.
        """
        try:
            nip = Nip.parse(raw_nip)
        except InvalidNipFormat:
            logger.info(
                "ceidg.lookup.invalid_format",
                extra={"extra": {"raw_length": len(raw_nip or "")}},
            )
            raise

        try:
            record = await self._cache.get_or_compute(nip.value, lambda: self._load(nip))
        except LookupComputeFailed as exc:
            self._log_failure(nip, exc.cause)
            raise RegistryUnavailable(
                _UNAVAILABLE_MESSAGE, retry_after_s=self._retry_after_s
            ) from exc

        if record is None:
            logger.info("ceidg.lookup.not_found", extra={"extra": {"nip": nip.value}})
            raise CompanyNotFound(f"Company with NIP {nip.value} not found in CEIDG registry")
        return record

    async def _load(self, nip: Nip) -> CompanyRecord | None:
        """Fetch and map one NIP; raise for outcomes that must not be cached."""
        result = await self._gateway.fetch(nip)

        match result:
            case RegistryFound(payload=payload):
                record = CompanyMapper.from_payload(payload)
                if record.nip != nip.value:
                    # Upstream omitted (or reformatted) the owner NIP.
                    record = replace(record, nip=nip.value)
                return record
            case RegistryNotFound():
                return None
            case RegistryInvalidFormat():
                logger.info(
                    "ceidg.lookup.upstream_invalid_nip",
                    extra={"extra": {"nip": nip.value}},
                )
                return None
            case RegistryError(status_code=status_code, body=body):
                raise CeidgUpstreamError(status_code, body)
            case RegistryTransportFailure(reason=reason):
                raise CeidgTransportError(reason)
        raise TypeError(f"unexpected fetch result: {result!r}")

    @staticmethod
    def _log_failure(nip: Nip, cause: BaseException) -> None:
        fields: dict[str, object] = {"nip": nip.value, "cause": type(cause).__name__}
        if isinstance(cause, CeidgUpstreamError):
            event = "ceidg.lookup.upstream_error"
            fields.update(status_code=cause.status_code, body=cause.body)
        elif isinstance(cause, CeidgTransportError):
            event = "ceidg.lookup.transport_error"
            fields["reason"] = cause.reason
        else:
            event = "ceidg.lookup.compute_failed"
            fields["error"] = str(cause)
        logger.error(event, exc_info=cause, extra={"extra": fields})
