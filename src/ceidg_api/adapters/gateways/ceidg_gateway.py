# src/ceidg_api/adapters/gateways/ceidg_gateway.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""CEIDG Registry Gateway (Adapters Layer).

Purpose:
    Implement :class:`CompanyRegistryGateway` on top of :class:`CeidgClient`
    with a two-stage fetch:

      1. Search by NIP (``firmy`` collection); the first element is the record.
      2. If that record carries a ``link``, fetch it and overlay the contact
         fields and correspondence address found in its ``firma`` record.

    The detail call is best-effort. Any failure there is logged at WARNING and
    the unmerged summary record is returned; it never fails the lookup.

Layer:
    adapters/gateways
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from ceidg_api.domain.interfaces.gateways.company_registry_gateway import (
    FetchResult,
    RegistryError,
    RegistryFound,
    RegistryInvalidFormat,
    RegistryNotFound,
    RegistryTransportFailure,
)
from ceidg_api.domain.value_objects.nip import Nip
from ceidg_api.infrastructure.external_apis.ceidg.classifier import (
    Empty,
    InvalidIdentifier,
    Ok,
    TransportFailure,
    UpstreamError,
)
from ceidg_api.infrastructure.external_apis.ceidg.client import CeidgClient
from ceidg_api.infrastructure.logging.logger import get_json_logger

__all__ = ["CeidgRegistryGateway", "merge_detail"]

logger = get_json_logger(__name__)

_SUMMARY_KEY: Final[str] = "firmy"
_DETAIL_KEY: Final[str] = "firma"
_LINK_KEY: Final[str] = "link"
_CORRESPONDENCE_KEY: Final[str] = "adresKorespondencyjny"

#: Fields only the detail record reliably carries.
CONTACT_OVERLAY_FIELDS: Final[tuple[str, ...]] = (
    "telefon",
    "email",
    "www",
    "adresDoreczenElektronicznych",
    "innaFormaKonaktu",
)


def _first_record(document: Any, key: str) -> dict[str, Any] | None:
    """Return the first mapping in ``document[key]``, or None."""
    if not isinstance(document, Mapping):
        return None
    items = document.get(key)
    if not isinstance(items, list) or not items:
        return None
    first = items[0]
    return dict(first) if isinstance(first, Mapping) else None


def _present(value: Any) -> bool:
    return value is not None and value != "" and value != {} and value != []


def merge_detail(summary: Mapping[str, Any], detail: Mapping[str, Any]) -> dict[str, Any]:
    """Overlay detail contact fields onto a summary record.

    A detail value replaces the summary value only when it is present; the
    summary value (or its absence) is kept otherwise. The correspondence
    address follows the same rule.

    Args:
        summary: First record of the search response.
        detail: First record of the detail response.

    Returns:
        New merged mapping; inputs are not mutated.
    """
    merged = dict(summary)
    for key in (*CONTACT_OVERLAY_FIELDS, _CORRESPONDENCE_KEY):
        value = detail.get(key)
        if _present(value):
            merged[key] = value
    return merged


class CeidgRegistryGateway:
    """Two-stage CEIDG fetcher producing tagged :data:`FetchResult` values."""

    def __init__(self, client: CeidgClient) -> None:
        self._client = client

    async def fetch(self, nip: Nip) -> FetchResult:
        """Fetch and merge the CEIDG record for ``nip``.

        Args:
            nip: Canonical NIP.

        Returns:
            ``RegistryNotFound`` / ``RegistryInvalidFormat`` for absence,
            ``RegistryError`` / ``RegistryTransportFailure`` for failures,
            ``RegistryFound`` with the merged payload otherwise.
        """
        outcome = await self._client.search_by_nip(nip.value)

        match outcome:
            case Empty():
                return RegistryNotFound()
            case InvalidIdentifier():
                return RegistryInvalidFormat()
            case UpstreamError(status_code=status_code, body=body):
                return RegistryError(status_code=status_code, body=body)
            case TransportFailure(reason=reason):
                return RegistryTransportFailure(reason=reason)
            case Ok(body=document):
                summary = _first_record(document, _SUMMARY_KEY)

        if summary is None:
            return RegistryNotFound()

        link = summary.get(_LINK_KEY)
        if isinstance(link, str) and link.strip():
            detail = await self._fetch_detail(nip, link.strip())
            if detail is not None:
                summary = merge_detail(summary, detail)
                logger.debug(
                    "ceidg.detail.merged",
                    extra={"extra": {"nip": nip.value}},
                )

        return RegistryFound(payload=summary)

    async def _fetch_detail(self, nip: Nip, link: str) -> dict[str, Any] | None:
        """Fetch the detail record behind ``link``; None on any failure."""
        try:
            outcome = await self._client.fetch_link(link)
        except Exception as exc:  # any detail failure degrades to the summary
            logger.warning(
                "ceidg.detail.failed",
                extra={"extra": {"nip": nip.value, "link": link, "error": repr(exc)}},
            )
            return None

        if isinstance(outcome, Ok):
            detail = _first_record(outcome.body, _DETAIL_KEY)
            if detail is not None:
                return detail
            reason: dict[str, Any] = {"reason": "no_detail_record"}
        elif isinstance(outcome, UpstreamError):
            reason = {"reason": outcome.label, "status_code": outcome.status_code}
        elif isinstance(outcome, TransportFailure):
            reason = {"reason": outcome.label, "error": outcome.reason}
        else:
            reason = {"reason": outcome.label}

        logger.warning(
            "ceidg.detail.failed",
            extra={"extra": {"nip": nip.value, "link": link, **reason}},
        )
        return None
