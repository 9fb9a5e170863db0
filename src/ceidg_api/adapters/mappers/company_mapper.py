# src/ceidg_api/adapters/mappers/company_mapper.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Company mapper (Adapters Layer).

Purpose:
    Convert a (merged) CEIDG company payload into a :class:`CompanyRecord`, and
    serialize a record back into the same payload layout so cached entries can
    be restored with :meth:`CompanyMapper.from_payload`.

Upstream quirks handled here:
    * The NIP is nested under ``wlasciciel.nip``, not at the top level.
    * Only ``dataRozpoczecia`` is normally present; it populates both the
      activity-start and creation dates. ``dataPowstania`` is honored when
      upstream starts sending it. With neither present, both fall back to
      today's date.
    * Date strings may carry a time part; only the leading ``YYYY-MM-DD`` is
      kept. Unparseable optional dates map to ``None``.

Layer:
    adapters/mappers
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date
from typing import Any

from ceidg_api.adapters.mappers.address_mapper import AddressMapper, optional_text
from ceidg_api.domain.entities.address import Address
from ceidg_api.domain.entities.company import CompanyRecord

__all__ = ["CompanyMapper", "parse_calendar_date"]

_ISO_DATE_LEN = 10


def parse_calendar_date(value: Any) -> date | None:
    """Parse the calendar-date prefix of an upstream date string.

    Args:
        value: Raw value, e.g. ``"2023-01-01"`` or ``"2023-01-01T00:00:00"``.

    Returns:
        The date, or ``None`` when absent or unparseable.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:_ISO_DATE_LEN])
    except ValueError:
        return None


def _owner_nip(payload: Mapping[str, Any]) -> str:
    owner = payload.get("wlasciciel")
    if not isinstance(owner, Mapping):
        return ""
    return optional_text(owner.get("nip")) or ""


def _additional_addresses(raw: Any) -> tuple[Address, ...]:
    if not isinstance(raw, list):
        return ()
    mapped = (AddressMapper.from_payload(item) for item in raw)
    return tuple(a for a in mapped if a is not None)


def _iso(value: date | None) -> str | None:
    return value.isoformat() if value is not None else None


class CompanyMapper:
    """Stateless mapper between CEIDG company payloads and :class:`CompanyRecord`."""

    @staticmethod
    def from_payload(
        payload: Mapping[str, Any],
        *,
        today: Callable[[], date] = date.today,
    ) -> CompanyRecord:
        """Build a company record from a merged upstream payload.

        Never raises for missing optional data: absent fields become ``None``
        (or an empty tuple for additional addresses), a missing name becomes
        ``""`` and a missing NIP becomes ``""``.

        Args:
            payload: Summary payload, optionally overlaid with detail fields.
            today: Clock used when upstream sends no date at all.

        Returns:
            The mapped record.
        """
        started = parse_calendar_date(payload.get("dataRozpoczecia"))
        created = parse_calendar_date(payload.get("dataPowstania"))
        fallback = started or created or today()

        name = payload.get("nazwa")

        return CompanyRecord(
            nip=_owner_nip(payload),
            name=name if isinstance(name, str) else "",
            activity_start_date=started or fallback,
            created_date=created or fallback,
            status=optional_text(payload.get("status")),
            suspension_date=parse_calendar_date(payload.get("dataZawieszenia")),
            resumption_date=parse_calendar_date(payload.get("dataWznowienia")),
            termination_date=parse_calendar_date(payload.get("dataZakonczenia")),
            business_address=AddressMapper.from_payload(payload.get("adresDzialalnosci")),
            correspondence_address=AddressMapper.from_payload(
                payload.get("adresKorespondencyjny")
            ),
            additional_business_addresses=_additional_addresses(
                payload.get("adresyDzialalnosciDodatkowe")
            ),
            phone=optional_text(payload.get("telefon")),
            email=optional_text(payload.get("email")),
            website=optional_text(payload.get("www")),
            e_delivery_address=optional_text(payload.get("adresDoreczenElektronicznych")),
            other_contact=optional_text(payload.get("innaFormaKonaktu")),
        )

    @staticmethod
    def to_payload(record: CompanyRecord) -> dict[str, Any]:
        """Serialize ``record`` into the upstream payload layout (JSON-safe)."""
        return {
            "wlasciciel": {"nip": record.nip},
            "nazwa": record.name,
            "dataRozpoczecia": _iso(record.activity_start_date),
            "dataPowstania": _iso(record.created_date),
            "status": record.status,
            "dataZawieszenia": _iso(record.suspension_date),
            "dataWznowienia": _iso(record.resumption_date),
            "dataZakonczenia": _iso(record.termination_date),
            "adresDzialalnosci": AddressMapper.to_payload(record.business_address),
            "adresKorespondencyjny": AddressMapper.to_payload(record.correspondence_address),
            "adresyDzialalnosciDodatkowe": [
                AddressMapper.to_payload(a) for a in record.additional_business_addresses
            ],
            "telefon": record.phone,
            "email": record.email,
            "www": record.website,
            "adresDoreczenElektronicznych": record.e_delivery_address,
            "innaFormaKonaktu": record.other_contact,
        }
