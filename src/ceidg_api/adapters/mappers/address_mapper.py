# src/ceidg_api/adapters/mappers/address_mapper.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Address mapper (Adapters Layer).

Purpose:
    Convert loosely-typed CEIDG address payloads into :class:`Address` values
    and back, and render an address as a single human-readable line.

Design:
    * Tolerant of missing keys, ``null`` values and unrecognized keys.
    * Values are copied verbatim; only presence is checked (``None`` and ``""``
      count as absent).
    * An address without any populated field maps to ``None``.

Layer:
    adapters/mappers
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Final

from ceidg_api.domain.entities.address import Address

__all__ = ["AddressMapper", "ADDRESS_FIELDS", "optional_text"]

#: Upstream payload key -> Address attribute.
ADDRESS_FIELDS: Final[dict[str, str]] = {
    "ulica": "street",
    "budynek": "building",
    "lokal": "unit",
    "miasto": "city",
    "wojewodztwo": "province",
    "powiat": "county",
    "gmina": "municipality",
    "kraj": "country",
    "kod": "postal_code",
    "skrytkaPocztowa": "po_box",
    "opisNietypowegoMiejsca": "location_note",
    "adresat": "addressee",
    "terc": "terc",
    "simc": "simc",
    "ulic": "ulic",
}


def optional_text(value: Any) -> str | None:
    """Return ``value`` as text when it is a present scalar, else ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return str(value)
    if isinstance(value, str) and value != "":
        return value
    return None


class AddressMapper:
    """Stateless mapper between CEIDG address payloads and :class:`Address`."""

    @staticmethod
    def from_payload(fields: Mapping[str, Any] | None) -> Address | None:
        """Build an address from an upstream payload.

        Args:
            fields: Upstream address mapping, or ``None``.

        Returns:
            The address, or ``None`` if the payload is absent, not a mapping,
            or carries no recognized non-empty field.
        """
        if not isinstance(fields, Mapping) or not fields:
            return None

        values = {attr: optional_text(fields.get(key)) for key, attr in ADDRESS_FIELDS.items()}
        if not any(values.values()):
            return None
        return Address(**values)

    @staticmethod
    def to_payload(address: Address | None) -> dict[str, str | None] | None:
        """Serialize an address back to the upstream key layout."""
        if address is None:
            return None
        return {key: getattr(address, attr) for key, attr in ADDRESS_FIELDS.items()}

    @staticmethod
    def format_single_line(address: Address | None) -> str:
        """Render ``address`` as one line, e.g. ``ul. Marszałkowska 1/2, 00-001 Warszawa``.

        Precedence:
            1. ``ul. <street> [<building>[/<unit>]]`` when a street is present,
               otherwise ``<building>[/<unit>]`` when a building is present.
            2. ``<postal code> <city>`` when both are present, otherwise the city.
            3. The non-standard location note, verbatim.

        Omitted parts contribute nothing, so there are no stray separators.

        Args:
            address: Address to render.

        Returns:
            Comma-separated line; empty string when nothing is known.
        """
        if address is None:
            return ""

        parts: list[str] = []

        if address.street:
            line = f"ul. {address.street}"
            if address.building:
                line += f" {address.building}"
                if address.unit:
                    line += f"/{address.unit}"
            parts.append(line)
        elif address.building:
            line = address.building
            if address.unit:
                line += f"/{address.unit}"
            parts.append(line)

        if address.postal_code and address.city:
            parts.append(f"{address.postal_code} {address.city}")
        elif address.city:
            parts.append(address.city)

        if address.location_note:
            parts.append(address.location_note)

        return ", ".join(parts)
