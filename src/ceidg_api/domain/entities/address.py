# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Address Entity

Purpose:
    Immutable postal address as registered in CEIDG. Every field is optional;
    an address without any populated field is represented as ``None`` by the
    mappers, never as an empty instance.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass, fields

from .base import BaseEntity


@dataclass(frozen=True, slots=True)
class Address(BaseEntity):
    """Registered address.

    Args:
        street: Street name, without the ``ul.`` prefix.
        building: Building number.
        unit: Apartment/unit number.
        city: City or village.
        province: Voivodeship.
        county: Powiat.
        municipality: Gmina.
        country: Country name.
        postal_code: Postal code, e.g. ``00-001``.
        po_box: Post-office box code.
        location_note: Free-text description of a non-standard location.
        addressee: Recipient name for correspondence.
        terc: Territorial unit code (TERYT TERC).
        simc: Settlement code (TERYT SIMC).
        ulic: Street code (TERYT ULIC).
    """

    street: str | None = None
    building: str | None = None
    unit: str | None = None
    city: str | None = None
    province: str | None = None
    county: str | None = None
    municipality: str | None = None
    country: str | None = None
    postal_code: str | None = None
    po_box: str | None = None
    location_note: str | None = None
    addressee: str | None = None
    terc: str | None = None
    simc: str | None = None
    ulic: str | None = None

    def is_empty(self) -> bool:
        """Return True when no field carries a non-empty value."""
        return not any(getattr(self, f.name) for f in fields(self))
