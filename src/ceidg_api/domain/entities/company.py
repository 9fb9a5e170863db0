# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Company Record Entity

Purpose:
    Immutable snapshot of a company as currently registered in CEIDG. A record
    is built fresh on every upstream fetch and lives only inside a cache entry.

Layer: domain/entities
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from .address import Address
from .base import BaseEntity


@dataclass(frozen=True, slots=True)
class CompanyRecord(BaseEntity):
    """Company registered in CEIDG.

    Args:
        nip: Canonical 10-digit NIP (empty only if upstream omitted it).
        name: Registered name; empty string when upstream omits it.
        activity_start_date: Date business activity started.
        created_date: Date the record was created.
        status: Free-text lifecycle status (e.g. ``AKTYWNY``).
        suspension_date: Date activity was suspended, if any.
        resumption_date: Date activity was resumed, if any.
        termination_date: Date activity ended, if any.
        business_address: Primary place of business.
        correspondence_address: Address for correspondence.
        additional_business_addresses: Further places of business, upstream order.
        phone: Phone number.
        email: Email address.
        website: Website URL.
        e_delivery_address: Electronic-delivery (e-Doręczenia) address.
        other_contact: Free-text other form of contact.

    Raises:
        ValueError: If ``name`` is None or an additional address is empty.
    """

    nip: str
    name: str
    activity_start_date: date
    created_date: date
    status: str | None = None
    suspension_date: date | None = None
    resumption_date: date | None = None
    termination_date: date | None = None
    business_address: Address | None = None
    correspondence_address: Address | None = None
    additional_business_addresses: tuple[Address, ...] = ()
    phone: str | None = None
    email: str | None = None
    website: str | None = None
    e_delivery_address: str | None = None
    other_contact: str | None = None

    def __post_init__(self) -> None:
        if self.name is None:
            raise ValueError("name must be a string (empty when unknown)")
        if not isinstance(self.additional_business_addresses, tuple):
            object.__setattr__(
                self, "additional_business_addresses", tuple(self.additional_business_addresses)
            )
        if any(a.is_empty() for a in self.additional_business_addresses):
            raise ValueError("additional_business_addresses must not contain empty addresses")
