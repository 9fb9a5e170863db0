# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Presenter: CompanyRecord → HTTP envelopes.

Synopsis:
    Renders domain company records into ``SuccessEnvelope[CompanyHTTP]`` and
    maps lookup signals to ``ErrorEnvelope`` responses:

      * ``CompanyNotFound`` → 404 ``COMPANY_NOT_FOUND``
      * ``RegistryUnavailable`` → 503 ``CEIDG_UNAVAILABLE`` + ``Retry-After``

    Upstream bodies and causes are never rendered; 503 carries a generic
    message only.

Layer:
    adapters/presenters
"""

from __future__ import annotations

from typing import Any

from ceidg_api.adapters.mappers.address_mapper import AddressMapper
from ceidg_api.adapters.presenters.base_presenter import BasePresenter, PresentResult
from ceidg_api.adapters.schemas.http.companies import AddressHTTP, CompanyHTTP
from ceidg_api.adapters.schemas.http.envelopes import ErrorEnvelope, SuccessEnvelope
from ceidg_api.domain.entities.address import Address
from ceidg_api.domain.entities.company import CompanyRecord
from ceidg_api.domain.exceptions.ceidg import RegistryUnavailable


def _address_http(address: Address | None) -> AddressHTTP | None:
    if address is None:
        return None
    return AddressHTTP(
        street=address.street,
        building=address.building,
        unit=address.unit,
        city=address.city,
        province=address.province,
        county=address.county,
        municipality=address.municipality,
        country=address.country,
        postal_code=address.postal_code,
        po_box=address.po_box,
        location_note=address.location_note,
        addressee=address.addressee,
        terc=address.terc,
        simc=address.simc,
        ulic=address.ulic,
        formatted=AddressMapper.format_single_line(address),
    )


def to_company_http(record: CompanyRecord) -> CompanyHTTP:
    """Map a domain record onto the HTTP schema."""
    additional = (_address_http(a) for a in record.additional_business_addresses)
    return CompanyHTTP(
        nip=record.nip,
        name=record.name,
        activity_start_date=record.activity_start_date,
        created_date=record.created_date,
        status=record.status,
        suspension_date=record.suspension_date,
        resumption_date=record.resumption_date,
        termination_date=record.termination_date,
        business_address=_address_http(record.business_address),
        correspondence_address=_address_http(record.correspondence_address),
        additional_business_addresses=[a for a in additional if a is not None],
        phone=record.phone,
        email=record.email,
        website=record.website,
        e_delivery_address=record.e_delivery_address,
        other_contact=record.other_contact,
    )


class CompanyPresenter(BasePresenter):
    """Presenter for `/v1/ceidg/companies/{nip}`."""

    def present_company(
        self,
        record: CompanyRecord,
        *,
        trace_id: str | None = None,
    ) -> PresentResult[SuccessEnvelope[Any]]:
        """Build the 200 envelope with ETag and X-Request-ID headers."""
        return self.present_success(data=to_company_http(record), trace_id=trace_id)

    def present_not_found(
        self,
        message: str,
        *,
        trace_id: str | None = None,
    ) -> PresentResult[ErrorEnvelope]:
        """Build the 404 ``COMPANY_NOT_FOUND`` envelope."""
        return self.present_error(
            code="COMPANY_NOT_FOUND",
            http_status=404,
            message=message,
            trace_id=trace_id,
        )

    def present_unavailable(
        self,
        exc: RegistryUnavailable,
        *,
        trace_id: str | None = None,
    ) -> PresentResult[ErrorEnvelope]:
        """Build the 503 ``CEIDG_UNAVAILABLE`` envelope with ``Retry-After``."""
        return self.present_error(
            code="CEIDG_UNAVAILABLE",
            http_status=503,
            message=str(exc) or "CEIDG is temporarily unavailable. Please try again later.",
            trace_id=trace_id,
            details={"retry_after_s": exc.retry_after_s},
            headers={"Retry-After": str(exc.retry_after_s)},
        )
