# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Company HTTP Schemas (Adapters Layer)

Purpose:
    Transport contract for `GET /v1/ceidg/companies/{nip}`. Every field is
    always serialized, including null-valued optional fields.

Layer: adapters/schemas/http
"""
from __future__ import annotations

from datetime import date

from pydantic import ConfigDict, Field

from ceidg_api.adapters.schemas.http.base import BaseHTTPSchema

__all__ = ["AddressHTTP", "CompanyHTTP"]


class AddressHTTP(BaseHTTPSchema):
    """Registered address."""

    model_config = ConfigDict(title="Address", extra="forbid")

    street: str | None = Field(default=None, description="Street name.")
    building: str | None = Field(default=None, description="Building number.")
    unit: str | None = Field(default=None, description="Apartment/unit number.")
    city: str | None = Field(default=None, description="City or village.")
    province: str | None = Field(default=None, description="Voivodeship.")
    county: str | None = Field(default=None, description="County (powiat).")
    municipality: str | None = Field(default=None, description="Municipality (gmina).")
    country: str | None = Field(default=None, description="Country.")
    postal_code: str | None = Field(default=None, description="Postal code, e.g. 00-001.")
    po_box: str | None = Field(default=None, description="Post-office box code.")
    location_note: str | None = Field(
        default=None, description="Description of a non-standard location."
    )
    addressee: str | None = Field(default=None, description="Recipient name.")
    terc: str | None = Field(default=None, description="TERYT territorial unit code.")
    simc: str | None = Field(default=None, description="TERYT settlement code.")
    ulic: str | None = Field(default=None, description="TERYT street code.")
    formatted: str = Field(
        ...,
        description="Single-line address, e.g. 'ul. Marszałkowska 1/2, 00-001 Warszawa'.",
    )


class CompanyHTTP(BaseHTTPSchema):
    """Company registered in CEIDG."""

    model_config = ConfigDict(
        title="Company",
        extra="forbid",
        json_schema_extra={
            "example": {
                "nip": "1234567890",
                "name": "Jan Kowalski Usługi Informatyczne",
                "activity_start_date": "2019-03-01",
                "created_date": "2019-03-01",
                "status": "AKTYWNY",
                "suspension_date": None,
                "resumption_date": None,
                "termination_date": None,
                "business_address": None,
                "correspondence_address": None,
                "additional_business_addresses": [],
                "phone": "123456789",
                "email": "biuro@example.pl",
                "website": None,
                "e_delivery_address": None,
                "other_contact": None,
            }
        },
    )

    nip: str = Field(..., description="10-digit NIP.")
    name: str = Field(..., description="Registered business name.")
    activity_start_date: date = Field(..., description="Date business activity started.")
    created_date: date = Field(..., description="Date the registry entry was created.")
    status: str | None = Field(default=None, description="Lifecycle status.")
    suspension_date: date | None = Field(default=None, description="Suspension date.")
    resumption_date: date | None = Field(default=None, description="Resumption date.")
    termination_date: date | None = Field(default=None, description="Termination date.")
    business_address: AddressHTTP | None = Field(default=None)
    correspondence_address: AddressHTTP | None = Field(default=None)
    additional_business_addresses: list[AddressHTTP] = Field(default_factory=list)
    phone: str | None = Field(default=None)
    email: str | None = Field(default=None)
    website: str | None = Field(default=None)
    e_delivery_address: str | None = Field(
        default=None, description="Electronic-delivery (e-Doręczenia) address."
    )
    other_contact: str | None = Field(default=None, description="Other form of contact.")
