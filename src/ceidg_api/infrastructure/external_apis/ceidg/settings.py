# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Pydantic settings for the CEIDG transport client."""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CEIDG_BASE_URL = "https://dane.biznes.gov.pl/api/ceidg/v3/firmy"


class CeidgSettings(BaseSettings):
    """Configuration for the CEIDG v3 client.

    Environment variables (with ``model_config.env_prefix``):

    * ``CEIDG_BASE_URL``
    * ``CEIDG_API_KEY``
    * ``CEIDG_TIMEOUT_S``
    * ``CEIDG_CACHE_TTL_S``
    * ``CEIDG_RETRY_AFTER_S``
    """

    base_url: str = Field(
        DEFAULT_CEIDG_BASE_URL,
        description="CEIDG company search endpoint, queried as GET <base_url>?nip=<nip>.",
    )
    api_key: SecretStr = Field(
        ...,
        description="CEIDG API bearer token.",
    )
    timeout_s: float = Field(
        30.0,
        gt=0,
        description="Per-request timeout in seconds (summary and detail calls).",
    )
    cache_ttl_s: int = Field(
        3600,
        ge=1,
        description="Lifetime of positive and negative lookup cache entries, in seconds.",
    )
    retry_after_s: int = Field(
        60,
        ge=0,
        description="Retry-After hint returned to callers when CEIDG is unavailable.",
    )

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_prefix="CEIDG_",
        extra="ignore",
    )

    @field_validator("api_key")
    @classmethod
    def _require_api_key(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value().strip():
            raise ValueError("CEIDG_API_KEY must not be empty")
        return value

    @field_validator("base_url")
    @classmethod
    def _require_base_url(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("CEIDG_BASE_URL must not be empty")
        return value
