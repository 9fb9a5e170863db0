# src/ceidg_api/config/settings.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Service Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated application configuration for the CEIDG lookup service.
    Provider-specific settings (API key, base URL, timeouts) live in
    :class:`ceidg_api.infrastructure.external_apis.ceidg.settings.CeidgSettings`;
    this module covers process-level concerns: environment, logging, and the
    cache backend.

Design:
    - Pydantic v2 BaseSettings with explicit env aliases.
    - Environment enumeration for behavior toggles (includes TEST).
    - Singleton accessor `get_settings()` with LRU cache; tests call
      ``get_settings.cache_clear()`` after changing the environment.
    - Secrets are never logged.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Environment", "Settings", "get_settings"]


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed application configuration.

    Adapters and Infrastructure may read environment variables; other layers
    receive this object (or values from it) through dependency injection.
    """

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO'). If not set, INFO is used.",
        validation_alias="LOG_LEVEL",
    )
    service_name: str = Field(
        default="ceidg-api",
        description="Logical service name for logging.",
        validation_alias="SERVICE_NAME",
    )
    service_version: str | None = Field(
        default=None,
        description="Service version reported in OpenAPI and startup logs.",
        validation_alias="SERVICE_VERSION",
    )

    cache_backend: Literal["memory", "redis"] = Field(
        default="memory",
        description="Lookup cache backend: process-local memory or shared Redis.",
        validation_alias="CACHE_BACKEND",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL; required when CACHE_BACKEND=redis.",
        validation_alias="REDIS_URL",
    )
    cache_namespace: str = Field(
        default="ceidg:companies:v1",
        min_length=1,
        description="Key prefix for lookup cache entries in Redis.",
        validation_alias="CACHE_NAMESPACE",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def _require_redis_url(self) -> Settings:
        if self.cache_backend == "redis" and not (self.redis_url or "").strip():
            raise ValueError("REDIS_URL is required when CACHE_BACKEND=redis")
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide Settings singleton."""
    return Settings()
