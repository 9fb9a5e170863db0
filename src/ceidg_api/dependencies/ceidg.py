# src/ceidg_api/dependencies/ceidg.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Dependency wiring for the CEIDG lookup (client, cache, use case).

Overview:
    Builds the object graph explicitly and hands ownership to the caller
    (the application lifespan), which closes it on shutdown:

        CeidgClient → CeidgRegistryGateway ┐
        CachePort (memory|redis) → LookupCache ┴→ FindCompanyByNip

    Routers obtain the use case through :func:`get_find_company_uc`, which
    reads it from ``app.state``. Tests override that provider with
    ``app.dependency_overrides``.

Layer:
    dependencies
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
from fastapi import Request

from ceidg_api.adapters.gateways.ceidg_gateway import CeidgRegistryGateway
from ceidg_api.application.interfaces.cache_port import CachePort
from ceidg_api.application.use_cases.companies.find_company_by_nip import FindCompanyByNip
from ceidg_api.config.settings import Settings
from ceidg_api.infrastructure.caching.json_cache import RedisJsonCache
from ceidg_api.infrastructure.caching.lookup_cache import LookupCache
from ceidg_api.infrastructure.caching.memory_cache import InMemoryJsonCache
from ceidg_api.infrastructure.caching.redis_client import close_redis, init_redis
from ceidg_api.infrastructure.external_apis.ceidg.client import CeidgClient
from ceidg_api.infrastructure.external_apis.ceidg.settings import CeidgSettings
from ceidg_api.infrastructure.logging.logger import get_json_logger

__all__ = [
    "CeidgServices",
    "build_cache_store",
    "build_ceidg_services",
    "close_ceidg_services",
    "get_find_company_uc",
]

logger = get_json_logger(__name__)


@dataclass(slots=True)
class CeidgServices:
    """Owned CEIDG object graph."""

    settings: Settings
    client: CeidgClient
    cache: LookupCache
    use_case: FindCompanyByNip


def build_cache_store(settings: Settings) -> CachePort:
    """Select the JSON cache backend from ``CACHE_BACKEND``.

    Args:
        settings: Application settings.

    Returns:
        ``RedisJsonCache`` (initializing the shared Redis client) or
        ``InMemoryJsonCache``.
    """
    if settings.cache_backend == "redis":
        init_redis(settings)
        return RedisJsonCache(namespace=settings.cache_namespace)
    return InMemoryJsonCache()


def build_ceidg_services(
    settings: Settings,
    ceidg_settings: CeidgSettings,
    *,
    http: httpx.AsyncClient | None = None,
    store: CachePort | None = None,
) -> CeidgServices:
    """Construct the CEIDG lookup object graph.

    Args:
        settings: Application settings (cache backend, namespace).
        ceidg_settings: Provider settings (API key, URL, TTL, retry hint).
        http: Optional shared ``httpx.AsyncClient`` for the transport.
        store: Optional pre-built cache backend (overrides ``CACHE_BACKEND``).

    Returns:
        The wired services; close them with :func:`close_ceidg_services`.
    """
    client = CeidgClient(ceidg_settings, http=http)
    cache = LookupCache(store or build_cache_store(settings), ttl_s=ceidg_settings.cache_ttl_s)
    use_case = FindCompanyByNip(
        CeidgRegistryGateway(client),
        cache,
        retry_after_s=ceidg_settings.retry_after_s,
    )
    logger.info(
        "ceidg.services_ready",
        extra={
            "extra": {
                "cache_backend": settings.cache_backend,
                "cache_ttl_s": ceidg_settings.cache_ttl_s,
                "base_url": ceidg_settings.base_url,
            }
        },
    )
    return CeidgServices(settings=settings, client=client, cache=cache, use_case=use_case)


async def close_ceidg_services(services: CeidgServices) -> None:
    """Release resources owned by ``services``."""
    await services.client.aclose()
    if services.settings.cache_backend == "redis":
        await close_redis()


def get_find_company_uc(request: Request) -> FindCompanyByNip:
    """FastAPI provider for the lookup use case built by the lifespan.

    Raises:
        RuntimeError: If the application lifespan has not wired the use case.
    """
    use_case = getattr(request.app.state, "find_company_uc", None)
    if use_case is None:
        raise RuntimeError("CEIDG lookup is not initialized (application lifespan not run)")
    return use_case
