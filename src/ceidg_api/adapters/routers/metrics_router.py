# src/ceidg_api/adapters/routers/metrics_router.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Prometheus scrape endpoint (`/metrics`).

Lookup collectors are created lazily on first use; the probe touches each
accessor so every CEIDG series is registered before the first scrape.

Layer:
    adapters/routers
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from ceidg_api.infrastructure.logging.logger import get_json_logger
from ceidg_api.infrastructure.observability.metrics_ceidg import (
    get_ceidg_cache_hits_total,
    get_ceidg_cache_misses_total,
    get_ceidg_singleflight_joins_total,
    get_ceidg_upstream_latency_seconds,
    get_ceidg_upstream_outcomes_total,
)

logger = get_json_logger(__name__)
router = APIRouter()

_WARM: tuple[Callable[[], object], ...] = (
    get_ceidg_upstream_latency_seconds,
    get_ceidg_upstream_outcomes_total,
    get_ceidg_cache_hits_total,
    get_ceidg_cache_misses_total,
    get_ceidg_singleflight_joins_total,
)


@router.get("/metrics", include_in_schema=False)
async def metrics_probe() -> Response:
    """Expose Prometheus metrics in the text exposition format."""
    for getter in _WARM:
        try:
            getter()
        except ValueError as exc:  # pragma: no cover
            logger.debug(
                "metrics_router: failed to register collector",
                extra={"extra": {"metric": getter.__name__, "error": str(exc)}},
            )
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
