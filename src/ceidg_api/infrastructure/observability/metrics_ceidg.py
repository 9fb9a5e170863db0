# src/ceidg_api/infrastructure/observability/metrics_ceidg.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""CEIDG observability helpers and Prometheus metrics.

Exports
-------
Core collectors (names are part of the public contract and must remain stable):

* ``ceidg_upstream_latency_seconds`` (Histogram; ``endpoint``, ``outcome``)
* ``ceidg_upstream_outcomes_total`` (Counter; ``endpoint``, ``outcome``)
* ``ceidg_cache_hits_total`` (Counter; ``result`` = found|absent)
* ``ceidg_cache_misses_total`` (Counter)
* ``ceidg_singleflight_joins_total`` (Counter)

Helpers:

* :func:`observe_upstream_call` records latency and outcome for one call.
* ``get_*`` accessors return the underlying collectors.

Design
------
Collectors are created against the *current* default registry
(:data:`prometheus_client.REGISTRY`). If a collector with the same name is
already registered, the existing instance is reused instead of registering a
duplicate, so module re-imports in tests are safe.

Recording is best-effort: helpers never raise into lookup code.
"""

from __future__ import annotations

from collections.abc import Sequence
from contextlib import suppress

import prometheus_client as prom
from prometheus_client import Counter, Histogram
from prometheus_client.registry import CollectorRegistry

__all__ = [
    "get_ceidg_cache_hits_total",
    "get_ceidg_cache_misses_total",
    "get_ceidg_singleflight_joins_total",
    "get_ceidg_upstream_latency_seconds",
    "get_ceidg_upstream_outcomes_total",
    "observe_upstream_call",
    "record_cache_hit",
    "record_cache_miss",
    "record_singleflight_join",
]


def _get_or_create_histogram(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Histogram:
    """Return a histogram bound to the current default registry.

    Args:
        name: Metric name.
        doc: Human-readable metric description.
        labelnames: Optional iterable of label names.

    Returns:
        A :class:`Histogram` bound to the current :data:`prom.REGISTRY`.
    """
    registry: CollectorRegistry = prom.REGISTRY
    mapping = getattr(registry, "_names_to_collectors", {})
    existing = mapping.get(name)
    if isinstance(existing, Histogram):
        return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return Histogram(name, doc, labels, registry=registry)
    except ValueError as exc:
        # Handle concurrent or prior registration gracefully.
        if "Duplicated timeseries" in str(exc):
            again = getattr(registry, "_names_to_collectors", {}).get(name)
            if isinstance(again, Histogram):
                return again
        raise


def _get_or_create_counter(
    name: str,
    doc: str,
    labelnames: Sequence[str] | None = None,
) -> Counter:
    """Return a counter bound to the current default registry.

    Mirrors :func:`_get_or_create_histogram` for :class:`Counter` collectors.
    """
    registry: CollectorRegistry = prom.REGISTRY
    mapping = getattr(registry, "_names_to_collectors", {})
    existing = mapping.get(name)
    if isinstance(existing, Counter):
        return existing

    labels = tuple(labelnames) if labelnames is not None else ()
    try:
        return Counter(name, doc, labels, registry=registry)
    except ValueError as exc:
        if "Duplicated timeseries" in str(exc):
            again = getattr(registry, "_names_to_collectors", {}).get(name)
            if isinstance(again, Counter):
                return again
        raise


# ---------------------------------------------------------------------------
# Core metrics
# ---------------------------------------------------------------------------

ceidg_upstream_latency_seconds: Histogram = _get_or_create_histogram(
    "ceidg_upstream_latency_seconds",
    "Latency of CEIDG API calls (seconds).",
    labelnames=("endpoint", "outcome"),
)

ceidg_upstream_outcomes_total: Counter = _get_or_create_counter(
    "ceidg_upstream_outcomes_total",
    "Classified outcomes of CEIDG API calls.",
    labelnames=("endpoint", "outcome"),
)

ceidg_cache_hits_total: Counter = _get_or_create_counter(
    "ceidg_cache_hits_total",
    "Company lookups served from cache.",
    labelnames=("result",),
)

ceidg_cache_misses_total: Counter = _get_or_create_counter(
    "ceidg_cache_misses_total",
    "Company lookups that required an upstream fetch.",
)

ceidg_singleflight_joins_total: Counter = _get_or_create_counter(
    "ceidg_singleflight_joins_total",
    "Lookups that awaited another caller's in-flight fetch.",
)


def observe_upstream_call(*, endpoint: str, outcome: str, seconds: float) -> None:
    """Record latency and outcome of one CEIDG call.

    Args:
        endpoint: ``summary`` or ``detail``.
        outcome: Classified outcome label (e.g. ``ok``, ``transport_failure``).
        seconds: Wall-clock duration of the call.
    """
    with suppress(Exception):
        ceidg_upstream_latency_seconds.labels(endpoint=endpoint, outcome=outcome).observe(seconds)
        ceidg_upstream_outcomes_total.labels(endpoint=endpoint, outcome=outcome).inc()


def record_cache_hit(*, found: bool) -> None:
    """Count a cache hit, split by positive/negative entry."""
    with suppress(Exception):
        ceidg_cache_hits_total.labels(result="found" if found else "absent").inc()


def record_cache_miss() -> None:
    with suppress(Exception):
        ceidg_cache_misses_total.inc()


def record_singleflight_join() -> None:
    with suppress(Exception):
        ceidg_singleflight_joins_total.inc()


def get_ceidg_upstream_latency_seconds() -> Histogram:
    """Return the upstream latency histogram."""
    return ceidg_upstream_latency_seconds


def get_ceidg_upstream_outcomes_total() -> Counter:
    """Return the upstream outcomes counter."""
    return ceidg_upstream_outcomes_total


def get_ceidg_cache_hits_total() -> Counter:
    """Return the cache hits counter."""
    return ceidg_cache_hits_total


def get_ceidg_cache_misses_total() -> Counter:
    """Return the cache misses counter."""
    return ceidg_cache_misses_total


def get_ceidg_singleflight_joins_total() -> Counter:
    """Return the single-flight joins counter."""
    return ceidg_singleflight_joins_total
