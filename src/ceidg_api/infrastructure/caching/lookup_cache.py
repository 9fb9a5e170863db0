# src/ceidg_api/infrastructure/caching/lookup_cache.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Company lookup cache with single-flight de-duplication.

Synopsis:
    Get-or-compute cache keyed by canonical NIP, layered on any
    :class:`CachePort` backend (in-memory or Redis).

Design:
    * Keys: ``company:<nip>`` (the backend adds its own namespace).
    * Entries: ``{"found": true, "company": <payload>}`` for a record and
      ``{"found": false}`` for a negative result. Both live for the same TTL.
      Records are stored with :meth:`CompanyMapper.to_payload` and restored
      with :meth:`CompanyMapper.from_payload`.
    * Single-flight: one shared :class:`asyncio.Task` per key computes the
      value. Concurrent callers for that key await the same task through
      :func:`asyncio.shield`, so a cancelled caller never cancels the fetch
      other callers are waiting on.
    * Failures: if ``compute`` raises, every waiter receives
      :class:`LookupComputeFailed` and nothing is stored.
    * Across processes: when the backend offers a fill lock (Redis), the
      in-process task first claims it. If another replica holds it, the task
      polls the backend for up to ``peer_wait_s`` for that replica's entry and
      computes on its own only if none appears.
    * Backend errors on read/write are logged and degrade to a cache miss /
      an uncached result; they never fail a lookup on their own.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any, Final

from ceidg_api.adapters.mappers.company_mapper import CompanyMapper
from ceidg_api.application.interfaces.cache_port import CachePort, FillLockPort
from ceidg_api.domain.entities.company import CompanyRecord
from ceidg_api.domain.exceptions.ceidg import LookupComputeFailed
from ceidg_api.infrastructure.logging.logger import get_json_logger
from ceidg_api.infrastructure.observability.metrics_ceidg import (
    record_cache_hit,
    record_cache_miss,
    record_singleflight_join,
)

__all__ = ["LookupCache", "DEFAULT_LOOKUP_TTL_S"]

logger = get_json_logger(__name__)

#: One hour, measured from insertion.
DEFAULT_LOOKUP_TTL_S: Final[int] = 3600

#: Cross-replica fill lock lifetime; covers one summary plus one detail call.
DEFAULT_FILL_LOCK_TTL_S: Final[int] = 60
DEFAULT_PEER_WAIT_S: Final[float] = 2.0
DEFAULT_PEER_POLL_S: Final[float] = 0.05

type Compute = Callable[[], Awaitable[CompanyRecord | None]]


@dataclass(frozen=True, slots=True)
class _Hit:
    """A cache hit; ``record`` is None for a negative entry."""

    record: CompanyRecord | None


class LookupCache:
    """Single-flight get-or-compute cache for company records.

    Args:
        store: JSON cache backend.
        ttl_s: Lifetime of positive and negative entries in seconds.
        lock_ttl_s: Lifetime of the cross-replica fill lock (shared backends only).
        peer_wait_s: How long to wait for another replica holding the fill lock.
        poll_interval_s: Delay between backend reads while waiting.
    """

    def __init__(
        self,
        store: CachePort,
        *,
        ttl_s: int = DEFAULT_LOOKUP_TTL_S,
        lock_ttl_s: int = DEFAULT_FILL_LOCK_TTL_S,
        peer_wait_s: float = DEFAULT_PEER_WAIT_S,
        poll_interval_s: float = DEFAULT_PEER_POLL_S,
    ) -> None:
        self._store = store
        self._ttl = int(ttl_s)
        self._lock_ttl = int(lock_ttl_s)
        self._peer_wait = float(peer_wait_s)
        self._poll_interval = float(poll_interval_s)
        self._inflight: dict[str, asyncio.Task[CompanyRecord | None]] = {}

    @staticmethod
    def key_for(nip: str) -> str:
        """Return the cache key tail for a canonical NIP."""
        return f"company:{nip}"

    def inflight_count(self) -> int:
        """Number of computations currently in flight."""
        return len(self._inflight)

    async def get_or_compute(self, nip: str, compute: Compute) -> CompanyRecord | None:
        """Return the cached value for ``nip`` or compute and cache it.

        Args:
            nip: Canonical NIP.
            compute: Coroutine factory producing the record, ``None`` for a
                confirmed absence, or raising on failure.

        Returns:
            The record, or ``None`` for a (possibly cached) negative result.

        Raises:
            LookupComputeFailed: If ``compute`` raised. Nothing is cached.
        """
        key = self.key_for(nip)

        task = self._inflight.get(key)
        if task is None:
            hit = await self._read(key)
            if hit is not None:
                record_cache_hit(found=hit.record is not None)
                logger.debug(
                    "ceidg.lookup.cache_hit",
                    extra={"extra": {"nip": nip, "found": hit.record is not None}},
                )
                return hit.record
            # Re-check: another caller may have started while we were reading.
            task = self._inflight.get(key)

        if task is None:
            record_cache_miss()
            logger.info("ceidg.lookup.cache_miss", extra={"extra": {"nip": nip}})
            task = asyncio.create_task(self._compute_and_store(key, compute))
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._on_done(key, t))
        else:
            record_singleflight_join()
            logger.debug("ceidg.lookup.singleflight_join", extra={"extra": {"nip": nip}})

        return await asyncio.shield(task)

    def _on_done(self, key: str, task: asyncio.Task[CompanyRecord | None]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the exception retrieved even if every waiter was cancelled.
        if not task.cancelled():
            task.exception()

    async def _compute_and_store(self, key: str, compute: Compute) -> CompanyRecord | None:
        hit = await self._read(key)
        if hit is not None:
            return hit.record

        if not await self._claim_fill(key):
            hit = await self._await_peer_fill(key)
            if hit is not None:
                return hit.record

        try:
            record = await compute()
        except Exception as exc:
            raise LookupComputeFailed(key, exc) from exc

        await self._write(key, record)
        return record

    async def _claim_fill(self, key: str) -> bool:
        if not isinstance(self._store, FillLockPort):
            return True
        try:
            return await self._store.try_acquire_fill_lock(key, ttl=self._lock_ttl)
        except Exception as exc:
            logger.warning(
                "ceidg.cache.fill_lock_failed",
                extra={"extra": {"key": key, "error": repr(exc)}},
            )
            return True

    async def _await_peer_fill(self, key: str) -> _Hit | None:
        """Poll the backend while another replica fills ``key``."""
        logger.debug("ceidg.lookup.peer_fill_wait", extra={"extra": {"key": key}})
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._peer_wait
        while loop.time() < deadline:
            await asyncio.sleep(self._poll_interval)
            hit = await self._read(key)
            if hit is not None:
                record_singleflight_join()
                return hit
        logger.info("ceidg.lookup.peer_fill_timeout", extra={"extra": {"key": key}})
        return None

    async def _read(self, key: str) -> _Hit | None:
        try:
            entry = await self._store.get_json(key)
        except Exception as exc:
            logger.warning(
                "ceidg.cache.read_failed",
                extra={"extra": {"key": key, "error": repr(exc)}},
            )
            return None
        if entry is None:
            return None
        return self._decode(key, entry)

    async def _write(self, key: str, record: CompanyRecord | None) -> None:
        entry: dict[str, Any]
        if record is None:
            entry = {"found": False}
        else:
            entry = {"found": True, "company": CompanyMapper.to_payload(record)}
        try:
            await self._store.set_json(key, entry, ttl=self._ttl)
        except Exception as exc:
            logger.warning(
                "ceidg.cache.write_failed",
                extra={"extra": {"key": key, "error": repr(exc)}},
            )

    @staticmethod
    def _decode(key: str, entry: Mapping[str, Any]) -> _Hit | None:
        found = entry.get("found")
        if found is False:
            return _Hit(record=None)
        company = entry.get("company")
        if found is True and isinstance(company, Mapping):
            return _Hit(record=CompanyMapper.from_payload(company))
        logger.warning("ceidg.cache.entry_malformed", extra={"extra": {"key": key}})
        return None
