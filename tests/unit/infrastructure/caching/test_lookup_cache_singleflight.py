# tests/unit/infrastructure/caching/test_lookup_cache_singleflight.py
from __future__ import annotations

import asyncio
from collections.abc import Mapping
from datetime import date
from typing import Any

import pytest

from ceidg_api.domain.entities.address import Address
from ceidg_api.domain.entities.company import CompanyRecord
from ceidg_api.domain.exceptions.ceidg import LookupComputeFailed
from ceidg_api.infrastructure.caching.lookup_cache import LookupCache
from ceidg_api.infrastructure.caching.memory_cache import InMemoryJsonCache

NIP = "1234567890"
RECORD = CompanyRecord(
    nip=NIP,
    name="Jan Kowalski",
    activity_start_date=date(2019, 3, 1),
    created_date=date(2019, 3, 1),
    business_address=Address(city="Warszawa", postal_code="00-001"),
    phone="123",
)


class _Loader:
    """Counting compute callable gated by an event."""

    def __init__(self, result: CompanyRecord | None = RECORD, error: Exception | None = None):
        self.calls = 0
        self.gate = asyncio.Event()
        self.gate.set()
        self._result = result
        self._error = error

    async def __call__(self) -> CompanyRecord | None:
        self.calls += 1
        await self.gate.wait()
        if self._error is not None:
            raise self._error
        return self._result


class _BrokenStore:
    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        raise ConnectionError("cache down")

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: int) -> None:
        raise ConnectionError("cache down")


async def _wait_inflight(cache: LookupCache, n: int = 1) -> None:
    for _ in range(100):
        if cache.inflight_count() == n:
            return
        await asyncio.sleep(0)
    raise AssertionError("computation never started")


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_computation() -> None:
    cache = LookupCache(InMemoryJsonCache())
    loader = _Loader()
    loader.gate.clear()

    tasks = [asyncio.create_task(cache.get_or_compute(NIP, loader)) for _ in range(10)]
    await _wait_inflight(cache)
    loader.gate.set()
    results = await asyncio.gather(*tasks)

    assert loader.calls == 1
    assert all(r == RECORD for r in results)
    assert cache.inflight_count() == 0


@pytest.mark.asyncio
async def test_second_call_is_served_from_cache() -> None:
    cache = LookupCache(InMemoryJsonCache())
    loader = _Loader()

    first = await cache.get_or_compute(NIP, loader)
    second = await cache.get_or_compute(NIP, loader)

    assert loader.calls == 1
    assert first == second == RECORD


@pytest.mark.asyncio
async def test_negative_result_is_cached() -> None:
    cache = LookupCache(InMemoryJsonCache())
    loader = _Loader(result=None)

    assert await cache.get_or_compute(NIP, loader) is None
    assert await cache.get_or_compute(NIP, loader) is None
    assert loader.calls == 1


@pytest.mark.asyncio
async def test_failure_is_shared_and_not_cached() -> None:
    cache = LookupCache(InMemoryJsonCache())
    loader = _Loader(error=RuntimeError("upstream 500"))
    loader.gate.clear()

    tasks = [asyncio.create_task(cache.get_or_compute(NIP, loader)) for _ in range(3)]
    await _wait_inflight(cache)
    loader.gate.set()
    results = await asyncio.gather(*tasks, return_exceptions=True)

    assert loader.calls == 1
    assert all(isinstance(r, LookupComputeFailed) for r in results)
    assert isinstance(results[0].cause, RuntimeError)  # type: ignore[union-attr]

    with pytest.raises(LookupComputeFailed):
        await cache.get_or_compute(NIP, loader)
    assert loader.calls == 2


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_computation() -> None:
    cache = LookupCache(InMemoryJsonCache())
    loader = _Loader()
    loader.gate.clear()

    first = asyncio.create_task(cache.get_or_compute(NIP, loader))
    await _wait_inflight(cache)
    second = asyncio.create_task(cache.get_or_compute(NIP, loader))
    await asyncio.sleep(0)

    first.cancel()
    with pytest.raises(asyncio.CancelledError):
        await first

    loader.gate.set()
    assert await second == RECORD
    assert loader.calls == 1
    # The result was still stored.
    assert await cache.get_or_compute(NIP, loader) == RECORD
    assert loader.calls == 1


@pytest.mark.asyncio
async def test_distinct_keys_compute_independently() -> None:
    cache = LookupCache(InMemoryJsonCache())
    loader = _Loader()

    await cache.get_or_compute("1111111111", loader)
    await cache.get_or_compute("2222222222", loader)

    assert loader.calls == 2


@pytest.mark.asyncio
async def test_entries_expire_after_ttl() -> None:
    now = [1000.0]
    cache = LookupCache(InMemoryJsonCache(clock=lambda: now[0]), ttl_s=10)
    loader = _Loader()

    await cache.get_or_compute(NIP, loader)
    now[0] += 9
    await cache.get_or_compute(NIP, loader)
    assert loader.calls == 1

    now[0] += 2
    await cache.get_or_compute(NIP, loader)
    assert loader.calls == 2


@pytest.mark.asyncio
async def test_backend_errors_degrade_to_uncached_lookups() -> None:
    cache = LookupCache(_BrokenStore())  # type: ignore[arg-type]
    loader = _Loader()

    assert await cache.get_or_compute(NIP, loader) == RECORD
    assert await cache.get_or_compute(NIP, loader) == RECORD
    assert loader.calls == 2


@pytest.mark.asyncio
async def test_malformed_entry_is_treated_as_miss() -> None:
    store = InMemoryJsonCache()
    await store.set_json(LookupCache.key_for(NIP), {"found": "maybe"}, ttl=60)
    cache = LookupCache(store)
    loader = _Loader()

    assert await cache.get_or_compute(NIP, loader) == RECORD
    assert loader.calls == 1
    entry = await store.get_json(LookupCache.key_for(NIP))
    assert entry is not None
    assert entry["found"] is True
    assert entry["company"]["wlasciciel"] == {"nip": NIP}
