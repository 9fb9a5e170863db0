# tests/unit/infrastructure/caching/test_memory_json_cache.py
from __future__ import annotations

import pytest

from ceidg_api.infrastructure.caching.memory_cache import InMemoryJsonCache


@pytest.mark.asyncio
async def test_values_are_copied_and_expire() -> None:
    now = [0.0]
    cache = InMemoryJsonCache(clock=lambda: now[0])
    value = {"found": True, "company": {"nazwa": "A"}}

    await cache.set_json("k", value, ttl=5)
    value["company"]["nazwa"] = "mutated"

    assert await cache.get_json("k") == {"found": True, "company": {"nazwa": "A"}}
    now[0] = 5.0
    assert await cache.get_json("k") is None


@pytest.mark.asyncio
async def test_non_positive_ttl_is_not_stored() -> None:
    cache = InMemoryJsonCache()
    await cache.set_json("k", {"found": False}, ttl=0)
    assert await cache.get_json("k") is None


@pytest.mark.asyncio
async def test_clear_drops_entries() -> None:
    cache = InMemoryJsonCache()
    await cache.set_json("k", {"found": False}, ttl=60)
    await cache.clear()
    assert await cache.get_json("k") is None


@pytest.mark.asyncio
async def test_set_purges_entries_that_expired_unread() -> None:
    now = [0.0]
    cache = InMemoryJsonCache(clock=lambda: now[0])
    for i in range(1000):
        await cache.set_json(f"company:{i:010d}", {"found": False}, ttl=3600)
    assert len(cache) == 1000

    now[0] = 10_000.0
    await cache.set_json("company:fresh", {"found": False}, ttl=3600)

    assert len(cache) == 1
    assert await cache.get_json("company:fresh") == {"found": False}


@pytest.mark.asyncio
async def test_max_entries_evicts_oldest_write_first() -> None:
    cache = InMemoryJsonCache(max_entries=2)
    await cache.set_json("a", {"v": 1}, ttl=60)
    await cache.set_json("b", {"v": 2}, ttl=60)
    await cache.set_json("a", {"v": 3}, ttl=60)
    await cache.set_json("c", {"v": 4}, ttl=60)

    assert len(cache) == 2
    assert await cache.get_json("b") is None
    assert await cache.get_json("a") == {"v": 3}
    assert await cache.get_json("c") == {"v": 4}


def test_max_entries_must_be_positive() -> None:
    with pytest.raises(ValueError):
        InMemoryJsonCache(max_entries=0)
