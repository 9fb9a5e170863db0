# tests/unit/infrastructure/caching/test_redis_json_cache_companies.py
from __future__ import annotations

import asyncio
import json
from datetime import date

import fakeredis.aioredis
import pytest

from ceidg_api.adapters.mappers.company_mapper import CompanyMapper
from ceidg_api.domain.entities.company import CompanyRecord
from ceidg_api.infrastructure.caching import redis_client as redis_client_module
from ceidg_api.infrastructure.caching.json_cache import RedisJsonCache
from ceidg_api.infrastructure.caching.lookup_cache import LookupCache


@pytest.mark.asyncio
async def test_redis_json_cache_key_shape_and_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)

    cache = RedisJsonCache(namespace="ceidg:companies:v1")
    await cache.set_json("company:1234567890", {"found": False}, ttl=3600)

    full_key = "ceidg:companies:v1:company:1234567890"
    assert await fake.get(full_key) == json.dumps({"found": False})
    ttl = await fake.ttl(full_key)
    assert 0 < ttl <= 3600
    assert await cache.get_json("company:1234567890") == {"found": False}


@pytest.mark.asyncio
async def test_redis_json_cache_ignores_non_object_values(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    await fake.set("ns:k", json.dumps([1, 2]))

    assert await RedisJsonCache(namespace="ns").get_json("k") is None


@pytest.mark.asyncio
async def test_lookup_cache_over_redis_serves_second_call(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    record = CompanyRecord(
        nip="1234567890",
        name="Jan Kowalski",
        activity_start_date=date(2019, 3, 1),
        created_date=date(2019, 3, 1),
    )
    calls = 0

    async def compute() -> CompanyRecord:
        nonlocal calls
        calls += 1
        return record

    cache = LookupCache(RedisJsonCache(namespace="ceidg:companies:v1"), ttl_s=60)
    assert await cache.get_or_compute("1234567890", compute) == record
    assert await cache.get_or_compute("1234567890", compute) == record
    assert calls == 1


KEY = "ceidg:companies:v1:company:1234567890"
RECORD = CompanyRecord(
    nip="1234567890",
    name="Jan Kowalski",
    activity_start_date=date(2019, 3, 1),
    created_date=date(2019, 3, 1),
)


@pytest.mark.asyncio
async def test_fill_lock_is_exclusive_and_expires(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    cache = RedisJsonCache(namespace="ceidg:companies:v1")

    assert await cache.try_acquire_fill_lock("company:1234567890", ttl=30) is True
    assert await cache.try_acquire_fill_lock("company:1234567890", ttl=30) is False
    assert 0 < await fake.ttl(f"{KEY}:lock") <= 30


@pytest.mark.asyncio
async def test_lookup_waits_for_replica_holding_fill_lock(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    store = RedisJsonCache(namespace="ceidg:companies:v1")
    await fake.set(f"{KEY}:lock", "1", ex=30)
    calls = 0

    async def compute() -> CompanyRecord:
        nonlocal calls
        calls += 1
        return RECORD

    async def other_replica_fills() -> None:
        await asyncio.sleep(0.05)
        await store.set_json(
            "company:1234567890",
            {"found": True, "company": CompanyMapper.to_payload(RECORD)},
            ttl=60,
        )

    cache = LookupCache(store, ttl_s=60, peer_wait_s=2.0, poll_interval_s=0.01)
    filler = asyncio.create_task(other_replica_fills())
    result = await cache.get_or_compute("1234567890", compute)
    await filler

    assert result == RECORD
    assert calls == 0


@pytest.mark.asyncio
async def test_lookup_computes_when_lock_holder_never_fills(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    await fake.set(f"{KEY}:lock", "1", ex=30)
    calls = 0

    async def compute() -> CompanyRecord:
        nonlocal calls
        calls += 1
        return RECORD

    cache = LookupCache(
        RedisJsonCache(namespace="ceidg:companies:v1"),
        ttl_s=60,
        peer_wait_s=0.05,
        poll_interval_s=0.01,
    )

    assert await cache.get_or_compute("1234567890", compute) == RECORD
    assert calls == 1
    assert json.loads(await fake.get(KEY))["found"] is True


@pytest.mark.asyncio
async def test_lookup_claims_fill_lock_before_computing(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)
    lock_seen: list[bool] = []

    async def compute() -> None:
        lock_seen.append(await fake.exists(f"{KEY}:lock") == 1)
        return None

    cache = LookupCache(RedisJsonCache(namespace="ceidg:companies:v1"), ttl_s=60)

    assert await cache.get_or_compute("1234567890", compute) is None
    assert lock_seen == [True]
    assert 0 < await fake.ttl(f"{KEY}:lock") <= 60


class _LockUnavailableCache(RedisJsonCache):
    async def try_acquire_fill_lock(self, key: str, *, ttl: int) -> bool:
        raise ConnectionError("redis down")


@pytest.mark.asyncio
async def test_lookup_computes_when_fill_lock_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    fake = fakeredis.aioredis.FakeRedis(decode_responses=True)
    monkeypatch.setattr(redis_client_module, "_client", fake)

    async def compute() -> CompanyRecord:
        return RECORD

    cache = LookupCache(_LockUnavailableCache(namespace="ceidg:companies:v1"), ttl_s=60)

    assert await cache.get_or_compute("1234567890", compute) == RECORD
