# src/ceidg_api/infrastructure/caching/json_cache.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""JSON Cache (Redis-backed).

Synopsis:
    Thin adapter that implements the application CachePort Protocol on top of
    the shared Redis client provided by `infrastructure/caching/redis_client.py`.
    Entries are shared by every service replica, which makes the lookup cache
    a distributed one.

Design:
    * Uses the global Redis client via `get_redis_client()`.
    * Pure JSON (utf-8) serialization; no pickle.
    * Key policy:
        - Namespace prefix owns service + resource + version:
            `ceidg:companies:v1`
        - Callers provide the remaining segments, e.g. `company:1234567890`.
    * Expiry is delegated to Redis (`SET key value EX ttl`).
    * Fill lock for cross-replica single-flight: `SET {key}:lock 1 NX EX ttl`.

Layer:
    infrastructure/caching
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from ceidg_api.application.interfaces.cache_port import CachePort
from ceidg_api.infrastructure.caching.redis_client import get_redis_client

__all__ = ["RedisJsonCache"]


class RedisJsonCache(CachePort):
    """Redis-backed implementation of the CachePort Protocol.

    Keys are built as ``{namespace}:{key}``.
    """

    def __init__(self, *, namespace: str = "ceidg:companies:v1") -> None:
        """Initialize the cache adapter.

        Args:
            namespace: Prefix applied to all keys to avoid collisions.
        """
        self._ns = namespace.rstrip(":")

    def _k(self, key: str) -> str:
        """Build a namespaced key from the resource-specific tail."""
        return f"{self._ns}:{key.lstrip(':')}"

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        """Get a JSON-serialized value by key.

        Args:
            key: Unqualified cache key.

        Returns:
            Deserialized mapping if present, else None.
        """
        raw = await get_redis_client().get(self._k(key))
        if raw is None:
            return None
        value = json.loads(raw)
        return value if isinstance(value, dict) else None

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: int) -> None:
        """Set a JSON-serialized value with TTL.

        Args:
            key: Unqualified cache key.
            value: JSON-serializable mapping.
            ttl: Time-to-live in seconds; values <= 0 are not stored.
        """
        if ttl <= 0:
            return
        await get_redis_client().set(self._k(key), json.dumps(value), ex=ttl)

    async def try_acquire_fill_lock(self, key: str, *, ttl: int) -> bool:
        """Claim ``{namespace}:{key}:lock`` with ``SET NX EX``.

        The lock is never deleted explicitly; it expires after ``ttl`` seconds.

        Args:
            key: Unqualified cache key being filled.
            ttl: Lock lifetime in seconds.

        Returns:
            ``True`` if the lock was acquired.
        """
        res = await get_redis_client().set(f"{self._k(key)}:lock", "1", nx=True, ex=max(1, ttl))
        return bool(res)
