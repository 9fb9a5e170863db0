# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""In-memory JSON cache.

Process-local :class:`CachePort` implementation used when no Redis is
configured and in hermetic tests. Entries expire on a monotonic clock; values
are deep-copied through JSON so callers can never mutate a stored entry.

Every write sweeps expired entries, and an optional ``max_entries`` cap evicts
the oldest writes first, so the store stays bounded however many distinct
keys are queried.
"""

from __future__ import annotations

import asyncio
import json
import time
from collections.abc import Callable, Mapping
from typing import Any

from ceidg_api.application.interfaces.cache_port import CachePort

__all__ = ["InMemoryJsonCache", "DEFAULT_MAX_ENTRIES"]

DEFAULT_MAX_ENTRIES = 10_000


class InMemoryJsonCache(CachePort):
    """Asyncio-safe in-memory cache with per-entry TTL.

    Args:
        clock: Monotonic clock returning seconds; injectable for tests.
        max_entries: Upper bound on stored entries; ``None`` disables the cap.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        max_entries: int | None = DEFAULT_MAX_ENTRIES,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._clock = clock
        self._max_entries = max_entries
        # Insertion order is write order; the first key is the oldest write.
        self._data: dict[str, tuple[float, str]] = {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._data)

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        async with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires_at, raw = item
            if self._clock() >= expires_at:
                self._data.pop(key, None)
                return None
            return json.loads(raw)

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: int) -> None:
        if ttl <= 0:
            return
        raw = json.dumps(value)
        async with self._lock:
            now = self._clock()
            self._purge_expired(now)
            self._data.pop(key, None)
            self._data[key] = (now + ttl, raw)
            if self._max_entries is not None:
                while len(self._data) > self._max_entries:
                    del self._data[next(iter(self._data))]

    async def clear(self) -> None:
        """Drop every entry."""
        async with self._lock:
            self._data.clear()

    def _purge_expired(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._data.items() if now >= expires_at]
        for k in expired:
            del self._data[k]
