# src/ceidg_api/application/interfaces/cache_port.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Application Interface: Cache Port.

Synopsis:
    Minimal JSON cache behavior used by the lookup cache. Enables swapping
    Redis, in-memory, or other cache implementations.

Layer:
    application/interfaces
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


class CachePort(Protocol):
    """JSON cache with TTL semantics.

    Implementations must store values as JSON-serializable mappings and apply
    TTL in seconds. A TTL <= 0 means "do not cache".
    """

    async def get_json(self, key: str) -> Mapping[str, Any] | None:
        """Get a JSON-serializable value by key.

        Args:
            key: Cache key (namespacing is the implementation's concern).

        Returns:
            Deserialized JSON mapping if present and not expired, else ``None``.
        """
        ...

    async def set_json(self, key: str, value: Mapping[str, Any], *, ttl: int) -> None:
        """Set a JSON-serializable value with TTL.

        Args:
            key: Cache key.
            value: JSON-serializable mapping.
            ttl: Time-to-live in seconds.
        """
        ...


@runtime_checkable
class FillLockPort(Protocol):
    """Optional capability of shared backends: a short-lived fill lock.

    Lets several processes sharing one backend agree on which of them fills a
    missing key. Backends local to one process do not implement it.
    """

    async def try_acquire_fill_lock(self, key: str, *, ttl: int) -> bool:
        """Claim the right to fill ``key`` for ``ttl`` seconds.

        Returns:
            ``True`` if this caller holds the lock, ``False`` if another
            holder claimed it first.
        """
        ...
