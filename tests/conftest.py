# tests/conftest.py
from __future__ import annotations

from collections.abc import Iterator

import pytest

from ceidg_api.config.settings import get_settings
from ceidg_api.infrastructure.caching import redis_client as redis_client_module


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep process settings and the Redis singleton from leaking across tests."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    redis_client_module._client = None
