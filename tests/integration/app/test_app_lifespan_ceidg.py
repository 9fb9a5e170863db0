# tests/integration/app/test_app_lifespan_ceidg.py
from __future__ import annotations

from collections.abc import Iterator

import httpx
import pytest
import respx
from fastapi.testclient import TestClient

from ceidg_api.config.settings import get_settings
from ceidg_api.main import create_app

BASE_URL = "https://ceidg.test/api/ceidg/v3/firmy"
DETAIL_URL = "https://ceidg.test/api/ceidg/v3/firma/abc"


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.setenv("CEIDG_API_KEY", "lifespan-key")
    monkeypatch.setenv("CEIDG_BASE_URL", BASE_URL)
    monkeypatch.setenv("CEIDG_RETRY_AFTER_S", "15")
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_end_to_end_lookup_with_detail_merge(env: None) -> None:
    with respx.mock(assert_all_called=False) as mock:
        summary = mock.get(BASE_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "firmy": [
                        {
                            "nazwa": "Anna Nowak",
                            "wlasciciel": {"nip": "5260250274"},
                            "dataRozpoczecia": "2015-06-01",
                            "adresDzialalnosci": {"miasto": "Katowice"},
                            "link": DETAIL_URL,
                        }
                    ]
                },
            )
        )
        detail = mock.get(DETAIL_URL).mock(
            return_value=httpx.Response(
                200, json={"firma": [{"email": "anna@example.pl", "telefon": "600100200"}]}
            )
        )

        with TestClient(create_app()) as client:
            first = client.get("/v1/ceidg/companies/5260250274")
            second = client.get("/v1/ceidg/companies/5260250274")

    assert first.status_code == 200
    assert second.status_code == 200
    data = first.json()["data"]
    assert data["email"] == "anna@example.pl"
    assert data["phone"] == "600100200"
    assert data["business_address"]["formatted"] == "Katowice"
    assert summary.call_count == 1
    assert detail.call_count == 1
    assert summary.calls.last.request.headers["Authorization"] == "Bearer lifespan-key"


def test_upstream_outage_returns_503_and_is_retried(env: None) -> None:
    with respx.mock as mock:
        route = mock.get(BASE_URL).mock(return_value=httpx.Response(502, text="bad gateway"))

        with TestClient(create_app()) as client:
            first = client.get("/v1/ceidg/companies/5260250274")
            second = client.get("/v1/ceidg/companies/5260250274")

    assert first.status_code == 503
    assert first.headers["Retry-After"] == "15"
    assert "bad gateway" not in first.text
    assert second.status_code == 503
    assert route.call_count == 2


def test_not_found_is_cached(env: None) -> None:
    with respx.mock as mock:
        route = mock.get(BASE_URL).mock(return_value=httpx.Response(404))

        with TestClient(create_app()) as client:
            codes = [client.get("/v1/ceidg/companies/1111111111").status_code for _ in range(3)]

    assert codes == [404, 404, 404]
    assert route.call_count == 1
