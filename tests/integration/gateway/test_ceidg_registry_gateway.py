# tests/integration/gateway/test_ceidg_registry_gateway.py
from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any

import httpx
import pytest
import pytest_asyncio
import respx

from ceidg_api.adapters.gateways.ceidg_gateway import CeidgRegistryGateway, merge_detail
from ceidg_api.domain.interfaces.gateways.company_registry_gateway import (
    RegistryError,
    RegistryFound,
    RegistryInvalidFormat,
    RegistryNotFound,
    RegistryTransportFailure,
)
from ceidg_api.domain.value_objects.nip import Nip
from ceidg_api.infrastructure.external_apis.ceidg.client import CeidgClient
from ceidg_api.infrastructure.external_apis.ceidg.settings import CeidgSettings

BASE_URL = "https://ceidg.test/api/ceidg/v3/firmy"
DETAIL_URL = "https://ceidg.test/api/ceidg/v3/firma/abc"
NIP = Nip("1234567890")


def _summary(**overrides: Any) -> dict[str, Any]:
    record: dict[str, Any] = {
        "nazwa": "Jan Kowalski",
        "wlasciciel": {"nip": "1234567890"},
        "telefon": "111",
        "email": "summary@example.pl",
        "link": DETAIL_URL,
    }
    record.update(overrides)
    return {"firmy": [record]}


@pytest_asyncio.fixture
async def gateway() -> AsyncIterator[CeidgRegistryGateway]:
    client = CeidgClient(CeidgSettings(api_key="k", base_url=BASE_URL))  # type: ignore[arg-type]
    yield CeidgRegistryGateway(client)
    await client.aclose()


@pytest.mark.asyncio
async def test_detail_overrides_present_contact_fields(gateway: CeidgRegistryGateway) -> None:
    with respx.mock:
        respx.get(BASE_URL).mock(return_value=httpx.Response(200, json=_summary()))
        detail = respx.get(DETAIL_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "firma": [
                        {
                            "telefon": "222",
                            "email": "",
                            "www": "https://example.pl",
                            "adresKorespondencyjny": {"miasto": "Kraków"},
                        }
                    ]
                },
            )
        )
        result = await gateway.fetch(NIP)

    assert detail.call_count == 1
    assert isinstance(result, RegistryFound)
    assert result.payload["telefon"] == "222"
    assert result.payload["email"] == "summary@example.pl"
    assert result.payload["www"] == "https://example.pl"
    assert result.payload["adresKorespondencyjny"] == {"miasto": "Kraków"}
    assert result.payload["nazwa"] == "Jan Kowalski"


@pytest.mark.asyncio
async def test_detail_fills_contact_field_missing_from_summary(
    gateway: CeidgRegistryGateway,
) -> None:
    with respx.mock:
        respx.get(BASE_URL).mock(return_value=httpx.Response(200, json=_summary(email=None)))
        respx.get(DETAIL_URL).mock(
            return_value=httpx.Response(200, json={"firma": [{"email": "a@b.com"}]})
        )
        result = await gateway.fetch(NIP)

    assert isinstance(result, RegistryFound)
    assert result.payload["email"] == "a@b.com"
    assert result.payload["telefon"] == "111"



@pytest.mark.asyncio
@pytest.mark.parametrize(
    "detail_response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(404),
        httpx.Response(200, json={"firma": []}),
        httpx.Response(200, text="not json"),
    ],
)
async def test_detail_failure_falls_back_to_summary(
    gateway: CeidgRegistryGateway, detail_response: httpx.Response
) -> None:
    with respx.mock:
        respx.get(BASE_URL).mock(return_value=httpx.Response(200, json=_summary()))
        respx.get(DETAIL_URL).mock(return_value=detail_response)
        result = await gateway.fetch(NIP)

    assert isinstance(result, RegistryFound)
    assert result.payload["telefon"] == "111"


@pytest.mark.asyncio
async def test_detail_transport_failure_falls_back_to_summary(
    gateway: CeidgRegistryGateway,
) -> None:
    with respx.mock:
        respx.get(BASE_URL).mock(return_value=httpx.Response(200, json=_summary()))
        respx.get(DETAIL_URL).mock(side_effect=httpx.ConnectError("refused"))
        result = await gateway.fetch(NIP)

    assert isinstance(result, RegistryFound)
    assert result.payload["email"] == "summary@example.pl"


@pytest.mark.asyncio
async def test_no_link_means_no_detail_call(gateway: CeidgRegistryGateway) -> None:
    with respx.mock(assert_all_called=False) as respx_mock:
        respx_mock.get(BASE_URL).mock(return_value=httpx.Response(200, json=_summary(link="")))
        detail = respx_mock.get(DETAIL_URL).mock(return_value=httpx.Response(200, json={}))
        result = await gateway.fetch(NIP)

    assert isinstance(result, RegistryFound)
    assert not detail.called


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response", "expected"),
    [
        (httpx.Response(404), RegistryNotFound),
        (httpx.Response(204), RegistryNotFound),
        (httpx.Response(200, json={"firmy": []}), RegistryNotFound),
        (httpx.Response(200, json={"unexpected": True}), RegistryNotFound),
        (httpx.Response(400, text="NIEPOPRAWNY_NUMER_NIP"), RegistryInvalidFormat),
        (httpx.Response(503, text="down"), RegistryError),
    ],
)
async def test_summary_outcomes(
    gateway: CeidgRegistryGateway, response: httpx.Response, expected: type
) -> None:
    with respx.mock:
        respx.get(BASE_URL).mock(return_value=response)
        result = await gateway.fetch(NIP)
    assert isinstance(result, expected)


@pytest.mark.asyncio
async def test_summary_transport_failure(gateway: CeidgRegistryGateway) -> None:
    with respx.mock:
        respx.get(BASE_URL).mock(side_effect=httpx.ReadTimeout("slow"))
        result = await gateway.fetch(NIP)
    assert isinstance(result, RegistryTransportFailure)


def test_merge_detail_does_not_mutate_inputs() -> None:
    summary = {"telefon": "1", "nazwa": "A"}
    detail = {"telefon": "2", "nazwa": "B"}
    merged = merge_detail(summary, detail)
    assert merged == {"telefon": "2", "nazwa": "A"}
    assert summary == {"telefon": "1", "nazwa": "A"}
