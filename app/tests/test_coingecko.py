from __future__ import annotations

import httpx
import pytest

from app.services.coingecko import (
    DecodeFetchError,
    FetchErrorKind,
    HttpStatusFetchError,
    NetworkFetchError,
    decode_snapshot,
    fetch_snapshot,
)
from app.tests.payloads import make_coin


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_fetch_snapshot_preserves_provider_order():
    seen = []
    ranks = [3, 1, 2, 5, 4]

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[make_coin(r) for r in ranks])

    async with _client(handler) as client:
        snapshot = await fetch_snapshot(10, 1, client=client)

    assert len(seen) == 1
    assert [a.rank for a in snapshot] == ranks
    assert isinstance(snapshot, tuple)


@pytest.mark.asyncio
async def test_fetch_snapshot_sends_fixed_query():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        snapshot = await fetch_snapshot(10, 1, client=client)

    assert snapshot == ()
    params = seen[0].url.params
    assert seen[0].method == "GET"
    assert seen[0].url.path == "/api/v3/coins/markets"
    assert params["vs_currency"] == "usd"
    assert params["order"] == "market_cap_desc"
    assert params["per_page"] == "10"
    assert params["page"] == "1"


@pytest.mark.asyncio
async def test_fetch_snapshot_maps_fields_and_ignores_extras():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json=[
                {
                    "market_cap_rank": 1,
                    "name": "Bitcoin",
                    "symbol": "btc",
                    "current_price": 67123.45,
                    "price_change_percentage_24h": -1.234,
                    "image": "https://assets.example/btc.png",
                    "total_volume": 123,
                }
            ],
        )

    async with _client(handler) as client:
        (btc,) = await fetch_snapshot(client=client)

    assert btc.rank == 1
    assert btc.name == "Bitcoin"
    assert btc.symbol == "btc"
    assert btc.price_usd == pytest.approx(67123.45)
    assert btc.change_percent_24h == pytest.approx(-1.234)
    assert btc.icon_url == "https://assets.example/btc.png"


@pytest.mark.asyncio
async def test_http_500_is_status_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    async with _client(handler) as client:
        with pytest.raises(HttpStatusFetchError) as exc_info:
            await fetch_snapshot(10, 1, client=client)

    assert exc_info.value.status_code == 500
    assert exc_info.value.kind is FetchErrorKind.HTTP_STATUS
    assert exc_info.value.message == "Error: 500"


@pytest.mark.asyncio
async def test_non_json_body_is_decode_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="not json")

    async with _client(handler) as client:
        with pytest.raises(DecodeFetchError) as exc_info:
            await fetch_snapshot(10, 1, client=client)

    assert exc_info.value.kind is FetchErrorKind.DECODE


@pytest.mark.asyncio
async def test_missing_current_price_is_decode_error():
    broken = make_coin(2)
    del broken["current_price"]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[make_coin(1), broken])

    async with _client(handler) as client:
        with pytest.raises(DecodeFetchError) as exc_info:
            await fetch_snapshot(10, 1, client=client)

    assert "current_price" in exc_info.value.reason


@pytest.mark.asyncio
async def test_transport_failure_is_network_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as client:
        with pytest.raises(NetworkFetchError) as exc_info:
            await fetch_snapshot(10, 1, client=client)

    assert exc_info.value.kind is FetchErrorKind.NETWORK
    assert "connection refused" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize("limit, page", [(0, 1), (10, 0), (-1, 1), (True, 1)])
async def test_rejects_non_positive_paging(limit, page):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        with pytest.raises(ValueError):
            await fetch_snapshot(limit, page, client=client)

    assert calls == []


def test_decode_rejects_object_body():
    with pytest.raises(DecodeFetchError) as exc_info:
        decode_snapshot({"error": "rate limited"})
    assert "JSON array" in exc_info.value.reason


def test_decode_rejects_duplicate_ranks():
    with pytest.raises(DecodeFetchError) as exc_info:
        decode_snapshot([make_coin(1), make_coin(1, name="Other")])
    assert "duplicate" in exc_info.value.reason


def test_decode_rejects_negative_price_and_empty_name():
    with pytest.raises(DecodeFetchError):
        decode_snapshot([make_coin(1, current_price=-5)])
    with pytest.raises(DecodeFetchError):
        decode_snapshot([make_coin(1, name="")])


def test_decode_rejects_null_change():
    with pytest.raises(DecodeFetchError):
        decode_snapshot([make_coin(1, price_change_percentage_24h=None)])


@pytest.mark.parametrize(
    "override",
    [
        {"current_price": "12.5"},
        {"current_price": True},
        {"market_cap_rank": True},
        {"market_cap_rank": "1"},
        {"market_cap_rank": 1.0},
        {"price_change_percentage_24h": "-2.5"},
        {"name": 42},
        {"image": None},
    ],
)
def test_decode_rejects_wrong_json_types(override):
    with pytest.raises(DecodeFetchError):
        decode_snapshot([make_coin(1, **override)])


def test_decode_accepts_integer_prices():
    (asset,) = decode_snapshot([make_coin(1, current_price=100, price_change_percentage_24h=0)])
    assert asset.price_usd == 100
    assert asset.change_percent_24h == 0


@pytest.mark.asyncio
async def test_currency_and_order_are_not_configurable(monkeypatch):
    monkeypatch.setenv("MARKET_VS_CURRENCY", "eur")
    monkeypatch.setenv("MARKET_ORDER", "volume_desc")
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    async with _client(handler) as client:
        await fetch_snapshot(client=client)

    assert seen[0].url.params["vs_currency"] == "usd"
    assert seen[0].url.params["order"] == "market_cap_desc"
