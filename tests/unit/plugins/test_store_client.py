from __future__ import annotations

import asyncio

import httpx
import pytest

from svc_content.exceptions import StoreRequestError
from svc_content.plugins.bigcommerce import StoreClient

pytestmark = [pytest.mark.plugins, pytest.mark.asyncio]


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_fetch_unwraps_data_and_sends_token():
    seen: list[httpx.Request] = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"data": [{"id": 1}], "meta": {}})

    async with _client(handler) as http:
        store = StoreClient("abc123", "tok", client=http)
        assert await store.get("v3/catalog/products", queries={"limit": 5, "empty": None}) == [{"id": 1}]

    assert str(seen[0].url) == "https://api.bigcommerce.com/stores/abc123/v3/catalog/products?limit=5"
    assert seen[0].headers["x-auth-token"] == "tok"


async def test_raw_keeps_envelope():
    async with _client(lambda r: httpx.Response(200, json={"data": [], "meta": {"x": 1}})) as http:
        store = StoreClient("abc", "tok", client=http)
        assert await store.fetch("v3/x", raw=True) == {"data": [], "meta": {"x": 1}}


async def test_no_content_returns_none():
    async with _client(lambda r: httpx.Response(204)) as http:
        assert await StoreClient("abc", "tok", client=http).delete("v3/x/1") is None


async def test_server_errors_retried_three_times():
    calls = 0

    def handler(request):
        nonlocal calls
        calls += 1
        return httpx.Response(503, text="busy")

    async with _client(handler) as http:
        with pytest.raises(StoreRequestError) as exc_info:
            await StoreClient("abc", "tok", client=http).get("v3/x")

    assert calls == 3
    assert exc_info.value.status == 503


async def test_server_error_then_success():
    responses = iter([httpx.Response(500), httpx.Response(200, json={"data": {"ok": True}})])

    async with _client(lambda r: next(responses)) as http:
        assert await StoreClient("abc", "tok", client=http).get("v3/x") == {"ok": True}


async def test_client_error_not_retried():
    calls = 0

    def handler(request):
        nonlocal calls
        calls += 1
        return httpx.Response(404, text="missing")

    async with _client(handler) as http:
        with pytest.raises(StoreRequestError):
            await StoreClient("abc", "tok", client=http).post("v3/x", body={"a": 1})

    assert calls == 1


async def test_get_all_follows_v3_total_pages():
    def handler(request):
        page = int(request.url.params["page"])
        return httpx.Response(
            200, json={"data": [{"id": page}], "meta": {"pagination": {"total_pages": 3}}}
        )

    async with _client(handler) as http:
        items = await StoreClient("abc", "tok", client=http).get_all("v3/catalog/products")

    assert items == [{"id": 1}, {"id": 2}, {"id": 3}]


async def test_get_all_v2_stops_on_short_page():
    def handler(request):
        page = int(request.url.params["page"])
        return httpx.Response(200, json=[{"id": page}, {"id": page * 10}] if page < 3 else [{"id": 99}])

    async with _client(handler) as http:
        items = await StoreClient("abc", "tok", client=http).get_all("v2/orders", queries={"limit": 2})

    assert [i["id"] for i in items] == [1, 10, 2, 20, 99]


async def test_batch_requests_limits_concurrency():
    in_flight = 0
    peak = 0

    async def request(i):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0)
        in_flight -= 1
        return i

    results = await StoreClient("abc", "tok").batch_requests([lambda i=i: request(i) for i in range(7)], 3)

    assert results == list(range(7))
    assert peak <= 3


async def test_batch_requests_rejects_zero_concurrency():
    with pytest.raises(ValueError):
        await StoreClient("abc", "tok").batch_requests([], 0)


async def test_batch_requests_defaults_to_batch_size():
    in_flight = 0
    peak = 0

    async def request(i):
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0)
        in_flight -= 1
        return i

    store = StoreClient("abc", "tok", batch_size=2)
    assert await store.batch_requests([lambda i=i: request(i) for i in range(5)]) == list(range(5))
    assert peak == 2


async def test_server_error_retries_stop_at_first_client_error():
    replies = iter([httpx.Response(502), httpx.Response(422, text="bad"), httpx.Response(200, json={"data": 1})])
    calls = 0

    def handler(request):
        nonlocal calls
        calls += 1
        return next(replies)

    async with _client(handler) as http:
        with pytest.raises(StoreRequestError) as exc_info:
            await StoreClient("abc", "tok", client=http).get("v3/x")

    assert calls == 2
    assert exc_info.value.status == 422
