"""Tests for HTTP-based adapters."""

import asyncio

import httpx
import pytest

from meal_planner.adapters.fdc_client import HttpxFdcClient
from meal_planner.adapters.off_client import HttpxOpenFoodFactsClient


def test_fdc_client_search_sends_query_and_data_types() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/fdc/v1/foods/search"
        seen.update(dict(request.url.params))
        return httpx.Response(200, json={"foods": [{"fdcId": 1}]})

    transport = httpx.MockTransport(handler)
    async_client = httpx.AsyncClient(transport=transport)
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://api.nal.usda.gov/fdc/v1",
        http_client=async_client,
    )

    result = asyncio.run(
        client.search_foods("apple", data_types=["Foundation", "SR Legacy"])
    )

    assert result == {"foods": [{"fdcId": 1}]}
    assert seen["query"] == "apple"
    assert seen["dataType"] == "Foundation,SR Legacy"
    assert seen["pageSize"] == "20"
    assert seen["api_key"] == "key"


def test_fdc_client_get_food_raises_for_missing_food() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path.endswith("/food/999")
        return httpx.Response(404, json={"error": "not found"})

    transport = httpx.MockTransport(handler)
    client = HttpxFdcClient(
        api_key="key",
        base_url="https://fdc.test",
        http_client=httpx.AsyncClient(transport=transport),
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(client.get_food(999))


def test_off_client_search_requests_fields() -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v2/search"
        seen.update(dict(request.url.params))
        return httpx.Response(200, json={"products": []})

    transport = httpx.MockTransport(handler)
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test",
        api_url="https://off.test/api/v2",
        http_client=httpx.AsyncClient(transport=transport),
    )

    result = asyncio.run(client.search_products("nutella", page_size=5))

    assert result == {"products": []}
    assert seen["search_terms"] == "nutella"
    assert seen["page_size"] == "5"
    assert "product_name" in seen["fields"].split(",")


def test_off_client_get_product_uses_barcode_path() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v0/product/3017620422003.json"
        return httpx.Response(200, json={"status": 1, "product": {"code": "1"}})

    transport = httpx.MockTransport(handler)
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test",
        api_url="https://off.test/api/v2",
        http_client=httpx.AsyncClient(transport=transport),
    )

    result = asyncio.run(client.get_product("3017620422003"))

    assert result == {"status": 1, "product": {"code": "1"}}


def test_off_client_upload_posts_multipart_form() -> None:
    captured: list[bytes] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/cgi/product_jqm2.pl"
        assert request.headers["content-type"].startswith("multipart/form-data")
        captured.append(request.read())
        return httpx.Response(200, json={"status": 1})

    transport = httpx.MockTransport(handler)
    client = HttpxOpenFoodFactsClient(
        base_url="https://off.test",
        api_url="https://off.test/api/v2",
        http_client=httpx.AsyncClient(transport=transport),
    )

    asyncio.run(
        client.upload_product(
            {"code": "123", "product_name": "Oat Bar"}, image=b"jpeg-bytes"
        )
    )

    body = captured[0]
    assert b'name="code"' in body
    assert b"Oat Bar" in body
    assert b'name="imgupload_front"' in body
    assert b"jpeg-bytes" in body
