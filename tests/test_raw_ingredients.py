"""Tests for the USDA ingredient provider."""

import asyncio

import httpx
import pytest

from meal_planner.domain.errors import ErrorKind, ProviderError
from meal_planner.domain.foods import FoodSource, FoodType
from meal_planner.services.cache import TtlCache
from meal_planner.services.raw_ingredients import (
    UsdaIngredientProvider,
    clean_food_name,
    food_to_item,
)
from tests.conftest import FakeFdcClient, usda_food


def _provider(client: FakeFdcClient) -> UsdaIngredientProvider:
    return UsdaIngredientProvider(client=client, cache=TtlCache(ttl_seconds=60))


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Chicken breast, raw", "Chicken Breast (raw)"),
        ("BEEF, GROUND, cooked", "Beef, Ground (cooked)"),
        ("Milk, whole, with added vitamin D", "Milk, Whole"),
        ("Beef, loin, grade choice", "Beef, Loin"),
        ("Rice, white, nfs", "Rice, White"),
    ],
)
def test_clean_food_name(description: str, expected: str) -> None:
    assert clean_food_name(description) == expected


def test_food_to_item_builds_ingredient() -> None:
    record = usda_food(171077, "Chicken breast, raw", calories=120, protein=22.5)
    record["foodCategory"] = {"description": "Poultry Products"}
    record["foodPortions"] = [
        {"amount": 1, "measureUnit": {"abbreviation": "cup"}, "gramWeight": 140},
        {"amount": 0.5, "modifier": "breast", "measureUnit": {}, "gramWeight": 118},
    ]

    item = food_to_item(record)

    assert item is not None
    assert item.id == "usda-171077"
    assert item.source is FoodSource.USDA
    assert item.type is FoodType.INGREDIENT
    assert item.name == "Chicken Breast (raw)"
    assert item.description == "Chicken Breast (raw) - USDA Foundation"
    assert item.nutrition.protein == 22.5
    assert item.ingredient is not None
    assert item.ingredient.category == "Poultry Products"
    assert [size.description for size in item.serving_sizes] == [
        "1 cup",
        "0.5 breast",
    ]


def test_food_to_item_skips_short_names() -> None:
    assert food_to_item(usda_food(1, "Ab")) is None


def test_search_skips_unconvertible_records_and_caches() -> None:
    client = FakeFdcClient(
        foods=[
            usda_food(1, "Apples, raw"),
            {"description": "Missing id"},
            "not-a-record",
            usda_food(2, "Xy"),
        ]
    )
    provider = _provider(client)

    first = asyncio.run(provider.search("Apple"))
    second = asyncio.run(provider.search(" apple "))

    assert [item.id for item in first] == ["usda-1"]
    assert second == first
    assert client.search_calls == ["Apple"]


def test_search_short_query_makes_no_call() -> None:
    client = FakeFdcClient(foods=[usda_food(1, "Apples, raw")])

    assert asyncio.run(_provider(client).search(" a ")) == []
    assert client.search_calls == []


def test_search_translates_http_failures() -> None:
    request = httpx.Request("GET", "https://fdc.test/foods/search")
    client = FakeFdcClient(
        error=httpx.HTTPStatusError(
            "boom", request=request, response=httpx.Response(503, request=request)
        )
    )

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(_provider(client).search("apple"))

    assert excinfo.value.kind is ErrorKind.PROVIDER_UNAVAILABLE
    assert excinfo.value.status_code == 503


def test_search_rejects_malformed_payload() -> None:
    class _BrokenClient(FakeFdcClient):
        async def search_foods(
            self,
            query: str,
            data_types: list[str],
            page_size: int = 20,
            timeout: float = 10,
        ) -> object:
            return {"foods": "nope"}

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(_provider(_BrokenClient()).search("apple"))

    assert excinfo.value.kind is ErrorKind.PARSE_FAILURE


def test_lookup_by_id_returns_none_for_unknown_food() -> None:
    client = FakeFdcClient()

    assert asyncio.run(_provider(client).lookup_by_id(42)) is None


def test_lookup_by_id_caches_found_food() -> None:
    client = FakeFdcClient(foods_by_id={7: usda_food(7, "Oats, rolled")})
    provider = _provider(client)

    first = asyncio.run(provider.lookup_by_id(7))
    second = asyncio.run(provider.lookup_by_id(7))

    assert first is not None
    assert first == second
    assert client.lookup_calls == [7]
