"""Tests for container wiring."""

import asyncio

from meal_planner.config import Settings, parse_data_types
from meal_planner.containers import build_container


def test_build_container_wires_providers(settings: Settings) -> None:
    container = build_container(settings)
    aggregator = container.aggregator_service

    assert aggregator.ingredient_provider.data_types == ["Foundation", "SR Legacy"]
    assert aggregator.ingredient_provider.cache.ttl_seconds == 24 * 60 * 60
    assert aggregator.branded_provider.cache.ttl_seconds == 12 * 60 * 60
    assert aggregator.branded_provider.user_id == "off-user"
    assert aggregator.min_primary_results == 5
    asyncio.run(container.close_resources())


def test_parse_data_types() -> None:
    assert parse_data_types(" Foundation, SR Legacy ,") == ["Foundation", "SR Legacy"]
    assert parse_data_types(None) == []
