"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from meal_planner.adapters.fdc_client import FdcClient, HttpxFdcClient
from meal_planner.adapters.off_client import (
    HttpxOpenFoodFactsClient,
    OpenFoodFactsClient,
)
from meal_planner.config import Settings, parse_data_types
from meal_planner.services.aggregator import FoodAggregatorService
from meal_planner.services.branded_products import OpenFoodFactsProvider
from meal_planner.services.cache import TtlCache
from meal_planner.services.raw_ingredients import UsdaIngredientProvider


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    fdc_client: FdcClient
    off_client: OpenFoodFactsClient
    aggregator_service: FoodAggregatorService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.usda_api_key,
        base_url=resolved_settings.usda_base_url,
        user_agent=resolved_settings.user_agent,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        api_url=resolved_settings.off_api_url,
        user_agent=resolved_settings.user_agent,
    )
    ingredient_provider = UsdaIngredientProvider(
        client=fdc_client,
        cache=TtlCache(ttl_seconds=resolved_settings.usda_cache_ttl_seconds),
        data_types=parse_data_types(resolved_settings.usda_data_types),
        page_size=resolved_settings.search_page_size,
        timeout_seconds=resolved_settings.search_timeout_seconds,
    )
    branded_provider = OpenFoodFactsProvider(
        client=off_client,
        cache=TtlCache(ttl_seconds=resolved_settings.off_cache_ttl_seconds),
        page_size=resolved_settings.search_page_size,
        search_timeout_seconds=resolved_settings.search_timeout_seconds,
        lookup_timeout_seconds=resolved_settings.lookup_timeout_seconds,
        user_id=resolved_settings.off_user_id,
        password=resolved_settings.off_password,
    )
    aggregator_service = FoodAggregatorService(
        ingredient_provider=ingredient_provider,
        branded_provider=branded_provider,
        min_primary_results=resolved_settings.min_primary_results,
    )

    async def close_resources() -> None:
        await fdc_client.close()
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        fdc_client=fdc_client,
        off_client=off_client,
        aggregator_service=aggregator_service,
        close_resources=close_resources,
    )
