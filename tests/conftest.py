"""Shared test fixtures."""

from dataclasses import dataclass, field

import httpx
import pytest

from meal_planner.adapters.fdc_client import FdcClient
from meal_planner.adapters.off_client import OpenFoodFactsClient
from meal_planner.config import Settings
from meal_planner.containers import AppContainer
from meal_planner.services.aggregator import FoodAggregatorService
from meal_planner.services.branded_products import OpenFoodFactsProvider
from meal_planner.services.cache import TtlCache
from meal_planner.services.raw_ingredients import UsdaIngredientProvider


def usda_food(
    fdc_id: int,
    description: str,
    calories: float = 100.0,
    protein: float = 10.0,
    carbs: float = 5.0,
    fat: float = 2.0,
    category: str | None = None,
    data_type: str = "Foundation",
) -> dict[str, object]:
    """Build a USDA search record in the FoodData Central shape."""
    food: dict[str, object] = {
        "fdcId": fdc_id,
        "description": description,
        "dataType": data_type,
        "foodNutrients": [
            {"nutrientNumber": "208", "value": calories},
            {"nutrientNumber": "203", "value": protein},
            {"nutrientNumber": "205", "value": carbs},
            {"nutrientNumber": "204", "value": fat},
        ],
    }
    if category:
        food["foodCategory"] = category
    return food


def off_product(
    code: str,
    name: str,
    calories: float = 250.0,
    protein: float = 5.0,
    carbs: float = 30.0,
    fat: float = 10.0,
    categories: list[str] | None = None,
) -> dict[str, object]:
    """Build an OpenFoodFacts product record."""
    return {
        "code": code,
        "product_name": name,
        "nutrition_grades": "c",
        "nova_group": 4,
        "nutriments": {
            "energy-kcal_100g": calories,
            "proteins_100g": protein,
            "carbohydrates_100g": carbs,
            "fat_100g": fat,
        },
        "categories_tags": categories or ["en:snacks"],
    }


def not_found(url: str) -> httpx.HTTPStatusError:
    """Build the error httpx raises for a 404 response."""
    request = httpx.Request("GET", url)
    response = httpx.Response(404, request=request)
    return httpx.HTTPStatusError("Not Found", request=request, response=response)


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client serving canned foods."""

    foods: list[dict[str, object]] = field(default_factory=list)
    foods_by_id: dict[int, dict[str, object]] = field(default_factory=dict)
    error: Exception | None = None
    search_calls: list[str] = field(default_factory=list)
    lookup_calls: list[int] = field(default_factory=list)
    closed: bool = False

    async def search_foods(
        self,
        query: str,
        data_types: list[str],
        page_size: int = 20,
        timeout: float = 10,
    ) -> object:
        self.search_calls.append(query)
        if self.error:
            raise self.error
        return {"totalHits": len(self.foods), "foods": list(self.foods)}

    async def get_food(self, fdc_id: int, timeout: float = 10) -> object:
        self.lookup_calls.append(fdc_id)
        if self.error:
            raise self.error
        if fdc_id not in self.foods_by_id:
            raise not_found(f"https://fdc.test/food/{fdc_id}")
        return self.foods_by_id[fdc_id]

    async def close(self) -> None:
        self.closed = True


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake OpenFoodFacts client serving canned products."""

    products: list[dict[str, object]] = field(default_factory=list)
    products_by_code: dict[str, dict[str, object]] = field(default_factory=dict)
    error: Exception | None = None
    search_calls: list[str] = field(default_factory=list)
    lookup_calls: list[str] = field(default_factory=list)
    uploads: list[tuple[dict[str, str], bytes | None]] = field(default_factory=list)
    closed: bool = False

    async def search_products(
        self, query: str, page_size: int = 20, timeout: float = 10
    ) -> object:
        self.search_calls.append(query)
        if self.error:
            raise self.error
        return {"count": len(self.products), "products": list(self.products)}

    async def get_product(self, barcode: str, timeout: float = 8) -> object:
        self.lookup_calls.append(barcode)
        if self.error:
            raise self.error
        product = self.products_by_code.get(barcode)
        if product is None:
            return {"status": 0, "status_verbose": "product not found"}
        return {"status": 1, "product": product}

    async def upload_product(
        self,
        fields: dict[str, str],
        image: bytes | None = None,
        timeout: float = 10,
    ) -> None:
        if self.error:
            raise self.error
        self.uploads.append((fields, image))

    async def close(self) -> None:
        self.closed = True


def build_aggregator(
    fdc_client: FakeFdcClient,
    off_client: FakeOpenFoodFactsClient,
    user_id: str | None = None,
    password: str | None = None,
) -> FoodAggregatorService:
    """Wire fake clients into real providers and an aggregator."""
    return FoodAggregatorService(
        ingredient_provider=UsdaIngredientProvider(
            client=fdc_client, cache=TtlCache(ttl_seconds=60)
        ),
        branded_provider=OpenFoodFactsProvider(
            client=off_client,
            cache=TtlCache(ttl_seconds=60),
            user_id=user_id,
            password=password,
        ),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        usda_api_key="usda-key",
        off_user_id="off-user",
        off_password="off-password",
    )


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def off_client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def aggregator(
    fdc_client: FakeFdcClient, off_client: FakeOpenFoodFactsClient
) -> FoodAggregatorService:
    return build_aggregator(
        fdc_client, off_client, user_id="off-user", password="off-password"
    )


@pytest.fixture
def container(
    settings: Settings,
    fdc_client: FakeFdcClient,
    off_client: FakeOpenFoodFactsClient,
    aggregator: FoodAggregatorService,
) -> AppContainer:
    async def close_resources() -> None:
        await fdc_client.close()
        await off_client.close()

    return AppContainer(
        settings=settings,
        fdc_client=fdc_client,
        off_client=off_client,
        aggregator_service=aggregator,
        close_resources=close_resources,
    )
