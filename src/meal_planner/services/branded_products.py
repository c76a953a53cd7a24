"""OpenFoodFacts adapter producing canonical branded products."""

import logging
from dataclasses import dataclass

from meal_planner.adapters.off_client import OpenFoodFactsClient
from meal_planner.domain.errors import ErrorKind, InvalidInputError, ProviderError
from meal_planner.domain.foods import (
    BrandedMetadata,
    CanonicalFoodItem,
    FoodSource,
    NovaGroup,
    NutrientLevel,
    NutrientLevels,
    NutriScore,
    ProductUpload,
)
from meal_planner.services.cache import Cache, cache_key
from meal_planner.services.classification import branded_food_type
from meal_planner.services.nutrients import off_profile
from meal_planner.services.providers import (
    call_provider,
    convert_batch,
    is_searchable,
    records_from,
)

MIN_NAME_LENGTH = 2
PRODUCT_FOUND = 1

_DIETARY_LABELS = (
    ("en:vegetarian", "Vegetarian"),
    ("en:vegan", "Vegan"),
    ("en:palm-oil-free", "Palm oil free"),
    ("en:gluten-free", "Gluten free"),
)

_logger = logging.getLogger(__name__)


@dataclass
class OpenFoodFactsProvider:
    """Branded-product provider backed by OpenFoodFacts."""

    client: OpenFoodFactsClient
    cache: Cache
    page_size: int = 20
    search_timeout_seconds: float = 10
    lookup_timeout_seconds: float = 8
    user_id: str | None = None
    password: str | None = None
    name: str = FoodSource.OPENFOODFACTS.value

    async def search(self, query: str) -> list[CanonicalFoodItem]:
        """Search products, serving repeated queries from the cache."""
        if not is_searchable(query):
            return []
        key = cache_key(self.name, "search", query)
        cached = self.cache.get(key)
        if isinstance(cached, tuple):
            _logger.info("OpenFoodFacts cache hit: %s", query)
            return list(cached)

        payload = await call_provider(
            self.name,
            lambda: self.client.search_products(
                query.strip(),
                page_size=self.page_size,
                timeout=self.search_timeout_seconds,
            ),
            timeout=self.search_timeout_seconds,
        )
        items = convert_batch(
            records_from(payload, "products", self.name), product_to_item, self.name
        )
        self.cache.put(key, tuple(items))
        _logger.info("OpenFoodFacts search: query=%s results=%s", query, len(items))
        return items

    async def lookup_by_id(self, barcode: str) -> CanonicalFoodItem | None:
        """Look up a product by exact barcode; None when it is unknown."""
        key = cache_key(self.name, "product", barcode)
        cached = self.cache.get(key)
        if isinstance(cached, CanonicalFoodItem):
            return cached

        try:
            payload = await call_provider(
                self.name,
                lambda: self.client.get_product(
                    barcode, timeout=self.lookup_timeout_seconds
                ),
                timeout=self.lookup_timeout_seconds,
            )
        except ProviderError as exc:
            if exc.kind is ErrorKind.NOT_FOUND:
                return None
            raise
        if not isinstance(payload, dict):
            raise ProviderError(
                ErrorKind.PARSE_FAILURE, self.name, "Product payload is not an object"
            )
        product = payload.get("product")
        if payload.get("status") != PRODUCT_FOUND or not isinstance(product, dict):
            return None
        try:
            item = product_to_item(product)
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(
                ErrorKind.PARSE_FAILURE, self.name, f"Unreadable product {barcode}"
            ) from exc
        if item is not None:
            self.cache.put(key, item)
        return item

    async def upload_product(self, upload: ProductUpload) -> None:
        """Contribute a product; raises on missing credentials or failure."""
        if not self.user_id or not self.password:
            raise InvalidInputError("OpenFoodFacts credentials are not configured")
        fields = upload_fields(upload, self.user_id, self.password)
        await call_provider(
            self.name,
            lambda: self.client.upload_product(
                fields, image=upload.image, timeout=self.search_timeout_seconds
            ),
            timeout=self.search_timeout_seconds,
        )
        _logger.info("OpenFoodFacts upload accepted: barcode=%s", upload.barcode)


def product_to_item(product: dict) -> CanonicalFoodItem | None:
    """Convert an OpenFoodFacts product; None for products without a name."""
    name = product.get("product_name")
    if not isinstance(name, str) or len(name.strip()) < MIN_NAME_LENGTH:
        return None
    barcode = str(product["code"]).strip()
    if not barcode:
        raise ValueError("product has an empty barcode")
    nutriments = product.get("nutriments")
    if not isinstance(nutriments, dict):
        nutriments = {}
    categories = _tags(product.get("categories_tags"))
    metadata = BrandedMetadata(
        barcode=barcode,
        nutri_score=NutriScore.parse(product.get("nutrition_grades")),
        nova_group=NovaGroup.parse(product.get("nova_group")),
        nutrient_levels=_nutrient_levels(product.get("nutrient_levels")),
        dietary_tags=_tags(product.get("ingredients_analysis_tags")),
        categories=categories,
        countries=_tags(product.get("countries_tags")),
        last_modified=product.get("last_modified_t"),
    )
    return CanonicalFoodItem(
        id=f"{FoodSource.OPENFOODFACTS.id_prefix}{barcode}",
        name=name.strip(),
        source=FoodSource.OPENFOODFACTS,
        type=branded_food_type(categories),
        nutrition=off_profile(nutriments),
        provider_data=metadata,
        image_url=product.get("image_url") or product.get("image_front_url"),
        description=describe_product(metadata),
    )


def describe_product(metadata: BrandedMetadata) -> str:
    """Build a short display description from grades and dietary tags."""
    parts = []
    if metadata.nutri_score is not None:
        parts.append(f"Nutri-Score: {metadata.nutri_score.value}")
    if metadata.nova_group is not None:
        parts.append(f"Processing: {metadata.nova_group.description}")
    parts.extend(
        label for tag, label in _DIETARY_LABELS if tag in metadata.dietary_tags
    )
    return " • ".join(parts)


def upload_fields(
    upload: ProductUpload, user_id: str, password: str
) -> dict[str, str]:
    """Build the form fields for a product contribution."""
    fields = {
        "code": upload.barcode,
        "product_name": upload.name,
        "user_id": user_id,
        "password": password,
    }
    nutrition = upload.nutrition
    if nutrition is not None:
        fields["nutrition_data_per"] = "100g"
        fields["nutriment_energy"] = str(nutrition.calories)
        fields["nutriment_energy_unit"] = "kcal"
        fields["nutriment_proteins"] = str(nutrition.protein)
        fields["nutriment_carbohydrates"] = str(nutrition.carbohydrates)
        fields["nutriment_fat"] = str(nutrition.fat)
        if nutrition.fiber is not None:
            fields["nutriment_fiber"] = str(nutrition.fiber)
        if nutrition.sugar is not None:
            fields["nutriment_sugars"] = str(nutrition.sugar)
        if nutrition.sodium is not None:
            fields["nutriment_sodium"] = str(nutrition.sodium / 1000)
    if upload.ingredients:
        fields["ingredients_text"] = upload.ingredients
    if upload.categories:
        fields["categories"] = ", ".join(upload.categories)
    if upload.countries:
        fields["countries"] = ", ".join(upload.countries)
    return fields


def _tags(raw: object) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(tag for tag in raw if isinstance(tag, str))


def _nutrient_levels(raw: object) -> NutrientLevels | None:
    if not isinstance(raw, dict):
        return None
    return NutrientLevels(
        fat=NutrientLevel.parse(raw.get("fat")),
        sugar=NutrientLevel.parse(raw.get("sugars")),
        salt=NutrientLevel.parse(raw.get("salt")),
    )
