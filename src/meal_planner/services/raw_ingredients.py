"""USDA FoodData Central adapter producing canonical ingredients."""

import logging
import re
from dataclasses import dataclass, field

from meal_planner.adapters.fdc_client import FdcClient
from meal_planner.domain.errors import ErrorKind, ProviderError
from meal_planner.domain.foods import (
    DEFAULT_SERVING_SIZES,
    CanonicalFoodItem,
    FoodSource,
    FoodType,
    IngredientMetadata,
    Portion,
    ServingSize,
)
from meal_planner.services.cache import Cache, cache_key
from meal_planner.services.nutrients import usda_profile
from meal_planner.services.providers import (
    call_provider,
    convert_batch,
    is_searchable,
    records_from,
)

MIN_NAME_LENGTH = 3
MAX_SERVING_SIZES = 3

_PREPARATION_SUFFIX = re.compile(
    r",\s*(raw|cooked|boiled|steamed|baked|roasted|grilled)$", re.IGNORECASE
)
_WITH_CLAUSE = re.compile(r",\s*(without\s+.*|with\s+.*)$", re.IGNORECASE)
_GRADE_SUFFIX = re.compile(r",\s*(grade\s+.*|usda\s+.*|nfs)$", re.IGNORECASE)

_logger = logging.getLogger(__name__)


@dataclass
class UsdaIngredientProvider:
    """Raw-ingredient provider backed by USDA FoodData Central."""

    client: FdcClient
    cache: Cache
    data_types: list[str] = field(default_factory=lambda: ["Foundation", "SR Legacy"])
    page_size: int = 20
    timeout_seconds: float = 10
    name: str = FoodSource.USDA.value

    async def search(self, query: str) -> list[CanonicalFoodItem]:
        """Search ingredients, serving repeated queries from the cache."""
        if not is_searchable(query):
            return []
        key = cache_key(self.name, "search", query)
        cached = self.cache.get(key)
        if isinstance(cached, tuple):
            _logger.info("USDA cache hit: %s", query)
            return list(cached)

        payload = await call_provider(
            self.name,
            lambda: self.client.search_foods(
                query.strip(),
                data_types=self.data_types,
                page_size=self.page_size,
                timeout=self.timeout_seconds,
            ),
            timeout=self.timeout_seconds,
        )
        items = convert_batch(
            records_from(payload, "foods", self.name), food_to_item, self.name
        )
        self.cache.put(key, tuple(items))
        _logger.info("USDA search: query=%s results=%s", query, len(items))
        return items

    async def lookup_by_id(self, fdc_id: int) -> CanonicalFoodItem | None:
        """Fetch a single food by FDC id; None when it does not exist."""
        key = cache_key(self.name, "food", str(fdc_id))
        cached = self.cache.get(key)
        if isinstance(cached, CanonicalFoodItem):
            return cached

        try:
            payload = await call_provider(
                self.name,
                lambda: self.client.get_food(fdc_id, timeout=self.timeout_seconds),
                timeout=self.timeout_seconds,
            )
        except ProviderError as exc:
            if exc.kind is ErrorKind.NOT_FOUND:
                return None
            raise
        if not isinstance(payload, dict):
            raise ProviderError(
                ErrorKind.PARSE_FAILURE, self.name, "USDA food payload is not an object"
            )
        try:
            item = food_to_item(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise ProviderError(
                ErrorKind.PARSE_FAILURE, self.name, f"Unreadable USDA food {fdc_id}"
            ) from exc
        if item is not None:
            self.cache.put(key, item)
        return item


def food_to_item(food: dict) -> CanonicalFoodItem | None:
    """Convert a USDA food record; None for records without a usable name."""
    description = food.get("description")
    if not isinstance(description, str) or len(description.strip()) < MIN_NAME_LENGTH:
        return None
    fdc_id = int(food["fdcId"])
    name = clean_food_name(description)
    data_type = food.get("dataType")
    portions = _portions(food.get("foodPortions"))
    return CanonicalFoodItem(
        id=f"{FoodSource.USDA.id_prefix}{fdc_id}",
        name=name,
        source=FoodSource.USDA,
        type=FoodType.INGREDIENT,
        nutrition=usda_profile(food.get("foodNutrients")),
        provider_data=IngredientMetadata(
            fdc_id=fdc_id,
            data_type=data_type,
            category=_category(food.get("foodCategory")),
            publication_date=food.get("publicationDate"),
            portions=portions,
        ),
        description=f"{name} - USDA {data_type}" if data_type else name,
        serving_sizes=_serving_sizes(portions),
    )


def clean_food_name(description: str) -> str:
    """Tidy a USDA description for display.

    ``"Chicken breast, raw"`` becomes ``"Chicken Breast (raw)"``; trailing
    with/without clauses and grading suffixes are dropped.
    """
    cleaned = _PREPARATION_SUFFIX.sub(r" (\1)", description.strip())
    cleaned = _WITH_CLAUSE.sub("", cleaned)
    cleaned = _GRADE_SUFFIX.sub("", cleaned)
    words = [word[:1].upper() + word[1:].lower() for word in cleaned.split(" ")]
    return " ".join(words).strip()


def _category(raw: object) -> str | None:
    if isinstance(raw, dict):
        raw = raw.get("description")
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return None


def _portions(raw: object) -> tuple[Portion, ...]:
    if not isinstance(raw, list):
        return ()
    portions = []
    for entry in raw:
        if not isinstance(entry, dict) or entry.get("amount") is None:
            continue
        unit = entry.get("measureUnit") or {}
        portions.append(
            Portion(
                amount=float(entry["amount"]),
                unit=unit.get("abbreviation") or unit.get("name") or "",
                modifier=entry.get("modifier") or None,
                gram_weight=entry.get("gramWeight"),
            )
        )
    return tuple(portions)


def _serving_sizes(portions: tuple[Portion, ...]) -> tuple[ServingSize, ...]:
    if not portions:
        return DEFAULT_SERVING_SIZES
    sizes = []
    for portion in portions[:MAX_SERVING_SIZES]:
        label = f"{portion.amount:g} {portion.unit}".strip()
        if portion.modifier:
            label = f"{label} {portion.modifier}"
        sizes.append(
            ServingSize(amount=portion.amount, unit=portion.unit, description=label)
        )
    return tuple(sizes)
