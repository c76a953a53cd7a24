"""Unified food search across the branded and raw-ingredient databases."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from functools import partial

from meal_planner.domain.errors import ErrorKind, InvalidInputError, ProviderError
from meal_planner.domain.foods import (
    CanonicalFoodItem,
    FoodSource,
    FoodType,
    LookupResult,
    NutritionFilters,
    NutritionSummary,
    NutritionTotals,
    ProductUpload,
    ProviderFailure,
    ProviderStatus,
    SearchFilters,
    SearchResult,
    SearchStatus,
    ServiceStatus,
    SortKey,
    SourceCounts,
    UploadResult,
)
from meal_planner.services.branded_products import OpenFoodFactsProvider
from meal_planner.services.classification import is_food_like, is_ingredient_like
from meal_planner.services.nutrients import round_half_up
from meal_planner.services.providers import FoodProvider, is_searchable
from meal_planner.services.raw_ingredients import UsdaIngredientProvider

MIN_PRIMARY_RESULTS = 5
MIN_PRODUCT_NAME = 2

_logger = logging.getLogger(__name__)


@dataclass
class _Gathered:
    """Items collected from the providers for one search."""

    items: list[CanonicalFoodItem] = field(default_factory=list)
    sources: SourceCounts = field(default_factory=SourceCounts)
    errors: list[ProviderFailure] = field(default_factory=list)
    attempted: int = 0


@dataclass
class FoodAggregatorService:
    """Entry point for every food data operation used by the UI."""

    ingredient_provider: UsdaIngredientProvider
    branded_provider: OpenFoodFactsProvider
    min_primary_results: int = MIN_PRIMARY_RESULTS
    _last_errors: dict[str, ErrorKind | None] = field(default_factory=dict)

    async def search_ingredients(
        self, query: str, include_branded: bool = True
    ) -> SearchResult:
        """Search raw ingredients, optionally adding ingredient-like products."""
        return await self._search(
            query,
            SearchFilters(type=FoodType.INGREDIENT),
            lambda: self._collect_ingredients(query, include_branded),
            post_filter=False,
        )

    async def search_foods_and_drinks(
        self,
        query: str,
        include_branded: bool = True,
        include_raw_fallback: bool = True,
    ) -> SearchResult:
        """Search branded products, topping up thin results with prepared foods."""
        return await self._search(
            query,
            SearchFilters(type=FoodType.FOOD_DRINK),
            lambda: self._collect_foods(query, include_branded, include_raw_fallback),
            post_filter=False,
        )

    async def advanced_search(self, query: str, filters: SearchFilters) -> SearchResult:
        """Search by type, then apply source, nutrition and sort filters."""
        exclude_branded = filters.source is FoodSource.USDA
        exclude_raw = filters.source is FoodSource.OPENFOODFACTS
        collect: Callable[[], Awaitable[_Gathered]]
        if filters.type is FoodType.INGREDIENT:
            collect = partial(
                self._collect_ingredients, query, include_branded=not exclude_branded
            )
        elif filters.type is FoodType.FOOD_DRINK:
            collect = partial(
                self._collect_foods,
                query,
                include_branded=not exclude_branded,
                include_raw_fallback=not exclude_raw,
            )
        else:
            collect = partial(self._collect_all, query)
        return await self._search(query, filters, collect, post_filter=True)

    async def lookup_barcode(self, code: str) -> LookupResult:
        """Look up a branded product by exact barcode."""
        barcode = code.strip()
        if not barcode.isdigit():
            return LookupResult(
                success=False,
                item=None,
                message="Barcode must contain digits only",
                error=ErrorKind.INVALID_INPUT,
            )
        return await self._lookup(
            self.branded_provider,
            lambda: self.branded_provider.lookup_by_id(barcode),
            found_message="Product found",
            missing_message="Product not found in database",
        )

    async def get_item_by_id(self, item_id: str) -> LookupResult:
        """Fetch an item by its canonical id.

        Raises ``InvalidInputError`` when the id prefix or value is malformed.
        """
        if item_id.startswith(FoodSource.USDA.id_prefix):
            raw_id = item_id.removeprefix(FoodSource.USDA.id_prefix)
            if not raw_id.isdigit():
                raise InvalidInputError(f"Invalid USDA id: {item_id!r}")
            fdc_id = int(raw_id)
            return await self._lookup(
                self.ingredient_provider,
                lambda: self.ingredient_provider.lookup_by_id(fdc_id),
                found_message="Food found",
                missing_message="Food not found",
            )
        if item_id.startswith(FoodSource.OPENFOODFACTS.id_prefix):
            barcode = item_id.removeprefix(FoodSource.OPENFOODFACTS.id_prefix)
            if not barcode.isdigit():
                raise InvalidInputError(f"Invalid OpenFoodFacts id: {item_id!r}")
            return await self.lookup_barcode(barcode)
        if item_id.startswith(FoodSource.USER.id_prefix):
            return LookupResult(
                success=False,
                item=None,
                message="User items are not served by the food databases",
                error=ErrorKind.NOT_FOUND,
            )
        raise InvalidInputError(f"Invalid ID format: {item_id!r}")

    async def upload_product(self, upload: ProductUpload) -> UploadResult:
        """Contribute a new product to the branded database."""
        name_too_short = len(upload.name.strip()) < MIN_PRODUCT_NAME
        if not upload.barcode.isdigit() or name_too_short:
            return UploadResult(
                success=False,
                barcode=upload.barcode,
                message="A numeric barcode and a product name are required",
                error=ErrorKind.INVALID_INPUT,
            )
        try:
            await self.branded_provider.upload_product(upload)
        except InvalidInputError as exc:
            return UploadResult(
                success=False,
                barcode=upload.barcode,
                message=str(exc),
                error=ErrorKind.INVALID_INPUT,
            )
        except ProviderError as exc:
            self._record_failure(exc)
            return UploadResult(
                success=False,
                barcode=upload.barcode,
                message=f"Product upload failed: {exc.message}",
                error=exc.kind,
            )
        return UploadResult(
            success=True,
            barcode=upload.barcode,
            message="Product uploaded successfully",
        )

    @staticmethod
    def get_nutrition_summary(items: Iterable[CanonicalFoodItem]) -> NutritionSummary:
        """Total and average the macros of a list of items."""
        nutrition = [item.nutrition for item in items]
        count = len(nutrition)
        calories = sum(entry.calories for entry in nutrition)
        protein = sum(entry.protein for entry in nutrition)
        carbs = sum(entry.carbohydrates for entry in nutrition)
        fat = sum(entry.fat for entry in nutrition)
        divisor = count or 1
        return NutritionSummary(
            item_count=count,
            totals=NutritionTotals(
                calories=round_half_up(calories),
                protein=round_half_up(protein, 2),
                carbohydrates=round_half_up(carbs, 2),
                fat=round_half_up(fat, 2),
            ),
            average=NutritionTotals(
                calories=round_half_up(calories / divisor),
                protein=round_half_up(protein / divisor, 2),
                carbohydrates=round_half_up(carbs / divisor, 2),
                fat=round_half_up(fat / divisor, 2),
            ),
        )

    def clear_all_caches(self) -> None:
        """Drop every cached provider response."""
        self.ingredient_provider.cache.clear()
        self.branded_provider.cache.clear()
        _logger.info("All food caches cleared")

    def get_service_status(self) -> ServiceStatus:
        """Report provider availability and cache sizes."""
        usda = self._provider_status(self.ingredient_provider)
        off = self._provider_status(self.branded_provider)
        return ServiceStatus(
            usda=usda,
            openfoodfacts=off,
            available=usda.available or off.available,
        )

    async def _search(
        self,
        query: str,
        filters: SearchFilters,
        collect: Callable[[], Awaitable[_Gathered]],
        *,
        post_filter: bool,
    ) -> SearchResult:
        started = time.perf_counter()
        if not is_searchable(query):
            return SearchResult(
                items=(),
                total_found=0,
                sources=SourceCounts(),
                search_time_ms=0,
                filters=filters,
                status=SearchStatus.QUERY_TOO_SHORT,
                message="Type at least 2 characters to search",
            )
        try:
            gathered = await collect()
            items = (
                apply_filters(gathered.items, filters)
                if post_filter
                else gathered.items
            )
        except Exception:
            _logger.exception("Food search failed: query=%s", query)
            return SearchResult(
                items=(),
                total_found=0,
                sources=SourceCounts(),
                search_time_ms=_elapsed_ms(started),
                filters=filters,
                status=SearchStatus.FAILED,
                message="Search failed unexpectedly",
            )

        if gathered.attempted and len(gathered.errors) >= gathered.attempted:
            status = SearchStatus.ALL_PROVIDERS_FAILED
            message = "Food databases are unavailable, try again later"
        else:
            status = SearchStatus.OK
            message = f"Found {len(items)} items"
        return SearchResult(
            items=tuple(items),
            total_found=len(gathered.items),
            sources=gathered.sources,
            search_time_ms=_elapsed_ms(started),
            filters=filters,
            status=status,
            message=message,
            errors=tuple(gathered.errors),
        )

    async def _collect_ingredients(
        self, query: str, include_branded: bool
    ) -> _Gathered:
        if include_branded:
            (raw, raw_error), (branded, branded_error) = await asyncio.gather(
                self._fetch(self.ingredient_provider, query),
                self._fetch(self.branded_provider, query),
            )
        else:
            raw, raw_error = await self._fetch(self.ingredient_provider, query)
            branded, branded_error = [], None
        branded = [item for item in branded if is_ingredient_like(item)]
        _logger.info(
            "Ingredient search: query=%s usda=%s openfoodfacts=%s",
            query,
            len(raw),
            len(branded),
        )
        return _Gathered(
            items=[*raw, *branded],
            sources=SourceCounts(usda=len(raw), openfoodfacts=len(branded)),
            errors=[error for error in (raw_error, branded_error) if error],
            attempted=2 if include_branded else 1,
        )

    async def _collect_foods(
        self, query: str, include_branded: bool, include_raw_fallback: bool
    ) -> _Gathered:
        gathered = _Gathered()
        if include_branded:
            branded, error = await self._fetch(self.branded_provider, query)
            gathered.items.extend(branded)
            gathered.sources = SourceCounts(openfoodfacts=len(branded))
            gathered.attempted += 1
            if error:
                gathered.errors.append(error)
        if include_raw_fallback and len(gathered.items) < self.min_primary_results:
            raw, error = await self._fetch(self.ingredient_provider, query)
            food_like = [item for item in raw if is_food_like(item, query)]
            gathered.items.extend(food_like)
            gathered.sources += SourceCounts(usda=len(food_like))
            gathered.attempted += 1
            if error:
                gathered.errors.append(error)
        _logger.info(
            "Foods search: query=%s openfoodfacts=%s usda=%s",
            query,
            gathered.sources.openfoodfacts,
            gathered.sources.usda,
        )
        return gathered

    async def _collect_all(self, query: str) -> _Gathered:
        """Search each provider once and list ingredients before foods.

        An item that qualifies for both partitions is listed once.
        """
        (raw, raw_error), (branded, branded_error) = await asyncio.gather(
            self._fetch(self.ingredient_provider, query),
            self._fetch(self.branded_provider, query),
        )
        ingredients = [*raw, *(item for item in branded if is_ingredient_like(item))]
        foods = list(branded)
        if len(branded) < self.min_primary_results:
            foods.extend(item for item in raw if is_food_like(item, query))

        items: list[CanonicalFoodItem] = []
        seen: set[str] = set()
        for item in [*ingredients, *foods]:
            if item.id not in seen:
                seen.add(item.id)
                items.append(item)
        sources = SourceCounts(
            usda=sum(item.source is FoodSource.USDA for item in items),
            openfoodfacts=sum(
                item.source is FoodSource.OPENFOODFACTS for item in items
            ),
        )
        _logger.info(
            "Search across all types: query=%s usda=%s openfoodfacts=%s",
            query,
            sources.usda,
            sources.openfoodfacts,
        )
        return _Gathered(
            items=items,
            sources=sources,
            errors=[error for error in (raw_error, branded_error) if error],
            attempted=2,
        )

    async def _fetch(
        self, provider: FoodProvider, query: str
    ) -> tuple[list[CanonicalFoodItem], ProviderFailure | None]:
        """Search one provider; a failure yields no items instead of raising."""
        try:
            items = await provider.search(query)
        except ProviderError as exc:
            self._record_failure(exc)
            return [], ProviderFailure(
                provider=exc.provider,
                kind=exc.kind,
                message=exc.message,
                status_code=exc.status_code,
            )
        self._last_errors[provider.name] = None
        return items, None

    async def _lookup(
        self,
        provider: FoodProvider,
        fetch: Callable[[], Awaitable[CanonicalFoodItem | None]],
        *,
        found_message: str,
        missing_message: str,
    ) -> LookupResult:
        try:
            item = await fetch()
        except ProviderError as exc:
            self._record_failure(exc)
            return LookupResult(
                success=False,
                item=None,
                message=f"Lookup failed: {exc.message}",
                error=exc.kind,
            )
        except Exception:
            _logger.exception("Food lookup failed: provider=%s", provider.name)
            return LookupResult(
                success=False,
                item=None,
                message="Lookup failed unexpectedly",
                error=ErrorKind.INTERNAL_ERROR,
            )
        self._last_errors[provider.name] = None
        if item is None:
            return LookupResult(
                success=False,
                item=None,
                message=missing_message,
                error=ErrorKind.NOT_FOUND,
            )
        return LookupResult(success=True, item=item, message=found_message)

    def _record_failure(self, exc: ProviderError) -> None:
        _logger.warning("Provider failure: %r", exc)
        self._last_errors[exc.provider] = exc.kind

    def _provider_status(self, provider: FoodProvider) -> ProviderStatus:
        last_error = self._last_errors.get(provider.name)
        return ProviderStatus(
            available=last_error is None,
            cache_size=provider.cache.size(),
            last_error=last_error,
        )


def apply_filters(
    items: Iterable[CanonicalFoodItem], filters: SearchFilters
) -> list[CanonicalFoodItem]:
    """Apply source and nutrition filters, then the requested sort."""
    filtered = list(items)
    if filters.source is not None:
        filtered = [item for item in filtered if item.source is filters.source]
    limits = filters.nutrition
    if limits is not None:
        filtered = [item for item in filtered if _within_limits(item, limits)]
    if filters.sort_by is SortKey.NAME:
        filtered.sort(key=lambda item: item.name.casefold())
    elif filters.sort_by is SortKey.CALORIES:
        filtered.sort(key=lambda item: item.nutrition.calories)
    elif filters.sort_by is SortKey.PROTEIN:
        filtered.sort(key=lambda item: item.nutrition.protein, reverse=True)
    return filtered


def _within_limits(item: CanonicalFoodItem, limits: NutritionFilters) -> bool:
    nutrition = item.nutrition
    if limits.max_calories is not None and nutrition.calories > limits.max_calories:
        return False
    if limits.min_protein is not None and nutrition.protein < limits.min_protein:
        return False
    if limits.max_carbs is not None and nutrition.carbohydrates > limits.max_carbs:
        return False
    return limits.max_fat is None or nutrition.fat <= limits.max_fat


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
