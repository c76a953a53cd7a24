"""Food search, lookup and contribution endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from meal_planner.api.models import (
    ProductUploadRequest,
    SearchRequest,
    SummaryRequest,
)
from meal_planner.domain.errors import InvalidInputError

if TYPE_CHECKING:
    from meal_planner.containers import AppContainer
    from meal_planner.services.aggregator import FoodAggregatorService

router = APIRouter(prefix="/foods", tags=["foods"])


def _aggregator(request: Request) -> FoodAggregatorService:
    container: AppContainer = request.app.state.container
    return container.aggregator_service


@router.get("/ingredients")
async def search_ingredients(
    request: Request, q: str = "", include_branded: bool = True
) -> dict[str, object]:
    """Search raw ingredients across both databases."""
    result = await _aggregator(request).search_ingredients(q, include_branded)
    return jsonable_encoder(result)


@router.get("/products")
async def search_foods_and_drinks(
    request: Request,
    q: str = "",
    include_branded: bool = True,
    include_raw_fallback: bool = True,
) -> dict[str, object]:
    """Search branded foods and drinks."""
    result = await _aggregator(request).search_foods_and_drinks(
        q, include_branded, include_raw_fallback
    )
    return jsonable_encoder(result)


@router.post("/search")
async def advanced_search(
    payload: SearchRequest, request: Request
) -> dict[str, object]:
    """Search with type, source and nutrition filters."""
    result = await _aggregator(request).advanced_search(
        payload.query, payload.to_filters()
    )
    return jsonable_encoder(result)


@router.get("/barcode/{code}")
async def lookup_barcode(code: str, request: Request) -> dict[str, object]:
    """Look up a branded product by barcode."""
    result = await _aggregator(request).lookup_barcode(code)
    return jsonable_encoder(result)


@router.get("/items/{item_id}")
async def get_item(item_id: str, request: Request) -> dict[str, object]:
    """Fetch an item by its canonical id."""
    try:
        result = await _aggregator(request).get_item_by_id(item_id)
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return jsonable_encoder(result)


@router.post("/products")
async def upload_product(
    payload: ProductUploadRequest, request: Request
) -> dict[str, object]:
    """Contribute a product to the branded database."""
    result = await _aggregator(request).upload_product(payload.to_domain())
    return jsonable_encoder(result)


@router.post("/summary")
async def nutrition_summary(
    payload: SummaryRequest, request: Request
) -> dict[str, object]:
    """Total and average the macros of the given items."""
    summary = _aggregator(request).get_nutrition_summary(payload.to_items())
    return jsonable_encoder(summary)


@router.post("/cache/clear")
async def clear_caches(request: Request) -> dict[str, str]:
    """Drop every cached provider response."""
    _aggregator(request).clear_all_caches()
    return {"status": "ok"}


@router.get("/status")
async def service_status(request: Request) -> dict[str, object]:
    """Report provider availability and cache sizes."""
    return jsonable_encoder(_aggregator(request).get_service_status())
