"""Tests for canonical food models."""

import pytest

from meal_planner.domain.errors import InvalidInputError
from meal_planner.domain.foods import (
    BrandedMetadata,
    CanonicalFoodItem,
    FoodSource,
    FoodType,
    IngredientMetadata,
    NovaGroup,
    NutriScore,
    NutritionProfile,
    SourceCounts,
)

_NUTRITION = NutritionProfile(calories=52, protein=0.3, carbohydrates=14, fat=0.2)


def test_item_id_must_match_source() -> None:
    with pytest.raises(InvalidInputError):
        CanonicalFoodItem(
            id="off-123",
            name="Apple",
            source=FoodSource.USDA,
            type=FoodType.INGREDIENT,
            nutrition=_NUTRITION,
            provider_data=IngredientMetadata(fdc_id=123),
        )


def test_item_metadata_must_match_source() -> None:
    with pytest.raises(InvalidInputError):
        CanonicalFoodItem(
            id="usda-123",
            name="Apple",
            source=FoodSource.USDA,
            type=FoodType.INGREDIENT,
            nutrition=_NUTRITION,
            provider_data=BrandedMetadata(barcode="123"),
        )


def test_database_items_require_metadata() -> None:
    with pytest.raises(InvalidInputError):
        CanonicalFoodItem(
            id="usda-1",
            name="Apple",
            source=FoodSource.USDA,
            type=FoodType.INGREDIENT,
            nutrition=_NUTRITION,
        )


def test_nutri_score_parse() -> None:
    assert NutriScore.parse("a") is NutriScore.A
    assert NutriScore.parse("not-applicable") is None
    assert NutriScore.parse(None) is None
    assert NutriScore.A.color == "#038141"
    with pytest.raises(ValueError):
        NutriScore.parse("f")


def test_nova_group_parse() -> None:
    assert NovaGroup.parse("3") is NovaGroup.PROCESSED
    assert NovaGroup.parse(1.0) is NovaGroup.UNPROCESSED
    assert NovaGroup.parse("") is None
    with pytest.raises(ValueError):
        NovaGroup.parse(5)
    with pytest.raises(ValueError):
        NovaGroup.parse(2.5)


def test_source_counts_add() -> None:
    total = SourceCounts(usda=2) + SourceCounts(usda=1, openfoodfacts=4)

    assert total == SourceCounts(usda=3, openfoodfacts=4)
