"""Tests for nutrient normalization."""

import math

import pytest

from meal_planner.domain.errors import InvalidInputError
from meal_planner.domain.foods import NutritionProfile
from meal_planner.services.nutrients import (
    off_profile,
    round_half_up,
    usda_nutrient_map,
    usda_profile,
)


def test_off_profile_maps_macros_and_converts_sodium_to_mg() -> None:
    profile = off_profile(
        {
            "energy-kcal_100g": 539.4,
            "proteins_100g": 6.3,
            "carbohydrates_100g": 57.5,
            "fat_100g": 30.876,
            "sugars_100g": 56.3,
            "sodium_100g": 0.0428,
        }
    )

    assert profile.calories == 539
    assert profile.protein == 6.3
    assert profile.fat == 30.88
    assert profile.sugar == 56.3
    assert profile.sodium == 43
    assert profile.fiber is None


def test_off_profile_falls_back_to_kilojoules_and_salt() -> None:
    profile = off_profile({"energy_100g": 2092, "salt_100g": 1.0})

    assert profile.calories == 500
    assert profile.sodium == 400
    assert profile.protein == 0
    assert profile.carbohydrates == 0


def test_zero_is_a_measured_value() -> None:
    profile = off_profile({"energy-kcal_100g": 0, "fiber_100g": 0})

    assert profile.calories == 0
    assert profile.fiber == 0


def test_off_profile_ignores_unusable_values() -> None:
    profile = off_profile(
        {
            "energy-kcal_100g": "n/a",
            "energy_kcal_100g": 120,
            "proteins_100g": -1,
            "protein_100g": 3,
            "fat_100g": math.nan,
            "fiber_100g": True,
        }
    )

    assert profile.calories == 120
    assert profile.protein == 3
    assert profile.fat == 0
    assert profile.fiber is None


def test_usda_nutrient_map_reads_search_and_detail_shapes() -> None:
    mapping = usda_nutrient_map(
        [
            {"nutrientNumber": "203", "value": 31.02},
            {"nutrient": {"number": "204"}, "amount": 3.57},
            {"nutrientNumber": "203", "value": 99},
            {"nutrientNumber": None, "value": 5},
            "junk",
        ]
    )

    assert mapping == {"203": 31.02, "204": 3.57}


def test_usda_profile_prefers_kcal_number_then_atwater() -> None:
    profile = usda_profile(
        [
            {"nutrientNumber": "957", "value": 158.6},
            {"nutrientNumber": "203", "value": 31.02},
            {"nutrientNumber": "307", "value": 74.4},
        ]
    )

    assert profile.calories == 159
    assert profile.protein == 31.0
    assert profile.sodium == 74
    assert profile.sugar is None


def test_usda_profile_without_nutrients_defaults_macros_to_zero() -> None:
    profile = usda_profile(None)

    assert profile == NutritionProfile(
        calories=0, protein=0, carbohydrates=0, fat=0
    )


def test_round_half_up_matches_client_rounding() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(0.125, 2) == 0.13


def test_nutrition_profile_rejects_negative_macros() -> None:
    with pytest.raises(InvalidInputError):
        NutritionProfile(calories=-1, protein=0, carbohydrates=0, fat=0)
