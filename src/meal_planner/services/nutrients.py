"""Mapping of provider nutrient fields onto the canonical nutrition profile."""

import math
from collections.abc import Mapping
from dataclasses import dataclass

from meal_planner.domain.foods import NutritionProfile

REQUIRED_NUTRIENTS = ("calories", "protein", "carbohydrates", "fat")


@dataclass(frozen=True)
class NutrientField:
    """Candidate provider field and the factor converting it to canonical units."""

    key: str
    factor: float = 1.0


NutrientTable = Mapping[str, tuple[NutrientField, ...]]

# OpenFoodFacts nutriments are already per 100 g; sodium/salt are grams.
OFF_NUTRIENT_FIELDS: NutrientTable = {
    "calories": (
        NutrientField("energy-kcal_100g"),
        NutrientField("energy_kcal_100g"),
        NutrientField("energy_100g", 1 / 4.184),
    ),
    "protein": (NutrientField("proteins_100g"), NutrientField("protein_100g")),
    "carbohydrates": (
        NutrientField("carbohydrates_100g"),
        NutrientField("carbohydrate_100g"),
    ),
    "fat": (NutrientField("fat_100g"), NutrientField("total-fat_100g")),
    "fiber": (NutrientField("fiber_100g"), NutrientField("dietary-fiber_100g")),
    "sugar": (NutrientField("sugars_100g"), NutrientField("total-sugars_100g")),
    "sodium": (NutrientField("sodium_100g", 1000), NutrientField("salt_100g", 400)),
    "calcium": (NutrientField("calcium_100g", 1000),),
    "iron": (NutrientField("iron_100g", 1000),),
    "vitamin_c": (NutrientField("vitamin-c_100g", 1000),),
    "vitamin_a": (NutrientField("vitamin-a_100g", 1_000_000),),
    "potassium": (NutrientField("potassium_100g", 1000),),
    "magnesium": (NutrientField("magnesium_100g", 1000),),
}

# USDA nutrient numbers (SR Legacy numbering, shared by Foundation foods).
USDA_NUTRIENT_FIELDS: NutrientTable = {
    "calories": (NutrientField("208"), NutrientField("957"), NutrientField("958")),
    "protein": (NutrientField("203"),),
    "carbohydrates": (NutrientField("205"),),
    "fat": (NutrientField("204"),),
    "fiber": (NutrientField("291"),),
    "sugar": (NutrientField("269"),),
    "sodium": (NutrientField("307"),),
    "calcium": (NutrientField("301"),),
    "iron": (NutrientField("303"),),
    "vitamin_c": (NutrientField("401"),),
    "vitamin_a": (NutrientField("320"),),
    "potassium": (NutrientField("306"),),
    "magnesium": (NutrientField("304"),),
}

OFF_PRECISION = {"calories": 0, "sodium": 0, "calcium": 0, "vitamin_c": 1}
USDA_PRECISION = {
    "calories": 0,
    "sodium": 0,
    "calcium": 0,
    "vitamin_a": 0,
    "potassium": 0,
    "magnesium": 0,
    "iron": 2,
}


def resolve_nutrient(
    values: Mapping[str, object], candidates: tuple[NutrientField, ...]
) -> float | None:
    """Return the first present non-negative numeric candidate, converted."""
    for candidate in candidates:
        value = _as_number(values.get(candidate.key))
        if value is not None and value >= 0:
            return value * candidate.factor
    return None


def build_profile(
    values: Mapping[str, object],
    table: NutrientTable,
    precision: Mapping[str, int],
    default_precision: int,
) -> NutritionProfile:
    """Build a nutrition profile from provider values using a lookup table."""
    resolved: dict[str, float | None] = {}
    for name, candidates in table.items():
        value = resolve_nutrient(values, candidates)
        if value is None and name in REQUIRED_NUTRIENTS:
            value = 0.0
        if value is not None:
            value = round_half_up(value, precision.get(name, default_precision))
        resolved[name] = value
    return NutritionProfile(**resolved)


def off_profile(nutriments: Mapping[str, object]) -> NutritionProfile:
    """Normalize OpenFoodFacts nutriments."""
    return build_profile(nutriments, OFF_NUTRIENT_FIELDS, OFF_PRECISION, 2)


def usda_nutrient_map(food_nutrients: object) -> dict[str, float]:
    """Index USDA nutrient amounts by nutrient number.

    Handles both the search shape (``nutrientNumber``/``value``) and the
    detail shape (``nutrient.number``/``amount``). Entries without a number or
    a numeric amount are ignored.
    """
    mapping: dict[str, float] = {}
    if not isinstance(food_nutrients, list):
        return mapping
    for entry in food_nutrients:
        if not isinstance(entry, dict):
            continue
        nutrient = entry.get("nutrient")
        if isinstance(nutrient, dict):
            number = nutrient.get("number")
            amount = entry.get("amount")
        else:
            number = entry.get("nutrientNumber")
            amount = entry.get("value", entry.get("amount"))
        value = _as_number(amount)
        if number is None or value is None:
            continue
        mapping.setdefault(str(number), value)
    return mapping


def usda_profile(food_nutrients: object) -> NutritionProfile:
    """Normalize USDA food nutrients."""
    return build_profile(
        usda_nutrient_map(food_nutrients), USDA_NUTRIENT_FIELDS, USDA_PRECISION, 1
    )


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to ``digits`` decimals with halves going up (-2.5 becomes -2)."""
    scale = 10**digits
    return math.floor(value * scale + 0.5) / scale


def _as_number(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number
