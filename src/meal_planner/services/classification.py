"""Keyword heuristics classifying items from each food database."""

from collections.abc import Iterable

from meal_planner.domain.foods import CanonicalFoodItem, FoodType

INGREDIENT_CATEGORY_KEYWORDS = (
    "fruits",
    "vegetables",
    "meats",
    "fish",
    "dairy-products",
    "cereals",
    "spices",
    "oils",
    "nuts",
    "legumes",
    "herbs",
)

FOOD_KEYWORDS = (
    "prepared",
    "cooked",
    "baked",
    "fried",
    "grilled",
    "steamed",
    "sandwich",
    "pizza",
    "burger",
    "meal",
    "dish",
    "recipe",
    "fast food",
    "restaurant",
    "frozen",
    "canned",
)

RAW_KEYWORDS = ("raw", "fresh", "uncooked", "plain")


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(keyword in lowered for keyword in keywords)


def has_ingredient_category(categories: Iterable[str]) -> bool:
    """Return True when any category tag contains an ingredient keyword."""
    return any(
        _contains_any(category, INGREDIENT_CATEGORY_KEYWORDS) for category in categories
    )


def branded_food_type(categories: Iterable[str]) -> FoodType:
    """Classify a branded product by its category tags."""
    if has_ingredient_category(categories):
        return FoodType.INGREDIENT
    return FoodType.FOOD_DRINK


def is_ingredient_like(item: CanonicalFoodItem) -> bool:
    """Return True for branded products whose categories look like ingredients."""
    branded = item.branded
    if branded is None:
        return False
    return has_ingredient_category(branded.categories)


def is_food_like(item: CanonicalFoodItem, query: str = "") -> bool:
    """Return True for raw-database items that look like prepared food.

    A food keyword in the name or category wins. A raw keyword alone excludes
    the item unless the search query itself asked for a food keyword.
    """
    ingredient = item.ingredient
    if ingredient is None:
        return False
    text = f"{item.name} {ingredient.category or ''}"
    if _contains_any(text, FOOD_KEYWORDS):
        return True
    if _contains_any(text, RAW_KEYWORDS):
        return _contains_any(query, FOOD_KEYWORDS)
    return True
