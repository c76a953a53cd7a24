"""Pydantic models for food and energy API payloads."""

from pydantic import Base64Bytes, BaseModel, Field, model_validator

from meal_planner.domain.energy import (
    FitnessGoal,
    FitnessLevel,
    Gender,
    Macro,
    UserEnergyProfile,
    WeightChangeDirection,
)
from meal_planner.domain.foods import (
    CanonicalFoodItem,
    FoodSource,
    FoodType,
    NutritionFilters,
    NutritionProfile,
    ProductUpload,
    SearchFilters,
    SortKey,
)
from meal_planner.services.energy import goal_calorie_adjustment


class NutritionPayload(BaseModel):
    """Per-100 g nutrition values."""

    calories: float = Field(ge=0)
    protein: float = Field(ge=0)
    carbohydrates: float = Field(ge=0)
    fat: float = Field(ge=0)
    fiber: float | None = Field(default=None, ge=0)
    sugar: float | None = Field(default=None, ge=0)
    sodium: float | None = Field(default=None, ge=0)

    def to_domain(self) -> NutritionProfile:
        return NutritionProfile(**self.model_dump())


class NutritionFiltersPayload(BaseModel):
    """Nutrition bounds for an advanced search."""

    max_calories: float | None = None
    min_protein: float | None = None
    max_carbs: float | None = None
    max_fat: float | None = None


class SearchRequest(BaseModel):
    """Advanced search request."""

    query: str
    type: FoodType | None = None
    source: FoodSource | None = None
    nutrition: NutritionFiltersPayload | None = None
    sort_by: SortKey = SortKey.RELEVANCE

    def to_filters(self) -> SearchFilters:
        nutrition = (
            NutritionFilters(**self.nutrition.model_dump())
            if self.nutrition
            else None
        )
        return SearchFilters(
            type=self.type,
            source=self.source,
            nutrition=nutrition,
            sort_by=self.sort_by,
        )


class ProductUploadRequest(BaseModel):
    """Product contribution for the branded database."""

    barcode: str
    name: str
    nutrition: NutritionPayload | None = None
    ingredients: str | None = None
    categories: list[str] = Field(default_factory=list)
    countries: list[str] = Field(default_factory=list)
    image: Base64Bytes | None = None

    def to_domain(self) -> ProductUpload:
        return ProductUpload(
            barcode=self.barcode.strip(),
            name=self.name,
            nutrition=self.nutrition.to_domain() if self.nutrition else None,
            ingredients=self.ingredients,
            categories=tuple(self.categories),
            countries=tuple(self.countries),
            image=self.image,
        )


class SummaryEntry(BaseModel):
    """One logged item for a nutrition summary."""

    name: str
    nutrition: NutritionPayload


class SummaryRequest(BaseModel):
    """Items to total and average."""

    items: list[SummaryEntry]

    def to_items(self) -> list[CanonicalFoodItem]:
        return [
            CanonicalFoodItem(
                id=f"{FoodSource.USER.id_prefix}{index}",
                name=entry.name,
                source=FoodSource.USER,
                type=FoodType.FOOD_DRINK,
                nutrition=entry.nutrition.to_domain(),
            )
            for index, entry in enumerate(self.items, start=1)
        ]


class EnergyTargetsRequest(BaseModel):
    """Body metrics for daily calorie and macro targets."""

    weight_kg: float = Field(gt=0)
    body_fat_pct: float = Field(ge=0, lt=100)
    gender: Gender
    bmr: float = Field(gt=0)
    activity_multiplier: float = Field(gt=0)
    fitness_goal: FitnessGoal = FitnessGoal.MAINTAIN
    fitness_level: FitnessLevel | None = None
    goal_adjustment_pct: float | None = None
    weight_change_direction: WeightChangeDirection | None = None
    weight_change_kg: float = Field(default=0.0, ge=0)
    manual_adjustment_steps: int = 0

    def to_profile(self) -> UserEnergyProfile:
        adjustment = self.goal_adjustment_pct
        if adjustment is None:
            adjustment = goal_calorie_adjustment(self.fitness_goal, self.fitness_level)
        return UserEnergyProfile(
            weight_kg=self.weight_kg,
            body_fat_pct=self.body_fat_pct,
            gender=self.gender,
            bmr=self.bmr,
            activity_multiplier=self.activity_multiplier,
            fitness_goal=self.fitness_goal,
            goal_adjustment_pct=adjustment,
            weight_change_direction=self.weight_change_direction,
            weight_change_kg=self.weight_change_kg,
            manual_adjustment_steps=self.manual_adjustment_steps,
        )


class MacroAdjustRequest(BaseModel):
    """Current macro split and the change to apply to one macro."""

    total_calories: int = Field(gt=0)
    protein_pct: int
    fat_pct: int
    carbs_pct: int
    macro: Macro
    delta: int

    @model_validator(mode="after")
    def _check_total(self) -> "MacroAdjustRequest":
        if self.protein_pct + self.fat_pct + self.carbs_pct != 100:
            raise ValueError("macro percentages must sum to 100")
        return self


class BmrRequest(BaseModel):
    """Inputs for a basal metabolic rate estimate."""

    weight_kg: float = Field(gt=0)
    height_cm: float = Field(gt=0)
    age: int = Field(gt=0)
    gender: Gender
    activity_multiplier: float | None = Field(default=None, gt=0)
