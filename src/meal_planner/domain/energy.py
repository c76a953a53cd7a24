"""Energy and macronutrient domain models."""

from dataclasses import dataclass
from enum import Enum


class Gender(Enum):
    """Gender used to select body composition formulas."""

    MALE = "male"
    FEMALE = "female"


class FitnessGoal(Enum):
    """Fitness goal driving the calorie adjustment."""

    LOSE_FAT = "lose-fat"
    BUILD_MUSCLE = "build-muscle"
    MAINTAIN = "maintain"
    RECOMPOSITION = "recomposition"


class FitnessLevel(Enum):
    """Training experience, used to size a muscle-building surplus."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class WeightChangeDirection(Enum):
    """Measured weight trend since the last check-in."""

    GAINED = "gained"
    LOST = "lost"


class Macro(Enum):
    """Macronutrient with its energy density in kcal per gram."""

    PROTEIN = "protein"
    FAT = "fat"
    CARBS = "carbs"

    @property
    def calories_per_gram(self) -> int:
        return 9 if self is Macro.FAT else 4


@dataclass(frozen=True)
class ActivityLevel:
    """Named activity level with its low/medium/high multipliers."""

    name: str
    multipliers: tuple[float, float, float]
    description: str


@dataclass(frozen=True)
class UserEnergyProfile:
    """Body metrics and overrides feeding the energy calculation."""

    weight_kg: float
    body_fat_pct: float
    gender: Gender
    bmr: float
    activity_multiplier: float
    fitness_goal: FitnessGoal = FitnessGoal.MAINTAIN
    goal_adjustment_pct: float = 0.0
    weight_change_direction: WeightChangeDirection | None = None
    weight_change_kg: float = 0.0
    manual_adjustment_steps: int = 0


@dataclass(frozen=True)
class MacroTargets:
    """Daily macro grams with their share of total calories."""

    total_calories: int
    protein_g: int
    fat_g: int
    carbs_g: int
    protein_pct: int
    fat_pct: int
    carbs_pct: int

    @property
    def percentage_total(self) -> int:
        return self.protein_pct + self.fat_pct + self.carbs_pct

    def percentage(self, macro: Macro) -> int:
        """Return the calorie share of a macro."""
        return {
            Macro.PROTEIN: self.protein_pct,
            Macro.FAT: self.fat_pct,
            Macro.CARBS: self.carbs_pct,
        }[macro]


@dataclass(frozen=True)
class EnergyTargets:
    """Calorie baseline, adjusted target and the macros derived from it."""

    base_tdci: int
    adjusted_tdci: int
    calorie_adjustment: int
    macros: MacroTargets
