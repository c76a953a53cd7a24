"""Calorie and macronutrient target calculations.

Every function here is pure. Rounding sends halves up, negative ones included.
"""

import math

from meal_planner.domain.energy import (
    ActivityLevel,
    EnergyTargets,
    FitnessGoal,
    FitnessLevel,
    Gender,
    Macro,
    MacroTargets,
    UserEnergyProfile,
    WeightChangeDirection,
)
from meal_planner.domain.errors import InvalidInputError

PROTEIN_MULTIPLIERS = (3.55, 3.40, 3.25, 3.10, 2.95, 2.80, 2.65)
PROTEIN_BODY_FAT_THRESHOLDS = {
    Gender.MALE: (8, 12, 15, 20, 25, 30, 35),
    Gender.FEMALE: (15, 20, 25, 30, 35, 40, 45),
}
BODY_FAT_RANGE = {
    Gender.MALE: (8, 35),
    Gender.FEMALE: (15, 45),
}
FAT_SHARE_RANGE = (20, 35)
PERCENTAGE_BANDS = {
    Macro.PROTEIN: (10, 50),
    Macro.FAT: (15, 45),
    Macro.CARBS: (10, 70),
}
CALORIES_PER_KG_CHANGE = 500
CALORIES_PER_MANUAL_STEP = 100

ACTIVITY_LEVELS = (
    ActivityLevel("Sedentary", (1.2, 1.3, 1.4), "Little to no exercise, desk job"),
    ActivityLevel(
        "Lightly Active", (1.5, 1.6, 1.7), "Light exercise/sports 1-3 days per week"
    ),
    ActivityLevel(
        "Moderately Active",
        (1.8, 1.9, 2.0),
        "Moderate exercise/sports 3-5 days per week",
    ),
    ActivityLevel(
        "Highly Active", (2.0, 2.1, 2.2), "Hard exercise/sports 6-7 days per week"
    ),
)

_MUSCLE_GAIN_SURPLUS = {
    FitnessLevel.BEGINNER: 25.0,
    FitnessLevel.INTERMEDIATE: 20.0,
    FitnessLevel.ADVANCED: 15.0,
}
_KG_PER_POUND = 0.45359237
_CM_PER_INCH = 2.54


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return math.floor(value + 0.5)


def lean_body_mass(weight_kg: float, body_fat_pct: float) -> float:
    """Return the lean body mass in kg."""
    return weight_kg * (1 - body_fat_pct / 100)


def protein_multiplier(body_fat_pct: float, gender: Gender) -> float:
    """Return grams of protein per kg of lean mass for a body fat level."""
    thresholds = PROTEIN_BODY_FAT_THRESHOLDS[gender]
    for threshold, multiplier in zip(thresholds, PROTEIN_MULTIPLIERS, strict=True):
        if body_fat_pct <= threshold:
            return multiplier
    return PROTEIN_MULTIPLIERS[-1]


def fat_percentage(body_fat_pct: float, gender: Gender) -> float:
    """Interpolate the fat share of calories (20-35 %) from body fat."""
    low, high = BODY_FAT_RANGE[gender]
    share_low, share_high = FAT_SHARE_RANGE
    share = share_low + (body_fat_pct - low) / (high - low) * (share_high - share_low)
    return min(share_high, max(share_low, share))


def grams_for(total_calories: int, percentage: float, macro: Macro) -> int:
    """Derive macro grams from its share of total calories."""
    return round_half_up(total_calories * percentage / 100 / macro.calories_per_gram)


def calculate_macros(
    weight_kg: float, body_fat_pct: float, gender: Gender, total_calories: int
) -> MacroTargets:
    """Compute the initial macro split for a calorie target.

    Protein follows lean mass, fat follows body fat and carbs take the
    remaining calories. Carbs are not clamped, so an insufficient calorie
    target yields negative carbs. Raises ``InvalidInputError`` when the
    target is not positive.
    """
    if total_calories <= 0:
        raise InvalidInputError(
            f"Calorie target must be positive, got {total_calories}"
        )
    protein_g = round_half_up(
        lean_body_mass(weight_kg, body_fat_pct)
        * protein_multiplier(body_fat_pct, gender)
    )
    fat_pct = round_half_up(fat_percentage(body_fat_pct, gender))
    fat_g = grams_for(total_calories, fat_pct, Macro.FAT)
    protein_calories = protein_g * Macro.PROTEIN.calories_per_gram
    fat_calories = fat_g * Macro.FAT.calories_per_gram
    carbs_g = round_half_up(
        (total_calories - protein_calories - fat_calories)
        / Macro.CARBS.calories_per_gram
    )
    protein_pct = round_half_up(protein_calories / total_calories * 100)
    return MacroTargets(
        total_calories=total_calories,
        protein_g=protein_g,
        fat_g=fat_g,
        carbs_g=carbs_g,
        protein_pct=protein_pct,
        fat_pct=fat_pct,
        carbs_pct=100 - protein_pct - fat_pct,
    )


def macros_from_percentages(
    total_calories: int, protein_pct: int, fat_pct: int, carbs_pct: int
) -> MacroTargets:
    """Build targets whose grams are derived from the given percentages."""
    return MacroTargets(
        total_calories=total_calories,
        protein_g=grams_for(total_calories, protein_pct, Macro.PROTEIN),
        fat_g=grams_for(total_calories, fat_pct, Macro.FAT),
        carbs_g=grams_for(total_calories, carbs_pct, Macro.CARBS),
        protein_pct=protein_pct,
        fat_pct=fat_pct,
        carbs_pct=carbs_pct,
    )


def _clamp_share(macro: Macro, value: int) -> int:
    low, high = PERCENTAGE_BANDS[macro]
    return max(low, min(high, value))


def adjust_macro(targets: MacroTargets, macro: Macro, delta: int) -> MacroTargets:
    """Move one macro's share by ``delta`` points and rebalance the others.

    The other two macros absorb the difference evenly; an odd point goes to
    the later one in protein, fat, carbs order. When band limits stop a macro
    from absorbing its part, the rest moves to the other macro and finally
    back onto the adjusted one.
    """
    shares = {item: targets.percentage(item) for item in Macro}
    shares[macro] = _clamp_share(macro, shares[macro] + delta)
    others = [item for item in Macro if item is not macro]

    difference = 100 - sum(shares.values())
    first_part = int(difference / 2)
    parts = (first_part, difference - first_part)
    for other, part in zip(others, parts, strict=True):
        shares[other] = _clamp_share(other, shares[other] + part)

    residual = 100 - sum(shares.values())
    for candidate in (*others, macro):
        if residual == 0:
            break
        before = shares[candidate]
        shares[candidate] = _clamp_share(candidate, before + residual)
        residual -= shares[candidate] - before

    return macros_from_percentages(
        targets.total_calories,
        shares[Macro.PROTEIN],
        shares[Macro.FAT],
        shares[Macro.CARBS],
    )


def base_tdci(
    bmr: float,
    activity_multiplier: float,
    goal: FitnessGoal,
    goal_adjustment_pct: float,
) -> int:
    """Return the baseline daily calorie intake for a goal."""
    tdee = bmr * activity_multiplier
    if goal is FitnessGoal.LOSE_FAT or goal_adjustment_pct < 0:
        tdee -= tdee * abs(goal_adjustment_pct) / 100
    elif goal is FitnessGoal.BUILD_MUSCLE and goal_adjustment_pct > 0:
        tdee += tdee * goal_adjustment_pct / 100
    return round_half_up(tdee)


def default_weight_change_direction(goal: FitnessGoal) -> WeightChangeDirection:
    """Weight trend that counts against a goal."""
    if goal is FitnessGoal.BUILD_MUSCLE:
        return WeightChangeDirection.LOST
    return WeightChangeDirection.GAINED


def adjusted_tdci(
    base: int,
    direction: WeightChangeDirection,
    weight_change_kg: float,
    manual_adjustment_steps: int,
) -> int:
    """Correct the baseline by the measured weight trend and manual steps."""
    adjustment = (
        weight_change_kg * CALORIES_PER_KG_CHANGE
        + manual_adjustment_steps * CALORIES_PER_MANUAL_STEP
    )
    if direction is WeightChangeDirection.GAINED:
        return round_half_up(base - adjustment)
    return round_half_up(base + adjustment)


def calculate_energy_targets(profile: UserEnergyProfile) -> EnergyTargets:
    """Run the full pipeline from body metrics to macro targets."""
    base = base_tdci(
        profile.bmr,
        profile.activity_multiplier,
        profile.fitness_goal,
        profile.goal_adjustment_pct,
    )
    direction = profile.weight_change_direction or default_weight_change_direction(
        profile.fitness_goal
    )
    adjusted = adjusted_tdci(
        base, direction, profile.weight_change_kg, profile.manual_adjustment_steps
    )
    macros = calculate_macros(
        profile.weight_kg, profile.body_fat_pct, profile.gender, adjusted
    )
    return EnergyTargets(
        base_tdci=base,
        adjusted_tdci=adjusted,
        calorie_adjustment=adjusted - base,
        macros=macros,
    )


def basal_metabolic_rate(
    weight_kg: float, height_cm: float, age: int, gender: Gender
) -> int:
    """Revised Harris-Benedict basal metabolic rate in kcal."""
    if gender is Gender.MALE:
        bmr = 88.362 + 13.397 * weight_kg + 4.799 * height_cm - 5.677 * age
    else:
        bmr = 447.593 + 9.247 * weight_kg + 3.098 * height_cm - 4.330 * age
    return round_half_up(bmr)


def activity_level_for(multiplier: float) -> ActivityLevel | None:
    """Return the first activity level offering this multiplier."""
    for level in ACTIVITY_LEVELS:
        if any(math.isclose(multiplier, value) for value in level.multipliers):
            return level
    return None


def goal_calorie_adjustment(
    goal: FitnessGoal,
    fitness_level: FitnessLevel | None = None,
    has_activity_multiplier: bool = True,
) -> float:
    """Default calorie adjustment in percent for a goal."""
    if not has_activity_multiplier:
        return -25.0 if goal is FitnessGoal.LOSE_FAT else 0.0
    if goal is FitnessGoal.LOSE_FAT:
        return -20.0
    if goal is FitnessGoal.BUILD_MUSCLE and fitness_level is not None:
        return _MUSCLE_GAIN_SURPLUS[fitness_level]
    return 0.0


def pounds_to_kg(pounds: float) -> float:
    return pounds * _KG_PER_POUND


def feet_inches_to_cm(feet: float, inches: float) -> float:
    return (feet * 12 + inches) * _CM_PER_INCH
