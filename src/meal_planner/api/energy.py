"""Calorie and macro target endpoints."""

from fastapi import APIRouter, HTTPException, status
from fastapi.encoders import jsonable_encoder

from meal_planner.api.models import BmrRequest, EnergyTargetsRequest, MacroAdjustRequest
from meal_planner.domain.errors import InvalidInputError
from meal_planner.services.energy import (
    activity_level_for,
    adjust_macro,
    basal_metabolic_rate,
    calculate_energy_targets,
    macros_from_percentages,
    round_half_up,
)

router = APIRouter(prefix="/energy", tags=["energy"])


@router.post("/targets")
async def energy_targets(payload: EnergyTargetsRequest) -> dict[str, object]:
    """Compute baseline and adjusted calories with the macro split."""
    try:
        targets = calculate_energy_targets(payload.to_profile())
    except InvalidInputError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)
        ) from exc
    return jsonable_encoder(targets)


@router.post("/macros/adjust")
async def adjust_macros(payload: MacroAdjustRequest) -> dict[str, object]:
    """Move one macro's share and rebalance the other two."""
    current = macros_from_percentages(
        payload.total_calories,
        payload.protein_pct,
        payload.fat_pct,
        payload.carbs_pct,
    )
    return jsonable_encoder(adjust_macro(current, payload.macro, payload.delta))


@router.post("/bmr")
async def bmr(payload: BmrRequest) -> dict[str, object]:
    """Estimate basal metabolic rate, and daily expenditure when active."""
    value = basal_metabolic_rate(
        payload.weight_kg, payload.height_cm, payload.age, payload.gender
    )
    response: dict[str, object] = {"bmr": value}
    if payload.activity_multiplier is not None:
        level = activity_level_for(payload.activity_multiplier)
        response["tdee"] = round_half_up(value * payload.activity_multiplier)
        response["activity_level"] = level.name if level else None
    return response
