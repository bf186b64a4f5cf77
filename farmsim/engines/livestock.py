"""
FarmSim — Livestock Simulation Engine

Pure calculators for the livestock simulation types:
    - Stocking load (kg live weight per hectare) vs. carrying capacity
    - Meat production over a fattening period, net of mortality
    - Rotational grazing (pasture management) sustainability
"""

from ..schemas import (
    LivestockLoadParameters, MeatProductionParameters, PastureParameters,
)


def simulate_stocking_load(
    params: LivestockLoadParameters,
    default_capacity_kg_ha: float = 400.0,
) -> dict:
    """
    Stocking load, carrying capacity usage and weight gain production.

    Capacity comes from the parameters when given, otherwise from the
    configured default (400 kg/ha for a standard pasture).
    """
    capacity = params.capacity_max_kg_ha or default_capacity_kg_ha
    area = params.area_hectares

    total_weight = params.animal_count * params.avg_weight_kg
    load_kg_ha = total_weight / area
    overgrazing_pct = (load_kg_ha / capacity - 1) * 100

    kg_per_animal = params.daily_gain_kg * params.duration_days
    total_kg = params.animal_count * kg_per_animal

    return {
        "animal_count": params.animal_count,
        "avg_weight_kg": params.avg_weight_kg,
        "final_average_weight_kg": params.avg_weight_kg + kg_per_animal,
        "total_animal_weight_kg": total_weight,
        "load_kg_ha": load_kg_ha,

        "capacity_max_kg_ha": capacity,
        "capacity_usage_percent": load_kg_ha / capacity * 100,
        "overgrazing_percent": overgrazing_pct,
        "overgrazing_risk": overgrazing_pct > 0,

        "duration_days": params.duration_days,
        "daily_gain_kg": params.daily_gain_kg,
        "total_kg_produced": total_kg,
        "kg_per_ha": total_kg / area,
        "kg_per_animal": kg_per_animal,

        "area_hectares": area,
        "price_per_kg": params.price_per_kg,
        "estimated_revenue": total_kg * params.price_per_kg,

        "sustainability_score": stocking_sustainability_score(load_kg_ha, capacity),
    }


def stocking_sustainability_score(load_kg_ha: float, capacity_kg_ha: float) -> int:
    """0-100, where 100 means forage is abundant for the stocking load."""
    ratio = load_kg_ha / capacity_kg_ha
    if ratio < 0.7:
        return 100
    if ratio < 0.85:
        return 90
    if ratio < 1.0:
        return 70
    if ratio < 1.15:
        return 50
    if ratio < 1.3:
        return 30
    return 10


def simulate_meat_production(params: MeatProductionParameters) -> dict:
    """Kilograms gained over the fattening period by the surviving animals."""
    alive = params.animal_count * (1 - params.expected_mortality_percent / 100)
    kg_per_animal = params.daily_gain_kg * params.duration_days
    final_weight = params.initial_weight_kg + kg_per_animal
    total_kg = alive * kg_per_animal
    revenue = total_kg * params.price_per_kg

    results = {
        "initial_animal_count": params.animal_count,
        "animals_alive": alive,
        "mortality_percent": params.expected_mortality_percent,
        "initial_weight_kg": params.initial_weight_kg,
        "final_weight_kg": final_weight,
        "daily_gain_kg": params.daily_gain_kg,
        "duration_days": params.duration_days,
        "total_kg_produced": total_kg,
        "production_kg": total_kg,
        "kg_per_animal": kg_per_animal,
        "price_per_kg": params.price_per_kg,
        "estimated_revenue": revenue,
        "revenue_per_animal": revenue / alive if alive > 0 else 0.0,
        "kg_per_day": total_kg / params.duration_days,
    }
    if params.area_hectares:
        results["area_hectares"] = params.area_hectares
        results["kg_per_ha"] = total_kg / params.area_hectares
    return results


def simulate_pasture_management(params: PastureParameters) -> dict:
    """Grazing / rest cycle analysis for a rotational grazing plan."""
    cycle_days = params.rotation_days + params.rest_days
    cycles_per_year = 365 / cycle_days
    annual_production = params.initial_available_kg_ha * cycles_per_year * params.area_hectares

    return {
        "rotation_days": params.rotation_days,
        "rest_days": params.rest_days,
        "total_cycle_days": cycle_days,
        "cycles_per_year": round(cycles_per_year),
        "remanent_kg_ha": params.remanent_kg_ha,
        "initial_available_kg_ha": params.initial_available_kg_ha,
        "annual_pasture_production_kg": annual_production,
        "area_hectares": params.area_hectares,
        "sustainability_score": pasture_score(params.rotation_days, params.rest_days),
        "recommendation": pasture_recommendation(params.rotation_days, params.rest_days),
    }


def pasture_score(rotation_days: int, rest_days: int) -> int:
    """Rest:graze ratio of 3 or more is ideal, below 1 the pasture does not recover."""
    ratio = rest_days / rotation_days
    if ratio >= 3:
        return 100
    if ratio >= 2:
        return 85
    if ratio >= 1.5:
        return 70
    if ratio >= 1:
        return 50
    return 30


def pasture_recommendation(rotation_days: int, rest_days: int) -> str:
    ratio = rest_days / rotation_days
    if ratio < 1:
        return "CRITICAL: increase rest days, the pasture is not recovering."
    if ratio < 1.5:
        return "WARNING: rest period is short, consider extending it."
    if ratio < 2:
        return "ACCEPTABLE: moderate management, monitor pasture condition."
    if ratio < 3:
        return "GOOD: balanced management, pasture in good condition."
    return "EXCELLENT: optimal management, maximum sustainability."
