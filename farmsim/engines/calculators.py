"""
FarmSim — Calculator Dispatch

Maps a simulation type to its calculator(s). Input parameters are parsed
into the typed record for that simulation type before anything is computed,
so an invalid input never yields a partial result.

    ECONOMIC            → economic.run_economic_simulation
    LIVESTOCK_LOAD      → livestock.simulate_stocking_load
    PRODUCTION          → livestock.simulate_meat_production
    PASTURE_MANAGEMENT  → livestock.simulate_pasture_management
    INTEGRAL            → livestock + agricultural + economic, combined
"""

from typing import Optional

from pydantic import BaseModel, ValidationError

from ..config import RiskThresholds, DEFAULT_RISK_THRESHOLDS
from ..models import SimulationType
from ..schemas import (
    PARAMETER_SCHEMAS, EconomicParameters, LivestockLoadParameters,
    AgriculturalParameters, IntegralParameters,
)
from .errors import ScenarioValidationError, UnknownSimulationTypeError
from .economic import run_economic_simulation
from .livestock import (
    simulate_stocking_load, simulate_meat_production, simulate_pasture_management,
)
from .agricultural import simulate_agricultural_production


def resolve_simulation_type(simulation_type) -> SimulationType:
    """Coerce a stored string into SimulationType; unknown values are fatal."""
    try:
        return SimulationType(simulation_type)
    except ValueError:
        raise UnknownSimulationTypeError(
            f"Unknown simulation type '{simulation_type}'. "
            f"Valid types: {[t.value for t in SimulationType]}"
        )


def parse_parameters(simulation_type, input_parameters: dict) -> BaseModel:
    """
    Validate raw input parameters against the record for simulation_type.

    Raises:
        UnknownSimulationTypeError: simulation_type has no parameter record
        ScenarioValidationError: one entry per invalid or missing field
    """
    sim_type = resolve_simulation_type(simulation_type)
    schema = PARAMETER_SCHEMAS[sim_type]
    return _validate(schema, input_parameters or {})


def _validate(schema: type[BaseModel], data: dict) -> BaseModel:
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        errors = []
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"])
            errors.append(f"{location}: {err['msg']}" if location else err["msg"])
        raise ScenarioValidationError(errors)


def calculate(
    simulation_type,
    input_parameters: dict,
    thresholds: Optional[RiskThresholds] = None,
) -> dict:
    """
    Run the calculator(s) for a simulation type.

    Args:
        simulation_type: SimulationType or its string value
        input_parameters: Raw input map stored on the scenario
        thresholds: Supplies the default carrying capacity for load simulations

    Returns:
        Metrics dict (no risk information; see engines.risk)
    """
    thresholds = thresholds or DEFAULT_RISK_THRESHOLDS
    sim_type = resolve_simulation_type(simulation_type)
    params = parse_parameters(sim_type, input_parameters)

    if sim_type == SimulationType.ECONOMIC:
        return run_economic_simulation(params)
    if sim_type == SimulationType.LIVESTOCK_LOAD:
        return simulate_stocking_load(params, thresholds.capacity_max_kg_ha)
    if sim_type == SimulationType.PRODUCTION:
        return simulate_meat_production(params)
    if sim_type == SimulationType.PASTURE_MANAGEMENT:
        return simulate_pasture_management(params)
    if sim_type == SimulationType.INTEGRAL:
        return run_integral_simulation(params, thresholds)

    raise UnknownSimulationTypeError(f"No calculator registered for '{sim_type.value}'")


def run_integral_simulation(
    params: IntegralParameters,
    thresholds: RiskThresholds = DEFAULT_RISK_THRESHOLDS,
) -> dict:
    """
    Combine livestock, agricultural and economic results.

    Production is summed across components. The economic sub-result is
    authoritative for cost, revenue, margin and ROI; its production defaults
    to the summed livestock + crop production.
    """
    details = {}
    produced_kg = 0.0

    if params.animal_count:
        livestock = simulate_stocking_load(
            LivestockLoadParameters(
                animal_count=params.animal_count,
                avg_weight_kg=params.avg_weight_kg,
                area_hectares=params.area_hectares,
                daily_gain_kg=params.daily_gain_kg,
                duration_days=params.duration_days,
                price_per_kg=params.price_per_kg,
                capacity_max_kg_ha=params.capacity_max_kg_ha,
            ),
            thresholds.capacity_max_kg_ha,
        )
        details["livestock"] = livestock
        produced_kg += livestock["total_kg_produced"]

    if params.crop_type:
        agricultural = simulate_agricultural_production(
            AgriculturalParameters(
                crop_type=params.crop_type,
                area_hectares=params.area_hectares,
                expected_yield_kg_ha=params.expected_yield_kg_ha,
                price_per_kg=params.price_per_kg,
                input_costs=params.input_costs,
                machinery_costs=params.machinery_costs,
                labor_costs=params.labor_costs,
                annual_rainfall_mm=params.annual_rainfall_mm,
            )
        )
        details["agricultural"] = agricultural
        produced_kg += agricultural["total_production_kg"]

    economic_inputs = {
        "input_costs": params.input_costs,
        "machinery_costs": params.machinery_costs,
        "labor_costs": params.labor_costs,
        "other_costs": params.other_costs,
        "production_kg": params.production_kg or produced_kg,
        "price_per_kg": params.price_per_kg,
        "area_hectares": params.area_hectares,
    }
    economic = run_economic_simulation(_validate(EconomicParameters, economic_inputs))
    details["economic"] = economic

    results = {
        "total_kg_produced": produced_kg or economic["production_kg"],
        "production_kg": economic["production_kg"],
        "area_hectares": params.area_hectares,
        "price_per_kg": params.price_per_kg,
        "total_cost": economic["total_cost"],
        "revenue": economic["revenue"],
        "margin": economic["margin"],
        "margin_percent": economic["margin_percent"],
        "margin_per_ha": economic["margin_per_ha"],
        "roi_percent": economic["roi_percent"],
        "cost_per_kg": economic["cost_per_kg"],
        "break_even_kg": economic["break_even_kg"],
        "safety_margin_percent": economic["safety_margin_percent"],
        "sensitivity_analysis": economic["sensitivity_analysis"],
        "details": details,
    }
    if "livestock" in details:
        results["load_kg_ha"] = details["livestock"]["load_kg_ha"]
        results["capacity_max_kg_ha"] = details["livestock"]["capacity_max_kg_ha"]
    return results
