"""
FarmSim — Scenario Execution Engine

Drives a scenario through its lifecycle:

    DRAFT ──execute──► EXECUTED ──convert──► CONVERTED
                         │  ▲
                         └──┘  (re-execute replaces results)

execute_scenario():
    1. Load the scenario (ScenarioNotFoundError if missing)
    2. Run the calculator for its simulation_type
    3. Identify risk factors and derive the risk level
    4. Generate predictive alerts when there are risks (best-effort) and
       record their ids in results["alerts"]; re-execution reuses the
       scenario's ACTIVE alert of the same type, so the ids are stable
    5. Store results with status EXECUTED and executed_at = now

convert_scenario():
    Turns an EXECUTED scenario into a planning projection, stamps
    converted_to_projection_id / converted_at and records a decision
    audit entry (best-effort).

Executing a scenario only writes its own row plus the alerts, projection
and decision records created here.
"""

import logging
from datetime import datetime, date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud
from ..config import RiskThresholds, DEFAULT_RISK_THRESHOLDS
from ..models import (
    Scenario, ScenarioStatus, ScenarioType, SimulationType, ProjectionType,
)
from ..schemas import ScenarioCreate, ProjectionCreate
from .alerts import generate_alerts
from .calculators import calculate
from .errors import ScenarioNotFoundError, InvalidTransitionError
from .risk import identify_risks, risk_level

logger = logging.getLogger("farmsim.engine")

# Share of the total cost assigned to each planning cost line on conversion
CONVERSION_COST_SPLIT = {
    "estimated_inputs_cost": 0.4,
    "estimated_machinery_cost": 0.3,
    "estimated_labor_cost": 0.3,
}

DECISION_TYPE_EXECUTE_PROJECTION = "EXECUTE_PROJECTION"


def get_scenario_or_raise(db: Session, scenario_id: int) -> Scenario:
    scenario = crud.get_scenario(db, scenario_id)
    if not scenario:
        raise ScenarioNotFoundError(f"Scenario {scenario_id} not found")
    return scenario


# =========================================================================
# CREATE
# =========================================================================

def create_scenario(
    db: Session,
    data: ScenarioCreate,
    current_user: Optional[str] = None,
) -> Scenario:
    """Store a new DRAFT scenario. Inputs are validated when it is executed."""
    scenario = crud.create_scenario(db, data, current_user)
    logger.info(f"Created scenario {scenario.id} ({scenario.simulation_type}) for firm {scenario.firm_id}")
    return scenario


def create_scenario_from_projection(
    db: Session,
    projection_id: int,
    current_user: Optional[str] = None,
) -> Scenario:
    """
    Seed a DRAFT scenario from a planning projection.

    Agricultural projections become ECONOMIC scenarios pre-filled with the
    crop, area and estimated costs; livestock projections become
    LIVESTOCK_LOAD scenarios pre-filled with the animal count. Fields the
    projection does not carry (yield, weights, price) are left for the user
    to complete before execution.
    """
    projection = crud.get_projection(db, projection_id)
    if not projection:
        raise ScenarioNotFoundError(f"Planning projection {projection_id} not found")

    planned_for = (
        projection.tentative_date.isoformat() if projection.tentative_date else "an undated plan"
    )

    if projection.projection_type == ProjectionType.AGRICULTURAL.value:
        crop = projection.crop or "Crop"
        data = ScenarioCreate(
            firm_id=projection.firm_id,
            premise_id=projection.premise_id,
            lot_id=projection.lot_id,
            name=f"Simulation: {crop}",
            description=f"Agricultural simulation based on the projection for {planned_for}",
            scenario_type=ScenarioType.CUSTOM,
            simulation_type=SimulationType.ECONOMIC,
            base_projection_type=ProjectionType.AGRICULTURAL,
            base_projection_id=projection.id,
            input_parameters={
                "crop_type": projection.crop,
                "area_hectares": projection.hectares or 0,
                "expected_yield_kg_ha": 0,
                "input_costs": projection.estimated_inputs_cost or 0,
                "machinery_costs": projection.estimated_machinery_cost or 0,
                "labor_costs": projection.estimated_labor_cost or 0,
                "other_costs": 0,
            },
        )
    else:
        event = projection.event_type or "Livestock event"
        data = ScenarioCreate(
            firm_id=projection.firm_id,
            premise_id=projection.premise_id,
            lot_id=projection.lot_id,
            name=f"Simulation: {event}",
            description=f"Livestock simulation based on the projection for {planned_for}",
            scenario_type=ScenarioType.CUSTOM,
            simulation_type=SimulationType.LIVESTOCK_LOAD,
            base_projection_type=ProjectionType.LIVESTOCK,
            base_projection_id=projection.id,
            input_parameters={
                "animal_count": projection.animal_count or 0,
                "animal_category": projection.animal_category,
                "avg_weight_kg": 0,
                "daily_gain_kg": 0,
                "duration_days": 180,
                "area_hectares": 0,
            },
        )

    return create_scenario(db, data, current_user)


# =========================================================================
# EXECUTE
# =========================================================================

def execute_scenario(
    db: Session,
    scenario_id: int,
    thresholds: Optional[RiskThresholds] = None,
    executed_by: Optional[str] = None,
) -> Scenario:
    """
    Run the scenario's simulation and store the results.

    Raises:
        ScenarioNotFoundError: unknown scenario_id
        InvalidTransitionError: the scenario was already converted
        UnknownSimulationTypeError: stored simulation_type has no calculator
        ScenarioValidationError: input parameters are invalid (nothing stored)
    """
    thresholds = thresholds or DEFAULT_RISK_THRESHOLDS
    scenario = get_scenario_or_raise(db, scenario_id)

    if scenario.status == ScenarioStatus.CONVERTED.value:
        raise InvalidTransitionError(
            f"Scenario {scenario_id} has been converted and can no longer be executed"
        )

    input_parameters = scenario.input_parameters
    results = calculate(scenario.simulation_type, input_parameters, thresholds)

    risks = identify_risks(results, input_parameters, thresholds)
    results["risk_factors"] = [r.model_dump() for r in risks]
    results["risk_level"] = risk_level(risks).value

    stored_alerts = generate_alerts(db, scenario, results, thresholds=thresholds) if risks else []
    results["alerts"] = [alert.id for alert in stored_alerts]

    now = datetime.utcnow()
    scenario.results = results
    scenario.status = ScenarioStatus.EXECUTED.value
    scenario.executed_at = now
    scenario.updated_at = now
    if executed_by:
        scenario.executed_by = executed_by
    db.commit()
    db.refresh(scenario)

    logger.info(
        f"Executed scenario {scenario.id} ({scenario.simulation_type}): "
        f"risk level {results['risk_level']}, {len(risks)} risk factors"
    )
    return scenario


# =========================================================================
# CONVERT
# =========================================================================

def convert_scenario(
    db: Session,
    scenario_id: int,
    current_user: Optional[str] = None,
):
    """
    Convert an executed scenario into a planning projection.

    The projection and the scenario update are committed together; the
    decision audit entry is written afterwards and never fails the call.

    Returns:
        Tuple of (scenario, projection)
    """
    scenario = get_scenario_or_raise(db, scenario_id)
    if scenario.status != ScenarioStatus.EXECUTED.value:
        raise InvalidTransitionError(
            f"Only executed scenarios can be converted "
            f"(scenario {scenario_id} is {scenario.status})"
        )

    results = scenario.results or {}
    inputs = scenario.input_parameters
    total_cost = results.get("total_cost") or 0.0

    projection_data = ProjectionCreate(
        projection_type=ProjectionType.AGRICULTURAL,
        firm_id=scenario.firm_id,
        premise_id=scenario.premise_id,
        lot_id=scenario.lot_id,
        tentative_date=date.today(),
        crop=inputs.get("crop_type") or "Crop",
        work_type="Sowing",
        hectares=inputs.get("area_hectares") or 0,
        total_kg=results.get("total_kg_produced") or results.get("production_kg") or 0,
        estimated_total_cost=total_cost,
        priority="MEDIUM",
        responsible_person=current_user,
        **{field: total_cost * share for field, share in CONVERSION_COST_SPLIT.items()},
    )
    projection = crud.create_projection(
        db,
        projection_data,
        metadata={
            "from_simulation": True,
            "scenario_id": scenario.id,
            "scenario_results": results,
        },
        commit=False,
    )

    now = datetime.utcnow()
    scenario.converted_to_projection_id = projection.id
    scenario.converted_at = now
    scenario.updated_at = now
    scenario.status = ScenarioStatus.CONVERTED.value
    db.commit()
    db.refresh(scenario)
    db.refresh(projection)

    logger.info(f"Converted scenario {scenario.id} into planning projection {projection.id}")
    register_decision(db, scenario, current_user)
    return scenario, projection


def register_decision(db: Session, scenario: Scenario, current_user: Optional[str] = None):
    """Record the conversion in the decision history. Failures are logged only."""
    results = scenario.results or {}
    try:
        return crud.create_decision(
            db,
            firm_id=scenario.firm_id,
            scenario_id=scenario.id,
            decision_type=DECISION_TYPE_EXECUTE_PROJECTION,
            description=f'Convert scenario "{scenario.name}" into a planning projection',
            rationale=(
                f"Scenario executed with a margin of {results.get('margin', 0)}. "
                f"Proceeding with execution."
            ),
            expected_results=results,
            decided_by=current_user,
        )
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to record decision for scenario {scenario.id}: {e}")
        return None
