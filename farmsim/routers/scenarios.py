"""
Scenario Router — /api/scenarios

Scenario CRUD plus the lifecycle operations of the scenario engine.

Endpoints:
    GET    /api/scenarios                              — List scenarios with optional filters
    POST   /api/scenarios                              — Create a DRAFT scenario
    POST   /api/scenarios/from-projection/{proj_id}    — Seed a scenario from a planning projection
    GET    /api/scenarios/{id}                         — Get a scenario
    PUT    /api/scenarios/{id}                         — Update name, description, lot or inputs
    DELETE /api/scenarios/{id}                         — Delete a scenario
    POST   /api/scenarios/{id}/execute                 — Run the simulation (DRAFT/EXECUTED → EXECUTED)
    POST   /api/scenarios/{id}/convert                 — Convert into a planning projection (EXECUTED → CONVERTED)
    POST   /api/scenarios/{id}/variants                — Generate and run Optimistic/Conservative/Critical variants
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..config import RiskThresholds, get_risk_thresholds
from ..database import get_db
from .. import crud
from ..models import ScenarioStatus, ScenarioType, SimulationType
from ..schemas import (
    ScenarioCreate, ScenarioUpdate, ScenarioResponse, UserContext,
    VariantBatchResponse, ConversionResponse,
)
from ..engines import scenario_engine, variants
from . import engine_http_error

router = APIRouter(prefix="/api/scenarios", tags=["Scenarios"])


@router.get("", response_model=list[ScenarioResponse])
def list_scenarios(
    firm_id: Optional[int] = Query(None, description="Filter by firm"),
    premise_id: Optional[int] = Query(None, description="Filter by premise"),
    lot_id: Optional[int] = Query(None, description="Filter by lot"),
    simulation_type: Optional[SimulationType] = Query(None),
    scenario_type: Optional[ScenarioType] = Query(None),
    status: Optional[ScenarioStatus] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """List scenarios, newest first."""
    return crud.list_scenarios(
        db,
        firm_id=firm_id,
        premise_id=premise_id,
        lot_id=lot_id,
        simulation_type=simulation_type.value if simulation_type else None,
        scenario_type=scenario_type.value if scenario_type else None,
        status=status.value if status else None,
        limit=limit,
    )


@router.post("", response_model=ScenarioResponse, status_code=201)
def create_scenario(
    data: ScenarioCreate,
    current_user: Optional[str] = Query(None, description="User creating the scenario"),
    db: Session = Depends(get_db),
):
    """Create a new scenario in DRAFT status. Inputs are validated on execution."""
    return scenario_engine.create_scenario(db, data, current_user)


@router.post("/from-projection/{projection_id}", response_model=ScenarioResponse, status_code=201)
def create_from_projection(
    projection_id: int,
    ctx: Optional[UserContext] = None,
    db: Session = Depends(get_db),
):
    """Seed a DRAFT scenario from an agricultural or livestock planning projection."""
    try:
        return scenario_engine.create_scenario_from_projection(
            db, projection_id, ctx.current_user if ctx else None
        )
    except ValueError as e:
        raise engine_http_error(e)


@router.get("/{scenario_id}", response_model=ScenarioResponse)
def get_scenario(scenario_id: int, db: Session = Depends(get_db)):
    """Get a single scenario by ID."""
    scenario = crud.get_scenario(db, scenario_id)
    if not scenario:
        raise HTTPException(status_code=404, detail=f"Scenario {scenario_id} not found")
    return scenario


@router.put("/{scenario_id}", response_model=ScenarioResponse)
def update_scenario(scenario_id: int, data: ScenarioUpdate, db: Session = Depends(get_db)):
    """
    Update a scenario. Only fields in the request body are changed.

    Returns 409 for converted scenarios, which are read-only. Editing the
    input_parameters of an EXECUTED scenario keeps its stored results and
    status; execute it again before comparing or converting it.
    """
    scenario = crud.get_scenario(db, scenario_id)
    if not scenario:
        raise HTTPException(status_code=404, detail=f"Scenario {scenario_id} not found")
    if scenario.status == ScenarioStatus.CONVERTED.value:
        raise HTTPException(
            status_code=409,
            detail={
                "detail": f"Scenario {scenario_id} has been converted and is read-only",
                "error_code": "INVALID_TRANSITION",
            },
        )
    return crud.update_scenario(db, scenario_id, data)


@router.delete("/{scenario_id}", status_code=204)
def delete_scenario(scenario_id: int, db: Session = Depends(get_db)):
    """Delete a scenario."""
    if not crud.delete_scenario(db, scenario_id):
        raise HTTPException(status_code=404, detail=f"Scenario {scenario_id} not found")


@router.post("/{scenario_id}/execute", response_model=ScenarioResponse)
def execute_scenario(
    scenario_id: int,
    ctx: Optional[UserContext] = None,
    thresholds: RiskThresholds = Depends(get_risk_thresholds),
    db: Session = Depends(get_db),
):
    """
    Run the scenario's simulation, identify risks and store the results.

    Re-executing an EXECUTED scenario replaces its results.
    Errors: 404 unknown scenario, 409 converted scenario,
    422 invalid input parameters, 400 unknown simulation type.
    """
    try:
        return scenario_engine.execute_scenario(
            db, scenario_id, thresholds, executed_by=ctx.current_user if ctx else None
        )
    except ValueError as e:
        raise engine_http_error(e)


@router.post("/{scenario_id}/convert", response_model=ConversionResponse)
def convert_scenario(
    scenario_id: int,
    ctx: Optional[UserContext] = None,
    db: Session = Depends(get_db),
):
    """Convert an EXECUTED scenario into a planning projection."""
    try:
        scenario, projection = scenario_engine.convert_scenario(
            db, scenario_id, ctx.current_user if ctx else None
        )
    except ValueError as e:
        raise engine_http_error(e)
    return {"scenario": scenario, "projection": projection}


@router.post("/{scenario_id}/variants", response_model=VariantBatchResponse)
def generate_variants(
    scenario_id: int,
    ctx: Optional[UserContext] = None,
    thresholds: RiskThresholds = Depends(get_risk_thresholds),
    db: Session = Depends(get_db),
):
    """
    Create and execute the Optimistic, Conservative and Critical variants.

    Variants that fail are left out of the response; `failed` counts them.
    """
    try:
        outcomes = variants.run_variants(
            db, scenario_id, ctx.current_user if ctx else None, thresholds
        )
    except ValueError as e:
        raise engine_http_error(e)

    executed = [o.scenario for o in outcomes if o.succeeded]
    return {
        "base_scenario_id": scenario_id,
        "generated": len(executed),
        "failed": len(outcomes) - len(executed),
        "variants": executed,
    }
