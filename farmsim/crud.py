"""
FarmSim CRUD Operations

Database access functions for all tables. These functions encapsulate
all SQLAlchemy queries and are called by engines and API routers.

Architecture:
    - Each function takes a db: Session parameter (injected by FastAPI)
    - Functions return ORM model instances (routers convert to Pydantic)
    - Create functions return the created instance
    - Get functions return None if not found (callers raise)
    - List functions return lists (empty list if none found)

Naming convention:
    - create_xxx: INSERT new record
    - get_xxx: SELECT single record by ID
    - list_xxx: SELECT multiple records with optional filters
    - update_xxx: UPDATE existing record
    - delete_xxx: DELETE record
"""

import json
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .models import (
    Scenario, PredictiveAlert, PlanningProjection, DecisionRecord,
    ScenarioComparison, ScenarioStatus, AlertStatus,
)
from .schemas import ScenarioCreate, ScenarioUpdate, ProjectionCreate


# ---------------------------------------------------------------------------
# SCENARIO CRUD
# ---------------------------------------------------------------------------

def create_scenario(
    db: Session,
    data: ScenarioCreate,
    current_user: Optional[str] = None,
) -> Scenario:
    """
    Insert a new scenario. Scenarios are always created as DRAFT
    with no results.
    """
    scenario = Scenario(
        firm_id=data.firm_id,
        premise_id=data.premise_id,
        lot_id=data.lot_id,
        name=data.name,
        description=data.description,
        scenario_type=data.scenario_type.value,
        simulation_type=data.simulation_type.value,
        base_projection_type=(
            data.base_projection_type.value if data.base_projection_type else None
        ),
        base_projection_id=data.base_projection_id,
        status=ScenarioStatus.DRAFT.value,
        executed_by=current_user,
    )
    scenario.input_parameters = data.input_parameters
    scenario.results = None
    db.add(scenario)
    db.commit()
    db.refresh(scenario)
    return scenario


def get_scenario(db: Session, scenario_id: int) -> Optional[Scenario]:
    """Get a single scenario by ID. Returns None if not found."""
    return db.query(Scenario).filter(Scenario.id == scenario_id).first()


def get_scenarios_by_ids(db: Session, scenario_ids: list[int]) -> list[Scenario]:
    """Fetch scenarios preserving the order of scenario_ids. Unknown IDs are skipped."""
    found = {
        s.id: s
        for s in db.query(Scenario).filter(Scenario.id.in_(scenario_ids)).all()
    }
    return [found[sid] for sid in scenario_ids if sid in found]


def list_scenarios(
    db: Session,
    firm_id: Optional[int] = None,
    premise_id: Optional[int] = None,
    lot_id: Optional[int] = None,
    simulation_type: Optional[str] = None,
    scenario_type: Optional[str] = None,
    status: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[Scenario]:
    """
    List scenarios with optional filters, newest first.

    Filters are exact matches; limit caps the number of rows returned.
    """
    query = db.query(Scenario)

    if firm_id is not None:
        query = query.filter(Scenario.firm_id == firm_id)
    if premise_id is not None:
        query = query.filter(Scenario.premise_id == premise_id)
    if lot_id is not None:
        query = query.filter(Scenario.lot_id == lot_id)
    if simulation_type:
        query = query.filter(Scenario.simulation_type == simulation_type)
    if scenario_type:
        query = query.filter(Scenario.scenario_type == scenario_type)
    if status:
        query = query.filter(Scenario.status == status)

    query = query.order_by(Scenario.created_at.desc(), Scenario.id.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def update_scenario(db: Session, scenario_id: int, data: ScenarioUpdate) -> Optional[Scenario]:
    """Update an existing scenario. Only fields present in the request are changed."""
    scenario = get_scenario(db, scenario_id)
    if not scenario:
        return None

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None:
            continue
        if field == "input_parameters":
            scenario.input_parameters = value
        else:
            setattr(scenario, field, value)

    scenario.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(scenario)
    return scenario


def delete_scenario(db: Session, scenario_id: int) -> bool:
    """Delete a scenario. Returns True if deleted."""
    scenario = get_scenario(db, scenario_id)
    if not scenario:
        return False
    db.delete(scenario)
    db.commit()
    return True


# ---------------------------------------------------------------------------
# ALERT CRUD
# ---------------------------------------------------------------------------

def get_active_alert(db: Session, scenario_id: int, alert_type: str) -> Optional[PredictiveAlert]:
    return db.query(PredictiveAlert).filter(
        PredictiveAlert.scenario_id == scenario_id,
        PredictiveAlert.alert_type == alert_type,
        PredictiveAlert.status == AlertStatus.ACTIVE.value,
    ).order_by(PredictiveAlert.id).first()


def create_alerts(db: Session, alerts: list[dict]) -> list[PredictiveAlert]:
    """
    Store alert rows in one transaction and return them with IDs, in input order.

    An alert for a scenario that already has an ACTIVE alert of the same
    type refreshes that row instead of inserting a new one.
    """
    rows = []
    for alert in alerts:
        data = dict(alert)
        metadata = data.pop("metadata", None)
        row = None
        if data.get("scenario_id") is not None:
            row = get_active_alert(db, data["scenario_id"], data["alert_type"])
        if row is None:
            row = PredictiveAlert(**data)
            db.add(row)
        else:
            for field, value in data.items():
                setattr(row, field, value)
        row.alert_metadata = metadata
        rows.append(row)

    db.commit()
    for row in rows:
        db.refresh(row)
    return rows


def get_alert(db: Session, alert_id: int) -> Optional[PredictiveAlert]:
    return db.query(PredictiveAlert).filter(PredictiveAlert.id == alert_id).first()


def list_alerts(
    db: Session,
    firm_id: Optional[int] = None,
    scenario_id: Optional[int] = None,
    lot_id: Optional[int] = None,
    status: Optional[str] = None,
    severity: Optional[str] = None,
) -> list[PredictiveAlert]:
    """List alerts with optional filters, most urgent projected date first."""
    query = db.query(PredictiveAlert)

    if firm_id is not None:
        query = query.filter(PredictiveAlert.firm_id == firm_id)
    if scenario_id is not None:
        query = query.filter(PredictiveAlert.scenario_id == scenario_id)
    if lot_id is not None:
        query = query.filter(PredictiveAlert.lot_id == lot_id)
    if status:
        query = query.filter(PredictiveAlert.status == status)
    if severity:
        query = query.filter(PredictiveAlert.severity == severity)

    return query.order_by(PredictiveAlert.projected_date, PredictiveAlert.id).all()


# ---------------------------------------------------------------------------
# PLANNING PROJECTION CRUD
# ---------------------------------------------------------------------------

def create_projection(
    db: Session,
    data: ProjectionCreate,
    metadata: Optional[dict] = None,
    commit: bool = True,
) -> PlanningProjection:
    """
    Insert a planning projection. With commit=False the row is only flushed,
    so the caller can commit it together with other changes.
    """
    payload = data.model_dump()
    payload["projection_type"] = data.projection_type.value
    projection = PlanningProjection(**payload)
    projection.projection_metadata = metadata
    db.add(projection)
    if commit:
        db.commit()
        db.refresh(projection)
    else:
        db.flush()
    return projection


def get_projection(db: Session, projection_id: int) -> Optional[PlanningProjection]:
    return db.query(PlanningProjection).filter(PlanningProjection.id == projection_id).first()


# ---------------------------------------------------------------------------
# DECISION HISTORY CRUD
# ---------------------------------------------------------------------------

def create_decision(
    db: Session,
    firm_id: int,
    scenario_id: Optional[int],
    decision_type: str,
    description: str,
    rationale: Optional[str] = None,
    expected_results: Optional[dict] = None,
    decided_by: Optional[str] = None,
) -> DecisionRecord:
    record = DecisionRecord(
        firm_id=firm_id,
        scenario_id=scenario_id,
        decision_type=decision_type,
        decision_description=description,
        decision_rationale=rationale,
        decided_by=decided_by,
    )
    record.expected_results = expected_results
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def list_decisions(db: Session, firm_id: int) -> list[DecisionRecord]:
    return (
        db.query(DecisionRecord)
        .filter(DecisionRecord.firm_id == firm_id)
        .order_by(DecisionRecord.decided_at.desc())
        .all()
    )


# ---------------------------------------------------------------------------
# COMPARISON CRUD
# ---------------------------------------------------------------------------

def create_comparison(
    db: Session,
    firm_id: int,
    name: str,
    scenario_ids: list[int],
    criteria: dict,
    analysis: dict,
    winner_scenario_id: Optional[int],
    winner_score: Optional[float],
    description: Optional[str] = None,
    created_by: Optional[str] = None,
) -> ScenarioComparison:
    comparison = ScenarioComparison(
        firm_id=firm_id,
        name=name,
        description=description,
        scenario_ids_json=json.dumps(scenario_ids),
        criteria_json=json.dumps(criteria),
        winner_scenario_id=winner_scenario_id,
        winner_score=winner_score,
        analysis_json=json.dumps(analysis, default=str),
        created_by=created_by,
    )
    db.add(comparison)
    db.commit()
    db.refresh(comparison)
    return comparison


def list_comparisons(db: Session, firm_id: Optional[int] = None) -> list[ScenarioComparison]:
    query = db.query(ScenarioComparison)
    if firm_id is not None:
        query = query.filter(ScenarioComparison.firm_id == firm_id)
    return query.order_by(ScenarioComparison.created_at.desc()).all()
