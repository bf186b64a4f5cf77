"""
FarmSim ORM Models

Defines all database tables using SQLAlchemy 2.0 mapped_column style.

Architecture:
    - All models inherit from Base (defined in database.py)
    - Free-form maps (input parameters, results, metadata) are stored as JSON
      text columns and exposed through properties that (de)serialize them
    - Status / type columns store the value of the str enums defined below

Tables:
    - simulation_scenarios: Hypothetical plans with inputs and computed results
    - predictive_alerts: Alerts derived from scenario risk factors
    - planning_projections: Planning records scenarios are seeded from / converted to
    - decision_history: Audit of decisions taken from scenarios
    - scenario_comparisons: Saved comparison snapshots
"""

import json
from datetime import datetime, date
from enum import Enum
from typing import Optional

from sqlalchemy import Integer, Float, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from .database import Base


# ---------------------------------------------------------------------------
# ENUMS
# ---------------------------------------------------------------------------

class ScenarioType(str, Enum):
    CUSTOM = "CUSTOM"
    OPTIMISTIC = "OPTIMISTIC"
    CONSERVATIVE = "CONSERVATIVE"
    CRITICAL = "CRITICAL"


class SimulationType(str, Enum):
    LIVESTOCK_LOAD = "LIVESTOCK_LOAD"
    PASTURE_MANAGEMENT = "PASTURE_MANAGEMENT"
    PRODUCTION = "PRODUCTION"
    ECONOMIC = "ECONOMIC"
    INTEGRAL = "INTEGRAL"


class ScenarioStatus(str, Enum):
    """DRAFT → EXECUTED → CONVERTED. No transition leaves CONVERTED."""
    DRAFT = "DRAFT"
    EXECUTED = "EXECUTED"
    CONVERTED = "CONVERTED"


class Severity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RiskType(str, Enum):
    MARGIN_NEGATIVE = "MARGIN_NEGATIVE"
    OVERGRAZING = "OVERGRAZING"
    COST_OUT_OF_RANGE = "COST_OUT_OF_RANGE"
    LOW_ROI = "LOW_ROI"
    BREAK_EVEN_UNREACHABLE = "BREAK_EVEN_UNREACHABLE"
    PRICE_SENSITIVE = "PRICE_SENSITIVE"
    SMALL_SCALE = "SMALL_SCALE"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AlertStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ACKNOWLEDGED = "ACKNOWLEDGED"
    RESOLVED = "RESOLVED"
    DISMISSED = "DISMISSED"


class ProjectionType(str, Enum):
    AGRICULTURAL = "AGRICULTURAL"
    LIVESTOCK = "LIVESTOCK"


class OutcomeEvaluation(str, Enum):
    PENDING = "PENDING"
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"
    NEUTRAL = "NEUTRAL"


def _load_json(raw: Optional[str]):
    if raw is None:
        return None
    return json.loads(raw)


def _dump_json(value) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


# ---------------------------------------------------------------------------
# SCENARIO TABLES
# ---------------------------------------------------------------------------

class Scenario(Base):
    """
    A hypothetical operational plan. Inputs are free-form per simulation type;
    results are populated by the execution engine.

    Invariants:
        - results is not None  iff  status != DRAFT
        - converted_to_projection_id is not None  iff  status == CONVERTED
    """
    __tablename__ = "simulation_scenarios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    premise_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lot_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, index=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    scenario_type: Mapped[str] = mapped_column(
        Text, nullable=False, default=ScenarioType.CUSTOM.value
    )
    simulation_type: Mapped[str] = mapped_column(Text, nullable=False)

    # Source planning record (when derived from a projection)
    base_projection_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    base_projection_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    input_parameters_json: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    results_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        Text, nullable=False, default=ScenarioStatus.DRAFT.value
    )

    # Audit
    executed_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    executed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    converted_to_projection_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("planning_projections.id", ondelete="SET NULL"), nullable=True
    )
    converted_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    @property
    def input_parameters(self) -> dict:
        return _load_json(self.input_parameters_json) or {}

    @input_parameters.setter
    def input_parameters(self, value: dict) -> None:
        self.input_parameters_json = _dump_json(value or {})

    @property
    def results(self) -> Optional[dict]:
        return _load_json(self.results_json)

    @results.setter
    def results(self, value: Optional[dict]) -> None:
        self.results_json = _dump_json(value)

    def __repr__(self) -> str:
        return (
            f"<Scenario(id={self.id}, name='{self.name}', "
            f"type={self.simulation_type}, status={self.status})>"
        )


class PredictiveAlert(Base):
    """
    Alert emitted from a scenario's risk factors. Created only by the alert
    generator; lifecycle (acknowledge / resolve / dismiss) is handled elsewhere.
    """
    __tablename__ = "predictive_alerts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    premise_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lot_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    scenario_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("simulation_scenarios.id", ondelete="SET NULL"), nullable=True
    )
    alert_type: Mapped[str] = mapped_column(Text, nullable=False)
    severity: Mapped[str] = mapped_column(Text, nullable=False)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    recommended_action: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    projected_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    metadata_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        Text, nullable=False, default=AlertStatus.ACTIVE.value
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    @property
    def alert_metadata(self) -> dict:
        return _load_json(self.metadata_json) or {}

    @alert_metadata.setter
    def alert_metadata(self, value: Optional[dict]) -> None:
        self.metadata_json = _dump_json(value)

    def __repr__(self) -> str:
        return f"<PredictiveAlert(id={self.id}, type={self.alert_type}, severity={self.severity})>"


# ---------------------------------------------------------------------------
# PLANNING / DECISION TABLES
# ---------------------------------------------------------------------------

class PlanningProjection(Base):
    """
    Planning record (agricultural or livestock projection). Scenarios may be
    seeded from one, and an executed scenario is converted into one.
    """
    __tablename__ = "planning_projections"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    projection_type: Mapped[str] = mapped_column(Text, nullable=False)
    firm_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    premise_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    lot_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    tentative_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    # Agricultural fields
    crop: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    work_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    hectares: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    total_kg: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    estimated_inputs_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    estimated_machinery_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    estimated_labor_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    estimated_total_cost: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # Livestock fields
    event_type: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    animal_count: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    animal_category: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    priority: Mapped[str] = mapped_column(Text, nullable=False, default="MEDIUM")
    responsible_person: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="PENDING")
    metadata_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    @property
    def projection_metadata(self) -> dict:
        return _load_json(self.metadata_json) or {}

    @projection_metadata.setter
    def projection_metadata(self, value: Optional[dict]) -> None:
        self.metadata_json = _dump_json(value)

    def __repr__(self) -> str:
        return f"<PlanningProjection(id={self.id}, type={self.projection_type})>"


class DecisionRecord(Base):
    """Decision audit entry (e.g. a scenario converted into a projection)."""
    __tablename__ = "decision_history"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    scenario_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("simulation_scenarios.id", ondelete="SET NULL"), nullable=True
    )
    decision_type: Mapped[str] = mapped_column(Text, nullable=False)
    decision_description: Mapped[str] = mapped_column(Text, nullable=False)
    decision_rationale: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    expected_results_json: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    decided_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )
    decided_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    outcome_evaluation: Mapped[str] = mapped_column(
        Text, nullable=False, default=OutcomeEvaluation.PENDING.value
    )
    lessons_learned: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    @property
    def expected_results(self) -> Optional[dict]:
        return _load_json(self.expected_results_json)

    @expected_results.setter
    def expected_results(self, value: Optional[dict]) -> None:
        self.expected_results_json = _dump_json(value)

    def __repr__(self) -> str:
        return f"<DecisionRecord(id={self.id}, type={self.decision_type})>"


class ScenarioComparison(Base):
    """Saved snapshot of a scenario comparison."""
    __tablename__ = "scenario_comparisons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    firm_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    scenario_ids_json: Mapped[str] = mapped_column(Text, nullable=False)
    criteria_json: Mapped[str] = mapped_column(Text, nullable=False)
    winner_scenario_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    winner_score: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    analysis_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=datetime.utcnow
    )

    @property
    def scenario_ids(self) -> list[int]:
        return _load_json(self.scenario_ids_json) or []

    @property
    def analysis(self) -> dict:
        return _load_json(self.analysis_json) or {}

    def __repr__(self) -> str:
        return f"<ScenarioComparison(id={self.id}, name='{self.name}')>"
