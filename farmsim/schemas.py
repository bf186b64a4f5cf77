"""
FarmSim Pydantic Schemas

Defines request/response models for the FastAPI REST API, plus the
per-simulation-type input parameter records used by the calculators.

Architecture:
    - Create schemas: used for POST request bodies
    - Update schemas: used for PUT request bodies (all fields optional)
    - Response schemas: used for GET/POST response serialization
    - Parameter schemas: one record per simulation type, validated before
      any calculation runs (see engines.calculators.parse_parameters)

Naming convention:
    - XxxCreate: request body for creating Xxx
    - XxxUpdate: request body for updating Xxx
    - XxxResponse: response body for Xxx
    - XxxParameters: input parameters for a simulation type
"""

from datetime import datetime, date
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, model_validator

from .config import ComparisonWeights
from .models import (
    ScenarioType, SimulationType, ScenarioStatus, Severity, RiskType,
    ProjectionType,
)


# ---------------------------------------------------------------------------
# RISK FACTOR (value object embedded in results)
# ---------------------------------------------------------------------------

class RiskFactor(BaseModel):
    """A typed, severity-ranked condition detected in a scenario's results."""
    type: RiskType
    severity: Severity
    message: str
    recommendation: str

    model_config = {"frozen": True, "use_enum_values": True}


# ---------------------------------------------------------------------------
# INPUT PARAMETER SCHEMAS (one per simulation type)
# ---------------------------------------------------------------------------

class EconomicParameters(BaseModel):
    """Inputs for the economic calculator. Costs are absolute currency amounts."""
    input_costs: float = Field(0.0, ge=0)
    machinery_costs: float = Field(0.0, ge=0)
    labor_costs: float = Field(0.0, ge=0)
    other_costs: float = Field(0.0, ge=0)
    production_kg: float = Field(
        ..., gt=0,
        validation_alias=AliasChoices("production_kg", "total_kg_produced"),
    )
    price_per_kg: float = Field(..., gt=0)
    area_hectares: float = Field(..., gt=0)


class LivestockLoadParameters(BaseModel):
    """Inputs for the stocking-load (kg live weight per hectare) simulation."""
    animal_count: int = Field(0, ge=0)
    avg_weight_kg: float = Field(..., gt=0)
    area_hectares: float = Field(..., gt=0)
    daily_gain_kg: float = Field(0.5, ge=0)
    duration_days: int = Field(180, gt=0)
    price_per_kg: float = Field(0.0, ge=0)
    capacity_max_kg_ha: Optional[float] = Field(None, gt=0)


class MeatProductionParameters(BaseModel):
    """Inputs for the meat production simulation."""
    animal_count: int = Field(0, ge=0)
    initial_weight_kg: float = Field(0.0, ge=0)
    daily_gain_kg: float = Field(0.5, ge=0)
    duration_days: int = Field(180, gt=0)
    price_per_kg: float = Field(0.0, ge=0)
    expected_mortality_percent: float = Field(2.0, ge=0, le=100)
    area_hectares: Optional[float] = Field(None, gt=0)


class PastureParameters(BaseModel):
    """Inputs for the rotational grazing simulation."""
    area_hectares: float = Field(1.0, gt=0)
    rotation_days: int = Field(30, gt=0)
    rest_days: int = Field(90, ge=0)
    remanent_kg_ha: float = Field(1000.0, ge=0)
    initial_available_kg_ha: float = Field(3000.0, ge=0)


class AgriculturalParameters(BaseModel):
    """Inputs for the crop production simulation."""
    crop_type: str = Field(..., min_length=1)
    area_hectares: float = Field(..., gt=0)
    expected_yield_kg_ha: float = Field(..., gt=0)
    price_per_kg: float = Field(..., gt=0)
    input_costs: float = Field(0.0, ge=0)
    machinery_costs: float = Field(0.0, ge=0)
    labor_costs: float = Field(0.0, ge=0)
    annual_rainfall_mm: Optional[float] = Field(None, ge=0)


class IntegralParameters(BaseModel):
    """
    Inputs for the integral simulation: economic fields always, livestock
    fields when animal_count is given, crop fields when crop_type is given.
    production_kg defaults to the livestock + crop production.
    """
    input_costs: float = Field(0.0, ge=0)
    machinery_costs: float = Field(0.0, ge=0)
    labor_costs: float = Field(0.0, ge=0)
    other_costs: float = Field(0.0, ge=0)
    price_per_kg: float = Field(..., gt=0)
    area_hectares: float = Field(..., gt=0)
    production_kg: Optional[float] = Field(None, gt=0)

    animal_count: Optional[int] = Field(None, ge=0)
    avg_weight_kg: Optional[float] = Field(None, gt=0)
    daily_gain_kg: float = Field(0.5, ge=0)
    duration_days: int = Field(180, gt=0)
    capacity_max_kg_ha: Optional[float] = Field(None, gt=0)

    crop_type: Optional[str] = None
    expected_yield_kg_ha: Optional[float] = Field(None, gt=0)
    annual_rainfall_mm: Optional[float] = Field(None, ge=0)

    @model_validator(mode="after")
    def check_component_inputs(self):
        if self.animal_count and self.avg_weight_kg is None:
            raise ValueError("avg_weight_kg is required when animal_count is given")
        if self.crop_type and self.expected_yield_kg_ha is None:
            raise ValueError("expected_yield_kg_ha is required when crop_type is given")
        return self


PARAMETER_SCHEMAS: dict[SimulationType, type[BaseModel]] = {
    SimulationType.ECONOMIC: EconomicParameters,
    SimulationType.LIVESTOCK_LOAD: LivestockLoadParameters,
    SimulationType.PRODUCTION: MeatProductionParameters,
    SimulationType.PASTURE_MANAGEMENT: PastureParameters,
    SimulationType.INTEGRAL: IntegralParameters,
}


# ---------------------------------------------------------------------------
# SCENARIO SCHEMAS
# ---------------------------------------------------------------------------

class ScenarioCreate(BaseModel):
    """Request body for creating a new scenario (always created as DRAFT)."""
    firm_id: int
    premise_id: Optional[int] = None
    lot_id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    scenario_type: ScenarioType = ScenarioType.CUSTOM
    simulation_type: SimulationType
    base_projection_type: Optional[ProjectionType] = None
    base_projection_id: Optional[int] = None
    input_parameters: dict[str, Any] = Field(default_factory=dict)


class ScenarioUpdate(BaseModel):
    """Request body for updating a scenario. All fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    premise_id: Optional[int] = None
    lot_id: Optional[int] = None
    input_parameters: Optional[dict[str, Any]] = None


class ScenarioResponse(BaseModel):
    """Response body for a scenario."""
    id: int
    firm_id: int
    premise_id: Optional[int] = None
    lot_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    scenario_type: ScenarioType
    simulation_type: SimulationType
    base_projection_type: Optional[ProjectionType] = None
    base_projection_id: Optional[int] = None
    input_parameters: dict[str, Any]
    results: Optional[dict[str, Any]] = None
    status: ScenarioStatus
    executed_by: Optional[str] = None
    executed_at: Optional[datetime] = None
    converted_to_projection_id: Optional[int] = None
    converted_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class UserContext(BaseModel):
    """Optional body identifying who triggers an engine operation."""
    current_user: Optional[str] = None


class VariantBatchResponse(BaseModel):
    """Response for variant generation: executed variants plus failure count."""
    base_scenario_id: int
    generated: int
    failed: int
    variants: list[ScenarioResponse]


# ---------------------------------------------------------------------------
# ALERT SCHEMAS
# ---------------------------------------------------------------------------

class AlertResponse(BaseModel):
    """Response body for a predictive alert."""
    id: int
    firm_id: int
    premise_id: Optional[int] = None
    lot_id: Optional[int] = None
    scenario_id: Optional[int] = None
    alert_type: str
    severity: Severity
    title: str
    description: str
    recommended_action: Optional[str] = None
    projected_date: Optional[date] = None
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("alert_metadata", "metadata"),
    )
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# PROJECTION SCHEMAS
# ---------------------------------------------------------------------------

class ProjectionCreate(BaseModel):
    """Request body for registering a planning projection."""
    projection_type: ProjectionType
    firm_id: int
    premise_id: Optional[int] = None
    lot_id: Optional[int] = None
    tentative_date: Optional[date] = None
    crop: Optional[str] = None
    work_type: Optional[str] = None
    hectares: Optional[float] = Field(None, ge=0)
    total_kg: Optional[float] = Field(None, ge=0)
    estimated_inputs_cost: Optional[float] = Field(None, ge=0)
    estimated_machinery_cost: Optional[float] = Field(None, ge=0)
    estimated_labor_cost: Optional[float] = Field(None, ge=0)
    estimated_total_cost: Optional[float] = Field(None, ge=0)
    event_type: Optional[str] = None
    animal_count: Optional[int] = Field(None, ge=0)
    animal_category: Optional[str] = None
    priority: str = "MEDIUM"
    responsible_person: Optional[str] = None


class ProjectionResponse(BaseModel):
    """Response body for a planning projection."""
    id: int
    projection_type: ProjectionType
    firm_id: int
    premise_id: Optional[int] = None
    lot_id: Optional[int] = None
    tentative_date: Optional[date] = None
    crop: Optional[str] = None
    work_type: Optional[str] = None
    hectares: Optional[float] = None
    total_kg: Optional[float] = None
    estimated_inputs_cost: Optional[float] = None
    estimated_machinery_cost: Optional[float] = None
    estimated_labor_cost: Optional[float] = None
    estimated_total_cost: Optional[float] = None
    event_type: Optional[str] = None
    animal_count: Optional[int] = None
    animal_category: Optional[str] = None
    priority: str
    responsible_person: Optional[str] = None
    status: str
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("projection_metadata", "metadata"),
    )
    created_at: datetime

    model_config = {"from_attributes": True}


# ---------------------------------------------------------------------------
# COMPARISON SCHEMAS
# ---------------------------------------------------------------------------

class ComparisonCriteria(BaseModel):
    """Weights applied to the normalized margin, ROI and risk scores."""
    weights: ComparisonWeights = Field(default_factory=ComparisonWeights)


class CompareRequest(BaseModel):
    """Request body for comparing stored scenarios."""
    scenario_ids: list[int] = Field(..., min_length=1)
    criteria: Optional[ComparisonCriteria] = None


class ComparisonSaveRequest(CompareRequest):
    """Request body for comparing and saving the result."""
    firm_id: int
    name: str = "Scenario comparison"
    description: Optional[str] = None
    created_by: Optional[str] = None


class ComparisonRecordResponse(BaseModel):
    """Response body for a saved comparison."""
    id: int
    firm_id: int
    name: str
    description: Optional[str] = None
    scenario_ids: list[int]
    winner_scenario_id: Optional[int] = None
    winner_score: Optional[float] = None
    analysis: dict[str, Any]
    created_by: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ConversionResponse(BaseModel):
    """Response for converting a scenario: the updated scenario and its projection."""
    scenario: ScenarioResponse
    projection: ProjectionResponse
