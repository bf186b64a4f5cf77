"""
FarmSim — Scenario Variant Generator

Derives three variants from a base scenario by deterministic multiplicative
perturbation of its input parameters, stores each as a DRAFT scenario and
executes it:

    Variant        price   gain    costs   rainfall
    Optimistic     ×1.15   ×1.20   ×1.00   ×1.00
    Conservative   ×0.90   ×0.90   ×1.10   ×0.80
    Critical       ×0.75   ×0.70   ×1.20   ×0.60

Variants run one after another. A variant that fails is logged and left
out of the returned list; the rest of the batch still runs.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from ..config import RiskThresholds
from ..models import Scenario, ScenarioType, SimulationType, ProjectionType
from ..schemas import ScenarioCreate
from .scenario_engine import get_scenario_or_raise, create_scenario, execute_scenario

logger = logging.getLogger("farmsim.variants")


VARIANT_ADJUSTMENTS = [
    {
        "scenario_type": ScenarioType.OPTIMISTIC,
        "label": "Optimistic",
        "price_factor": 1.15,
        "gain_factor": 1.20,
        "cost_factor": 1.0,
        "rainfall_factor": 1.0,
    },
    {
        "scenario_type": ScenarioType.CONSERVATIVE,
        "label": "Conservative",
        "price_factor": 0.90,
        "gain_factor": 0.90,
        "cost_factor": 1.10,
        "rainfall_factor": 0.80,
    },
    {
        "scenario_type": ScenarioType.CRITICAL,
        "label": "Critical",
        "price_factor": 0.75,
        "gain_factor": 0.70,
        "cost_factor": 1.20,
        "rainfall_factor": 0.60,
    },
]

COST_KEYS = ("input_costs", "machinery_costs", "labor_costs", "other_costs")


@dataclass
class VariantOutcome:
    """Result of generating one variant: the executed scenario or the error."""
    label: str
    scenario: Optional[Scenario] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.scenario is not None


def perturb_parameters(input_parameters: dict, adjustment: dict) -> dict:
    """
    Apply a variant's factors to a copy of the input parameters.

    Only keys already present (and numeric) are scaled; nothing is added.
    """
    adjusted = dict(input_parameters)

    def scale(key: str, factor: float):
        value = adjusted.get(key)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            adjusted[key] = value * factor

    scale("price_per_kg", adjustment["price_factor"])
    scale("daily_gain_kg", adjustment["gain_factor"])
    for key in COST_KEYS:
        scale(key, adjustment["cost_factor"])
    scale("annual_rainfall_mm", adjustment["rainfall_factor"])
    return adjusted


def build_variant(base: Scenario, adjustment: dict) -> ScenarioCreate:
    """Request body for a variant of base (not yet stored)."""
    label = adjustment["label"]
    return ScenarioCreate(
        firm_id=base.firm_id,
        premise_id=base.premise_id,
        lot_id=base.lot_id,
        name=f"{base.name} - {label}",
        description=f"{label} variant of: {base.description or base.name}",
        scenario_type=adjustment["scenario_type"],
        simulation_type=SimulationType(base.simulation_type),
        base_projection_type=(
            ProjectionType(base.base_projection_type) if base.base_projection_type else None
        ),
        base_projection_id=base.base_projection_id,
        input_parameters=perturb_parameters(base.input_parameters, adjustment),
    )


def run_variants(
    db: Session,
    base_scenario_id: int,
    current_user: Optional[str] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> list[VariantOutcome]:
    """
    Create and execute every variant of a base scenario, one outcome each.

    Raises:
        ScenarioNotFoundError: the base scenario does not exist
    """
    base = get_scenario_or_raise(db, base_scenario_id)
    requests = [build_variant(base, adjustment) for adjustment in VARIANT_ADJUSTMENTS]

    outcomes = []
    for adjustment, request in zip(VARIANT_ADJUSTMENTS, requests):
        label = adjustment["label"]
        try:
            variant = create_scenario(db, request, current_user)
            executed = execute_scenario(db, variant.id, thresholds, executed_by=current_user)
            outcomes.append(VariantOutcome(label=label, scenario=executed))
        except Exception as e:
            db.rollback()
            logger.exception(f"Variant '{label}' of scenario {base_scenario_id} failed: {e}")
            outcomes.append(VariantOutcome(label=label, error=str(e)))

    succeeded = sum(1 for o in outcomes if o.succeeded)
    logger.info(
        f"Generated {succeeded}/{len(outcomes)} variants for scenario {base_scenario_id}"
    )
    return outcomes


def generate_variants(
    db: Session,
    base_scenario_id: int,
    current_user: Optional[str] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> list[Scenario]:
    """Executed variants of a base scenario; failed variants are left out."""
    outcomes = run_variants(db, base_scenario_id, current_user, thresholds)
    return [o.scenario for o in outcomes if o.succeeded]
