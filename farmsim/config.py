"""
FarmSim Engine Configuration

Thresholds and weights used by the risk and comparison engines.
Engines receive these objects as arguments; only get_risk_thresholds()
reads the environment.

Environment variables (all optional):
    FARMSIM_MARGIN_CRITICAL        — margin below which a negative margin is CRITICAL
    FARMSIM_CAPACITY_MAX_KG_HA     — default carrying capacity (kg live weight / ha)
    FARMSIM_BENCHMARK_COST_PER_KG  — benchmark production cost per kg
"""

import os

from pydantic import BaseModel, Field


class RiskThresholds(BaseModel):
    """Thresholds for the risk identification rules."""
    margin_critical: float = -50_000.0
    capacity_max_kg_ha: float = Field(400.0, gt=0)
    overgrazing_critical_pct: float = 20.0
    benchmark_cost_per_kg: float = Field(10.0, gt=0)
    cost_warning_factor: float = 1.2
    cost_high_factor: float = 1.5
    low_roi_pct: float = 10.0
    price_sensitivity_floor_pct: float = -10.0
    small_scale_ha: float = 1.0

    model_config = {"frozen": True}


class ComparisonWeights(BaseModel):
    """
    Weights for the comparison score. Expected to sum to 1.0, but
    caller-supplied weights are used as given (no renormalisation).
    """
    margin: float = 0.4
    roi: float = 0.3
    risk: float = 0.3

    @property
    def total(self) -> float:
        return self.margin + self.roi + self.risk


DEFAULT_RISK_THRESHOLDS = RiskThresholds()


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    return float(raw)


def get_risk_thresholds() -> RiskThresholds:
    """Build risk thresholds from FARMSIM_* environment variables."""
    return RiskThresholds(
        margin_critical=_env_float(
            "FARMSIM_MARGIN_CRITICAL", DEFAULT_RISK_THRESHOLDS.margin_critical
        ),
        capacity_max_kg_ha=_env_float(
            "FARMSIM_CAPACITY_MAX_KG_HA", DEFAULT_RISK_THRESHOLDS.capacity_max_kg_ha
        ),
        benchmark_cost_per_kg=_env_float(
            "FARMSIM_BENCHMARK_COST_PER_KG", DEFAULT_RISK_THRESHOLDS.benchmark_cost_per_kg
        ),
    )
