"""
FarmSim — Predictive Alert Generator

Turns a subset of a scenario's risk factors into persisted, actionable
alerts. The projected date is offset from the execution time:

    MARGIN_NEGATIVE    → +30 days
    OVERGRAZING        → +60 days
    COST_OUT_OF_RANGE  → today
    LOW_ROI            → today

Other risk types (break-even, price sensitivity, scale) stay on the
scenario results only. Persistence is best-effort: a database failure is
rolled back and logged, and the execution that triggered it carries on
without alerts.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import crud
from ..config import RiskThresholds, DEFAULT_RISK_THRESHOLDS
from ..models import Scenario, PredictiveAlert, RiskType, AlertStatus

logger = logging.getLogger("farmsim.alerts")


ALERT_OFFSET_DAYS = {
    RiskType.MARGIN_NEGATIVE.value: 30,
    RiskType.OVERGRAZING.value: 60,
    RiskType.COST_OUT_OF_RANGE.value: 0,
    RiskType.LOW_ROI.value: 0,
}


def build_alerts(
    scenario: Scenario,
    results: dict,
    now: Optional[datetime] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> list[dict]:
    """
    Build alert rows (as dicts) for the alertable risk factors in results.

    Severity is taken from the matching risk factor so alerts and the
    scenario's risk assessment never disagree.
    """
    now = now or datetime.utcnow()
    t = thresholds or DEFAULT_RISK_THRESHOLDS
    alerts = []

    for factor in results.get("risk_factors", []):
        risk_type = factor["type"]
        if risk_type not in ALERT_OFFSET_DAYS:
            continue

        alert = {
            "firm_id": scenario.firm_id,
            "premise_id": scenario.premise_id,
            "lot_id": scenario.lot_id,
            "scenario_id": scenario.id,
            "alert_type": risk_type,
            "severity": factor["severity"],
            "recommended_action": factor["recommendation"],
            "projected_date": (now + timedelta(days=ALERT_OFFSET_DAYS[risk_type])).date(),
            "status": AlertStatus.ACTIVE.value,
        }

        if risk_type == RiskType.MARGIN_NEGATIVE.value:
            margin = results["margin"]
            alert["title"] = "Projected negative margin"
            alert["description"] = (
                f"The scenario projects a negative margin of ${abs(margin):,.2f}. "
                f"Urgent review required."
            )
            alert["metadata"] = {"margin": margin, "scenario_name": scenario.name}

        elif risk_type == RiskType.OVERGRAZING.value:
            load = results["load_kg_ha"]
            capacity = results.get("capacity_max_kg_ha") or t.capacity_max_kg_ha
            excess = (load / capacity - 1) * 100
            alert["title"] = "Overgrazing risk"
            alert["description"] = (
                f"Projected stocking load ({load:.1f} kg/ha) exceeds the lot "
                f"carrying capacity by {excess:.1f}%."
            )
            alert["metadata"] = {
                "load_kg_ha": load,
                "capacity_max_kg_ha": capacity,
                "excess_percent": excess,
            }

        elif risk_type == RiskType.COST_OUT_OF_RANGE.value:
            cost_per_kg = results["cost_per_kg"]
            alert["title"] = "High cost per kg"
            alert["description"] = (
                f"Cost per kg of ${cost_per_kg:.2f} exceeds the "
                f"${t.benchmark_cost_per_kg:.2f} benchmark."
            )
            alert["metadata"] = {
                "cost_per_kg": cost_per_kg,
                "benchmark": t.benchmark_cost_per_kg,
            }

        else:
            roi = results["roi_percent"]
            alert["title"] = "Very low ROI"
            alert["description"] = f"Projected ROI of only {roi:.1f}%. Little profit margin."
            alert["metadata"] = {"roi_percent": roi}

        alerts.append(alert)

    return alerts


def generate_alerts(
    db: Session,
    scenario: Scenario,
    results: dict,
    now: Optional[datetime] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> list[PredictiveAlert]:
    """
    Build and persist alerts for an executed scenario.

    Returns the stored alerts, or an empty list when nothing applied or
    the alert store failed.
    """
    alerts = build_alerts(scenario, results, now, thresholds)
    if not alerts:
        return []

    try:
        stored = crud.create_alerts(db, alerts)
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to persist {len(alerts)} alerts for scenario {scenario.id}: {e}")
        return []

    logger.info(f"Created {len(stored)} alerts for scenario {scenario.id}")
    return stored
