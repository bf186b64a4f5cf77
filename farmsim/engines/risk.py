"""
FarmSim — Risk Identification Engine

Evaluates a fixed, ordered set of rules over computed results and returns
the matched risk factors in rule order:

    1. Negative margin            → MARGIN_NEGATIVE         (CRITICAL below margin_critical, else HIGH)
    2. Load above capacity        → OVERGRAZING             (CRITICAL if excess > 20%, else HIGH)
    3. Cost/kg above benchmark    → COST_OUT_OF_RANGE       (HIGH above ×1.5, MEDIUM above ×1.2)
    4. 0 < ROI < 10%              → LOW_ROI                 (MEDIUM)
    5. Production below break-even→ BREAK_EVEN_UNREACHABLE  (HIGH)
    6. Unprofitable below −10%    → PRICE_SENSITIVE         (MEDIUM, once)
    7. Area below 1 ha            → SMALL_SCALE             (MEDIUM)

Rules whose metrics are absent from the results are skipped. No match
yields an empty list.
"""

from typing import Optional

from ..config import RiskThresholds, DEFAULT_RISK_THRESHOLDS
from ..models import RiskType, Severity, RiskLevel
from ..schemas import RiskFactor


def identify_risks(
    results: Optional[dict],
    input_parameters: Optional[dict] = None,
    thresholds: Optional[RiskThresholds] = None,
) -> list[RiskFactor]:
    """Return the risk factors detected in a scenario's results, in rule order."""
    if not results:
        return []
    t = thresholds or DEFAULT_RISK_THRESHOLDS
    inputs = input_parameters or {}
    risks: list[RiskFactor] = []

    margin = results.get("margin")
    if margin is not None and margin < 0:
        risks.append(RiskFactor(
            type=RiskType.MARGIN_NEGATIVE,
            severity=Severity.CRITICAL if margin < t.margin_critical else Severity.HIGH,
            message=f"Negative margin: ${abs(margin):,.2f}",
            recommendation="Review the cost structure or the selling price",
        ))

    load = results.get("load_kg_ha")
    if load is not None:
        capacity = results.get("capacity_max_kg_ha") or t.capacity_max_kg_ha
        if load > capacity:
            excess = (load / capacity - 1) * 100
            risks.append(RiskFactor(
                type=RiskType.OVERGRAZING,
                severity=(
                    Severity.CRITICAL if excess > t.overgrazing_critical_pct
                    else Severity.HIGH
                ),
                message=f"Stocking load exceeds carrying capacity by {excess:.1f}%",
                recommendation="Reduce the number of animals or increase the grazing area",
            ))

    cost_per_kg = results.get("cost_per_kg")
    benchmark = t.benchmark_cost_per_kg
    if cost_per_kg is not None and cost_per_kg > benchmark * t.cost_warning_factor:
        risks.append(RiskFactor(
            type=RiskType.COST_OUT_OF_RANGE,
            severity=(
                Severity.HIGH if cost_per_kg > benchmark * t.cost_high_factor
                else Severity.MEDIUM
            ),
            message=f"Cost per kg of ${cost_per_kg:.2f} is above the ${benchmark:.2f} benchmark",
            recommendation="Optimise input and machinery costs",
        ))

    roi = results.get("roi_percent")
    if roi is not None and 0 < roi < t.low_roi_pct:
        risks.append(RiskFactor(
            type=RiskType.LOW_ROI,
            severity=Severity.MEDIUM,
            message=f"Low ROI: {roi:.1f}%",
            recommendation="Consider more profitable alternatives",
        ))

    break_even_kg = results.get("break_even_kg")
    production_kg = results.get("production_kg")
    if break_even_kg and production_kg is not None and production_kg < break_even_kg:
        risks.append(RiskFactor(
            type=RiskType.BREAK_EVEN_UNREACHABLE,
            severity=Severity.HIGH,
            message="Production is insufficient to reach break-even",
            recommendation="Increase production or reduce investment",
        ))

    sensitivity = results.get("sensitivity_analysis") or {}
    if any(
        point["price_variation_percent"] < t.price_sensitivity_floor_pct
        and not point["is_profitable"]
        for point in sensitivity.get("scenarios", [])
    ):
        risks.append(RiskFactor(
            type=RiskType.PRICE_SENSITIVE,
            severity=Severity.MEDIUM,
            message="Margin is highly sensitive to price drops",
            recommendation="Consider price hedging or reducing costs",
        ))

    area = inputs.get("area_hectares")
    if area is not None and area < t.small_scale_ha:
        risks.append(RiskFactor(
            type=RiskType.SMALL_SCALE,
            severity=Severity.MEDIUM,
            message="Very small operation",
            recommendation="Consider grouping operations or increasing scale",
        ))

    return risks


def risk_level(risk_factors: list) -> RiskLevel:
    """LOW with no factors, MEDIUM with one or two, HIGH with three or more."""
    count = len(risk_factors)
    if count == 0:
        return RiskLevel.LOW
    if count <= 2:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH
