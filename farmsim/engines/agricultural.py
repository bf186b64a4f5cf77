"""
FarmSim — Agricultural Simulation Engine

Crop production calculator with an optional rainfall yield adjustment,
plus a crop rotation sustainability check.

Rainfall factor (annual mm):
    < 400   → 0.70  (drought)
    < 600   → 0.85  (low rainfall)
    > 1200  → 0.90  (excess, disease pressure)
    else    → 1.00
"""

from ..schemas import AgriculturalParameters


def rainfall_factor(annual_rainfall_mm: float) -> float:
    if annual_rainfall_mm < 400:
        return 0.7
    if annual_rainfall_mm < 600:
        return 0.85
    if annual_rainfall_mm > 1200:
        return 0.9
    return 1.0


def simulate_agricultural_production(params: AgriculturalParameters) -> dict:
    """Expected crop production, costs and margin for a single campaign."""
    area = params.area_hectares

    factor = 1.0
    if params.annual_rainfall_mm is not None:
        factor = rainfall_factor(params.annual_rainfall_mm)
    yield_kg_ha = params.expected_yield_kg_ha * factor

    total_production = area * yield_kg_ha
    total_cost = params.input_costs + params.machinery_costs + params.labor_costs
    revenue = total_production * params.price_per_kg
    margin = revenue - total_cost

    return {
        "crop_type": params.crop_type,
        "area_hectares": area,
        "expected_yield_kg_ha": params.expected_yield_kg_ha,
        "rainfall_factor": factor,
        "adjusted_yield_kg_ha": yield_kg_ha,

        "total_production_kg": total_production,

        "total_cost": total_cost,
        "cost_per_kg": total_cost / total_production if total_production > 0 else 0.0,
        "cost_per_ha": total_cost / area,

        "price_per_kg": params.price_per_kg,
        "revenue": revenue,
        "revenue_per_ha": revenue / area,
        "margin": margin,
        "margin_per_ha": margin / area,
        "margin_percent": margin / revenue * 100 if revenue > 0 else 0.0,
        "roi_percent": margin / total_cost * 100 if total_cost > 0 else 0.0,
    }


def analyze_rotation_sustainability(crop_sequence: list[str]) -> dict:
    """
    Score a multi-year crop sequence (0-100). Consecutive repeats cost
    15 points each; low crop diversity costs up to 20 points.
    """
    issues = []
    recommendations = []

    if not crop_sequence:
        return {
            "crops": [],
            "sustainability_score": 0,
            "issues": ["Empty crop sequence"],
            "recommendations": [],
        }

    repeats = 0
    for current, following in zip(crop_sequence, crop_sequence[1:]):
        if current == following:
            repeats += 1
            issues.append(f"Crop {current} repeated in consecutive years")

    diversity = len(set(crop_sequence)) / len(crop_sequence)
    if diversity < 0.5:
        issues.append("Low crop diversity (< 50%)")
        recommendations.append("Introduce more crops into the rotation")

    score = max(0.0, 100 - repeats * 15 - (1 - diversity) * 20)
    if score > 70:
        recommendations.append("Sustainable rotation")
    elif score > 40:
        recommendations.append("Acceptable rotation, room for improvement")
    else:
        recommendations.append("Unsustainable rotation, review required")

    return {
        "crops": list(crop_sequence),
        "sustainability_score": score,
        "issues": issues,
        "recommendations": recommendations,
    }
