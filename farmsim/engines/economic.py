"""
FarmSim — Economic Simulation Engine

Pure functions: input parameters → economic metrics. No I/O.

Formulas:
    total_cost  = input_costs + machinery_costs + labor_costs + other_costs
    revenue     = production_kg × price_per_kg
    margin      = revenue − total_cost
    margin %    = margin / revenue × 100        (0 if revenue ≤ 0)
    ROI %       = margin / total_cost × 100     (0 if total_cost ≤ 0)
    cost / kg   = total_cost / production_kg    (0 if production_kg ≤ 0)
    break-even  = total_cost / price_per_kg     (∞ if price_per_kg ≤ 0)

Sensitivity analysis re-evaluates margin, revenue and ROI over a fixed grid
of price variations and derives the price elasticity of the margin from the
−10% and +10% points.
"""

import math
from typing import Optional

from ..schemas import EconomicParameters

# Price variations (fractions of the base price) for the sensitivity grid
PRICE_VARIATIONS = [-0.20, -0.15, -0.10, -0.05, 0.0, 0.05, 0.10, 0.15, 0.20]

COST_COMPONENTS = ("input_costs", "machinery_costs", "labor_costs", "other_costs")


def run_economic_simulation(params: EconomicParameters) -> dict:
    """
    Run the complete economic simulation for validated parameters.

    Returns:
        Dict with cost, revenue, margin, profitability, break-even and
        sensitivity metrics (see module docstring).
    """
    total_cost = calculate_total_cost(params)
    production_kg = params.production_kg
    price_per_kg = params.price_per_kg
    area = params.area_hectares

    revenue = calculate_revenue(production_kg, price_per_kg)
    margin = revenue - total_cost
    cost_per_kg = _safe_div(total_cost, production_kg)

    break_even = calculate_break_even(total_cost, price_per_kg, production_kg)
    sensitivity = perform_price_sensitivity_analysis(
        total_cost=total_cost,
        production_kg=production_kg,
        base_price=price_per_kg,
        area_hectares=area,
    )

    results = {
        # Costs
        "total_cost": total_cost,
        "cost_per_kg": cost_per_kg,
        "cost_per_ha": _safe_div(total_cost, area),
        "inputs_cost": params.input_costs,
        "machinery_cost": params.machinery_costs,
        "labor_cost": params.labor_costs,
        "other_costs": params.other_costs,

        # Revenue & margin
        "revenue": revenue,
        "revenue_per_ha": _safe_div(revenue, area),
        "margin": margin,
        "margin_per_ha": _safe_div(margin, area),
        "margin_percent": calculate_margin_percent(margin, revenue),

        # Profitability
        "roi_percent": calculate_roi(margin, total_cost),
        "profit_per_kg": price_per_kg - cost_per_kg if cost_per_kg > 0 else 0.0,

        # Break-even
        "break_even_kg": break_even["break_even_kg"],
        "break_even_revenue": break_even["break_even_revenue"],
        "safety_margin_percent": break_even["safety_margin_percent"],

        "sensitivity_analysis": sensitivity,

        # Production
        "production_kg": production_kg,
        "kg_per_ha": _safe_div(production_kg, area),
        "area_hectares": area,
        "price_per_kg": price_per_kg,
    }
    results["profitability"] = evaluate_profitability(results)
    return results


# ---------------------------------------------------------------------------
# BUILDING BLOCKS
# ---------------------------------------------------------------------------

def calculate_total_cost(params) -> float:
    """Sum of the named cost components. Missing components count as 0."""
    return sum(float(getattr(params, name, 0.0) or 0.0) for name in COST_COMPONENTS)


def calculate_revenue(production_kg: float, price_per_kg: float) -> float:
    return production_kg * price_per_kg


def calculate_margin_percent(margin: float, revenue: float) -> float:
    if revenue <= 0:
        return 0.0
    return margin / revenue * 100


def calculate_roi(margin: float, total_cost: float) -> float:
    if total_cost <= 0:
        return 0.0
    return margin / total_cost * 100


def calculate_break_even(
    total_cost: float,
    price_per_kg: float,
    production_kg: float = 0.0,
) -> dict:
    """
    Production volume needed to cover total cost.

    safety_margin_percent is the share of production above break-even
    (0 when production does not exceed it, −100 when price ≤ 0).
    """
    if price_per_kg <= 0:
        return {
            "break_even_kg": math.inf,
            "break_even_revenue": math.inf,
            "safety_margin_percent": -100.0,
        }

    break_even_kg = total_cost / price_per_kg
    safety_margin = 0.0
    if production_kg > break_even_kg:
        safety_margin = (production_kg - break_even_kg) / production_kg * 100

    return {
        "break_even_kg": break_even_kg,
        "break_even_revenue": break_even_kg * price_per_kg,
        "safety_margin_percent": safety_margin,
    }


# ---------------------------------------------------------------------------
# SENSITIVITY ANALYSIS
# ---------------------------------------------------------------------------

def perform_price_sensitivity_analysis(
    total_cost: float,
    production_kg: float,
    base_price: float,
    area_hectares: float,
) -> dict:
    """
    Evaluate margin, revenue and ROI at each price variation in
    PRICE_VARIATIONS. Each point is tagged is_profitable = margin > 0.
    """
    points = []
    for variation in PRICE_VARIATIONS:
        price = base_price * (1 + variation)
        revenue = calculate_revenue(production_kg, price)
        margin = revenue - total_cost
        points.append({
            "price_variation_percent": round(variation * 100, 6),
            "price_per_kg": price,
            "revenue": revenue,
            "margin": margin,
            "margin_per_ha": _safe_div(margin, area_hectares),
            "roi_percent": calculate_roi(margin, total_cost),
            "is_profitable": margin > 0,
        })

    margins = [p["margin"] for p in points]
    max_margin = max(margins)
    min_margin = min(margins)

    return {
        "scenarios": points,
        "max_margin": max_margin,
        "min_margin": min_margin,
        "margin_range": max_margin - min_margin,
        "base_price": base_price,
        "price_elasticity": calculate_price_elasticity(points),
    }


def calculate_price_elasticity(points: list[dict]) -> float:
    """
    Relative margin change divided by relative price change between the
    −10% and +10% points. Returns 0 when either point is missing or the
    ratio is undefined.
    """
    minus = _find_point(points, -10.0)
    plus = _find_point(points, 10.0)
    if minus is None or plus is None:
        return 0.0
    if minus["price_per_kg"] == 0 or minus["margin"] == 0:
        return 0.0

    price_change = (plus["price_per_kg"] - minus["price_per_kg"]) / minus["price_per_kg"]
    if price_change == 0:
        return 0.0
    margin_change = (plus["margin"] - minus["margin"]) / minus["margin"]
    return margin_change / price_change


def _find_point(points: list[dict], variation_percent: float) -> Optional[dict]:
    for point in points:
        if abs(point["price_variation_percent"] - variation_percent) < 0.1:
            return point
    return None


# ---------------------------------------------------------------------------
# PROFITABILITY ASSESSMENT
# ---------------------------------------------------------------------------

def evaluate_profitability(results: dict) -> dict:
    """
    Qualitative assessment of an economic result: profitability level plus
    the weak points found and what to do about them.
    """
    roi = results["roi_percent"]
    if roi > 50:
        level = "EXCELLENT"
    elif roi > 25:
        level = "GOOD"
    elif roi > 10:
        level = "FAIR"
    elif roi > 0:
        level = "POOR"
    else:
        level = "NEGATIVE"

    risks = []
    recommendations = []

    if results["margin"] < 0:
        risks.append("Negative margin")
        recommendations.append("Reduce costs or raise the selling price")
    if roi < 10:
        risks.append("Low ROI (< 10%)")
        recommendations.append("Review cost optimisation opportunities")
    if results["break_even_kg"] > results["production_kg"]:
        risks.append("Production does not cover costs")
        recommendations.append("Increase production or reduce investment")
    if results["cost_per_kg"] > results["price_per_kg"]:
        risks.append("Cost per kg above selling price")
        recommendations.append("Not viable under these conditions")
    if results["margin_percent"] < 20:
        risks.append("Thin margin (< 20%)")
        recommendations.append("Little room for error or price swings")

    return {
        "is_profitable": results["margin"] > 0,
        "profitability_level": level,
        "risks": risks,
        "recommendations": recommendations,
    }


def _safe_div(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator
