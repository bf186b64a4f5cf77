"""
FarmSim — Scenario Comparison & Scoring Engine

Ranks scenarios by a 0-10 composite of three normalized scores:

    margin score  — bucketed by margin % of revenue (0 if revenue ≤ 0)
    ROI score     — bucketed by ROI %
    risk score    — 10 − 2 per risk factor (floor 2), adjusted by risk level

    score = min(10, w_margin × margin + w_roi × roi + w_risk × risk)

Default weights are margin 0.4, ROI 0.3, risk 0.3. Weights are used as
given; a set that does not sum to 1.0 is logged, not renormalized.
Ranking is a stable descending sort, so ties keep their input order.
Scenarios without results score 0.
"""

import logging
import math
from typing import Optional

from sqlalchemy.orm import Session

from .. import crud
from ..config import ComparisonWeights
from ..models import ScenarioComparison, RiskLevel, Severity
from .errors import ScenarioNotFoundError

logger = logging.getLogger("farmsim.comparison")

# Bucket thresholds: (lower bound, exclusive) → score, checked top-down
MARGIN_BUCKETS = [(50, 10), (40, 9), (30, 8), (20, 7), (10, 6), (0, 4), (-10, 2)]
ROI_BUCKETS = [(100, 10), (50, 9), (25, 8), (10, 7), (5, 5), (0, 3), (-5, 1)]

NEUTRAL_RISK_SCORE = 5
RISK_LEVEL_ADJUSTMENT = {
    RiskLevel.LOW.value: 2,
    RiskLevel.HIGH.value: -2,
    Severity.CRITICAL.value: -4,
}


# =========================================================================
# NORMALIZATION
# =========================================================================

def _bucket(value: float, buckets: list[tuple[float, int]]) -> int:
    for lower, score in buckets:
        if value > lower:
            return score
    return 0


def margin_score(margin: Optional[float], revenue: Optional[float]) -> int:
    """0-10 score from margin as a percentage of revenue; 0 when either is missing."""
    if margin is None or not revenue or revenue <= 0:
        return 0
    return _bucket(margin / revenue * 100, MARGIN_BUCKETS)


def roi_score(roi_percent: Optional[float]) -> int:
    """0-10 score from ROI %; 0 when ROI is missing."""
    if roi_percent is None:
        return 0
    return _bucket(roi_percent, ROI_BUCKETS)


def risk_score(results: Optional[dict]) -> int:
    """
    0-10 score where fewer risks score higher.

    Scenarios without results score 0. Otherwise the score starts at
    10 − 2 × factor count (2 for four or more, 5 when the results carry no
    risk assessment) and is then shifted by the risk level.
    """
    if not results:
        return 0

    score = NEUTRAL_RISK_SCORE
    factors = results.get("risk_factors")
    if isinstance(factors, list):
        score = max(2, 10 - 2 * len(factors))

    score += RISK_LEVEL_ADJUSTMENT.get(results.get("risk_level"), 0)
    return min(10, max(0, score))


def _revenue(results: dict) -> float:
    revenue = results.get("revenue") or results.get("estimated_revenue")
    if revenue:
        return revenue
    produced = results.get("total_kg_produced") or 0
    return produced * (results.get("price_per_kg") or 0)


def scenario_scores(results: Optional[dict], weights: ComparisonWeights) -> dict:
    """Per-criterion scores and the weighted composite for one scenario."""
    if not results:
        return {"margin_score": 0, "roi_score": 0, "risk_score": 0, "score": 0.0}

    m = margin_score(results.get("margin"), _revenue(results))
    r = roi_score(results.get("roi_percent"))
    k = risk_score(results)
    total = m * weights.margin + r * weights.roi + k * weights.risk
    return {
        "margin_score": m,
        "roi_score": r,
        "risk_score": k,
        "score": min(10.0, total),
    }


# =========================================================================
# COMPARISON
# =========================================================================

def _record(scenario) -> dict:
    """Uniform view of a Scenario row or an equivalent dict."""
    if isinstance(scenario, dict):
        return {
            "id": scenario.get("id"),
            "name": scenario.get("name", ""),
            "scenario_type": scenario.get("scenario_type"),
            "results": scenario.get("results"),
        }
    return {
        "id": scenario.id,
        "name": scenario.name,
        "scenario_type": scenario.scenario_type,
        "results": scenario.results,
    }


def compare_scenarios(scenarios: list, weights: Optional[ComparisonWeights] = None) -> dict:
    """
    Score and rank scenarios.

    Args:
        scenarios: Scenario rows (or dicts with id, name, scenario_type, results)
        weights: Comparison weights (defaults: margin 0.4, ROI 0.3, risk 0.3)

    Returns:
        Dict with the ranking, winner, runner-up and analysis
        (strengths, weaknesses, recommendation, per-criterion extremes,
        detailed ranking).
    """
    if not scenarios:
        raise ValueError("At least one scenario is required for a comparison")

    weights = weights or ComparisonWeights()
    if not math.isclose(weights.total, 1.0, abs_tol=1e-9):
        logger.warning(
            f"Comparison weights sum to {weights.total:.4f}, not 1.0; using them as given"
        )

    records = [_record(s) for s in scenarios]
    scored = []
    for record in records:
        results = record["results"] or {}
        scores = scenario_scores(record["results"], weights)
        scored.append({
            "scenario_id": record["id"],
            "name": record["name"],
            "scenario_type": record["scenario_type"],
            "comparison_score": scores["score"],
            "margin_score": scores["margin_score"],
            "roi_score": scores["roi_score"],
            "risk_score": scores["risk_score"],
            "metrics": {
                "margin": results.get("margin", 0),
                "margin_percent": results.get("margin_percent", 0),
                "roi_percent": results.get("roi_percent", 0),
                "cost_per_kg": results.get("cost_per_kg", 0),
                "total_cost": results.get("total_cost", 0),
                "revenue": _revenue(results) if results else 0,
                "production_kg": (
                    results.get("total_kg_produced") or results.get("production_kg") or 0
                ),
                "risk_factors_count": len(results.get("risk_factors") or []),
                "risk_level": results.get("risk_level"),
            },
            "results": results,
        })

    # sorted() is stable: equal scores keep input order
    ranked = sorted(scored, key=lambda s: s["comparison_score"], reverse=True)
    winner = ranked[0]
    runner_up = ranked[1] if len(ranked) > 1 else None

    return {
        "total_scenarios": len(ranked),
        "scenario_ids": [r["id"] for r in records],
        "criteria": {"weights": weights.model_dump()},
        "ranking": [_public(s) for s in ranked],
        "winner": _public(winner),
        "winner_score": winner["comparison_score"],
        "runner_up": _public(runner_up) if runner_up else None,
        "analysis": {
            "winner": {
                "scenario_id": winner["scenario_id"],
                "name": winner["name"],
                "scenario_type": winner["scenario_type"],
                "score": winner["comparison_score"],
                "strengths": scenario_strengths(winner["results"]),
                "weaknesses": scenario_weaknesses(winner["results"]),
                "recommendation": recommendation(winner["name"], winner["results"]),
            },
            "comparison_summary": comparison_summary(ranked),
            "detailed_ranking": [
                {
                    "rank": idx + 1,
                    "scenario_id": s["scenario_id"],
                    "name": s["name"],
                    "scenario_type": s["scenario_type"],
                    "score": round(s["comparison_score"], 2),
                    "margin": round(s["metrics"]["margin"] or 0, 2),
                    "roi_percent": round(s["metrics"]["roi_percent"] or 0, 1),
                    "risk_factors_count": s["metrics"]["risk_factors_count"],
                }
                for idx, s in enumerate(ranked)
            ],
        },
    }


def _public(entry: dict) -> dict:
    return {k: v for k, v in entry.items() if k != "results"}


def _extreme(ranked: list[dict], key, prefer_lower: bool = False) -> dict:
    """First scenario with the strictly best value of key; missing values never win."""
    best = ranked[0]
    best_value = key(best)
    for entry in ranked[1:]:
        value = key(entry)
        if value is None:
            continue
        if best_value is None or (value < best_value if prefer_lower else value > best_value):
            best, best_value = entry, value
    return {"scenario_id": best["scenario_id"], "name": best["name"], "value": best_value}


def comparison_summary(ranked: list[dict]) -> dict:
    return {
        "highest_margin": _extreme(ranked, lambda s: s["results"].get("margin")),
        "highest_roi": _extreme(ranked, lambda s: s["results"].get("roi_percent")),
        "lowest_risk": _extreme(ranked, lambda s: s["risk_score"]),
        "lowest_cost": _extreme(
            ranked, lambda s: s["results"].get("total_cost") or None, prefer_lower=True
        ),
    }


# =========================================================================
# ANALYSIS TEXT
# =========================================================================

def scenario_strengths(results: dict) -> list[str]:
    strengths = []
    margin = results.get("margin") or 0
    roi = results.get("roi_percent") or 0
    margin_pct = results.get("margin_percent") or 0
    factors = results.get("risk_factors")

    if margin > 0:
        strengths.append(f"Positive margin of ${margin:,.2f}")
    if roi > 25:
        strengths.append(f"Excellent ROI: {roi:.1f}%")
    if isinstance(factors, list) and len(factors) <= 1:
        strengths.append("Low risk")
    if margin_pct > 30:
        strengths.append(f"High margin percentage: {margin_pct:.1f}%")

    return strengths or ["Viable scenario"]


def scenario_weaknesses(results: dict) -> list[str]:
    weaknesses = []
    margin = results.get("margin") or 0
    roi = results.get("roi_percent") or 0
    factors = results.get("risk_factors") or []
    cost_per_kg = results.get("cost_per_kg") or 0

    if margin < 0:
        weaknesses.append(f"Negative margin: ${margin:,.2f}")
    elif margin < 10_000:
        weaknesses.append("Very thin margin")
    if 0 < roi < 10:
        weaknesses.append(f"Low ROI: {roi:.1f}%")
    if len(factors) > 2:
        weaknesses.append(f"Multiple risks identified: {len(factors)}")
    if cost_per_kg > 12:
        weaknesses.append(f"High cost per kg: ${cost_per_kg:.2f}")

    return weaknesses


def recommendation(name: str, results: dict) -> str:
    """Free-text verdict for the winning scenario; the first matching rule applies."""
    margin = results.get("margin") or 0
    roi = results.get("roi_percent") or 0
    factors = results.get("risk_factors") or []

    if margin < 0:
        return f'Not recommended: "{name}" has a negative margin and needs urgent review.'
    if roi < 5:
        return f'Low return: "{name}" has a very low ROI ({roi:.1f}%). Consider alternatives.'
    if len(factors) > 3:
        return f'High risk, proceed with caution: "{name}" has multiple risk factors.'
    if margin > 50_000 and roi > 25:
        return (
            f'Highly recommended: "{name}" offers a strong margin (${margin:,.2f}) '
            f"and an excellent ROI ({roi:.1f}%)."
        )
    if margin > 20_000 and roi > 10:
        return (
            f'Recommended: "{name}" is a solid option with a margin of ${margin:,.2f} '
            f"and an ROI of {roi:.1f}%."
        )
    return f'Viable, evaluate against alternatives: "{name}" is an acceptable option.'


# =========================================================================
# DATABASE-BACKED OPERATIONS
# =========================================================================

def compare_scenario_ids(
    db: Session,
    scenario_ids: list[int],
    weights: Optional[ComparisonWeights] = None,
) -> dict:
    """Load scenarios by ID (in the given order) and compare them."""
    scenarios = crud.get_scenarios_by_ids(db, scenario_ids)
    missing = sorted(set(scenario_ids) - {s.id for s in scenarios})
    if missing:
        raise ScenarioNotFoundError(f"Scenarios not found: {missing}")
    return compare_scenarios(scenarios, weights)


def save_comparison(
    db: Session,
    firm_id: int,
    comparison: dict,
    name: str = "Scenario comparison",
    description: Optional[str] = None,
    created_by: Optional[str] = None,
) -> ScenarioComparison:
    """Persist a comparison produced by compare_scenarios()."""
    record = crud.create_comparison(
        db,
        firm_id=firm_id,
        name=name,
        description=description,
        scenario_ids=comparison["scenario_ids"],
        criteria=comparison["criteria"],
        analysis=comparison["analysis"],
        winner_scenario_id=comparison["winner"]["scenario_id"],
        winner_score=comparison["winner_score"],
        created_by=created_by,
    )
    logger.info(f"Saved comparison {record.id} for firm {firm_id} ({len(record.scenario_ids)} scenarios)")
    return record
