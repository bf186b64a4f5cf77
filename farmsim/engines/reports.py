"""
FarmSim — Scenario Reports

Read-only summaries built from stored scenarios and decisions:
    - Lot report: executed scenarios of a lot, best / average margin and ROI,
      risk counts, per scenario-type averages and margin percentiles
    - Decision report: outcome counts, effectiveness rate, per-type breakdown
      and recorded lessons
"""

from typing import Optional

import numpy as np
import pandas as pd
from sqlalchemy.orm import Session

from .. import crud
from ..models import ScenarioStatus, OutcomeEvaluation


def _scenario_frame(scenarios) -> pd.DataFrame:
    rows = []
    for s in scenarios:
        results = s.results or {}
        rows.append({
            "id": s.id,
            "name": s.name,
            "scenario_type": s.scenario_type,
            "simulation_type": s.simulation_type,
            "margin": results.get("margin"),
            "margin_percent": results.get("margin_percent"),
            "roi_percent": results.get("roi_percent"),
            "total_cost": results.get("total_cost"),
            "revenue": results.get("revenue"),
            "production_kg": results.get("total_kg_produced") or results.get("production_kg"),
            "risk_level": results.get("risk_level"),
            "risk_factors": len(results.get("risk_factors") or []),
            "created_at": s.created_at,
        })
    return pd.DataFrame(rows)


def _clean(value):
    """NaN / numpy scalars → JSON-friendly Python values."""
    if value is None:
        return None
    if isinstance(value, (np.floating, float)):
        return None if np.isnan(value) else round(float(value), 2)
    if isinstance(value, np.integer):
        return int(value)
    return value


def lot_scenarios_report(db: Session, lot_id: int) -> Optional[dict]:
    """
    Summary of the executed scenarios of a lot, newest first.

    Returns None when the lot has no executed scenarios.
    """
    scenarios = crud.list_scenarios(db, lot_id=lot_id, status=ScenarioStatus.EXECUTED.value)
    if not scenarios:
        return None

    df = _scenario_frame(scenarios)
    margin = df["margin"].astype(float).fillna(0.0)
    roi = df["roi_percent"].astype(float).fillna(0.0)

    # idxmax keeps the first (newest) row on ties
    best_margin = df.loc[margin.idxmax()]
    best_roi = df.loc[roi.idxmax()]

    by_type = (
        df.assign(margin=margin, roi_percent=roi)
        .groupby("scenario_type")
        .agg(count=("id", "size"), avg_margin=("margin", "mean"), avg_roi=("roi_percent", "mean"))
    )

    records = [
        {key: _clean(value) for key, value in row.items()}
        for row in df.drop(columns=["created_at"]).to_dict(orient="records")
    ]
    for record, created_at in zip(records, df["created_at"]):
        record["created_at"] = created_at.isoformat() if created_at is not None else None

    return {
        "lot_id": lot_id,
        "total_scenarios": len(df),
        "scenarios": records,
        "summary": {
            "best_margin": {
                "scenario_id": int(best_margin["id"]),
                "name": best_margin["name"],
                "margin": _clean(margin.max()),
            },
            "best_roi": {
                "scenario_id": int(best_roi["id"]),
                "name": best_roi["name"],
                "roi_percent": _clean(roi.max()),
            },
            "avg_margin": _clean(margin.mean()),
            "avg_roi": _clean(roi.mean()),
            "low_risk_count": int((df["risk_level"] == "LOW").sum()),
            "total_risk_factors": int(df["risk_factors"].sum()),
            "margin_percentiles": {
                "p10": _clean(np.percentile(margin, 10)),
                "p50": _clean(np.percentile(margin, 50)),
                "p90": _clean(np.percentile(margin, 90)),
            },
        },
        "by_scenario_type": {
            scenario_type: {
                "count": int(row["count"]),
                "avg_margin": _clean(row["avg_margin"]),
                "avg_roi": _clean(row["avg_roi"]),
            }
            for scenario_type, row in by_type.iterrows()
        },
    }


def decision_summary_report(db: Session, firm_id: int) -> dict:
    """Outcome statistics of the decisions recorded for a firm."""
    decisions = crud.list_decisions(db, firm_id)

    counts = {outcome.value: 0 for outcome in OutcomeEvaluation}
    by_type: dict[str, dict] = {}
    lessons = []

    for d in decisions:
        counts[d.outcome_evaluation] = counts.get(d.outcome_evaluation, 0) + 1

        entry = by_type.setdefault(
            d.decision_type, {"count": 0, "positive": 0, "negative": 0, "neutral": 0}
        )
        entry["count"] += 1
        outcome_key = d.outcome_evaluation.lower()
        if outcome_key in entry:
            entry[outcome_key] += 1

        if d.outcome_evaluation in (OutcomeEvaluation.POSITIVE.value, OutcomeEvaluation.NEGATIVE.value):
            lessons.append({
                "outcome": d.outcome_evaluation,
                "decision": d.decision_description,
                "lesson": d.lessons_learned or "No lessons recorded",
            })

    total = len(decisions)
    positive = counts[OutcomeEvaluation.POSITIVE.value]

    return {
        "firm_id": firm_id,
        "summary": {
            "total_decisions": total,
            "positive_decisions": positive,
            "negative_decisions": counts[OutcomeEvaluation.NEGATIVE.value],
            "neutral_decisions": counts[OutcomeEvaluation.NEUTRAL.value],
            "pending_decisions": counts[OutcomeEvaluation.PENDING.value],
            "effectiveness_rate": round(positive / total * 100, 1) if total else 0.0,
        },
        "by_type": by_type,
        "lessons_learned": lessons,
    }
