"""
Comparison Router — /api/comparisons

Endpoints:
    POST /api/comparisons        — Score and rank stored scenarios
    POST /api/comparisons/save   — Compare and persist the result
    GET  /api/comparisons        — List saved comparisons
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..schemas import CompareRequest, ComparisonSaveRequest, ComparisonRecordResponse
from ..engines import comparison
from . import engine_http_error

router = APIRouter(prefix="/api/comparisons", tags=["Comparisons"])


@router.post("")
def compare(req: CompareRequest, db: Session = Depends(get_db)):
    """
    Compare scenarios by a weighted margin / ROI / risk score (0-10).

    Weights default to margin 0.4, ROI 0.3, risk 0.3 and are used as given.
    Scenarios that were never executed score 0.
    """
    try:
        return comparison.compare_scenario_ids(
            db, req.scenario_ids, req.criteria.weights if req.criteria else None
        )
    except ValueError as e:
        raise engine_http_error(e)


@router.post("/save", response_model=ComparisonRecordResponse, status_code=201)
def compare_and_save(req: ComparisonSaveRequest, db: Session = Depends(get_db)):
    """Compare scenarios and store the analysis as a named comparison."""
    try:
        result = comparison.compare_scenario_ids(
            db, req.scenario_ids, req.criteria.weights if req.criteria else None
        )
    except ValueError as e:
        raise engine_http_error(e)

    return comparison.save_comparison(
        db,
        firm_id=req.firm_id,
        comparison=result,
        name=req.name,
        description=req.description,
        created_by=req.created_by,
    )


@router.get("", response_model=list[ComparisonRecordResponse])
def list_comparisons(
    firm_id: Optional[int] = Query(None, description="Filter by firm"),
    db: Session = Depends(get_db),
):
    """List saved comparisons, newest first."""
    return crud.list_comparisons(db, firm_id=firm_id)
