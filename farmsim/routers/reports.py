"""
Reports Router — /api/reports

Endpoints:
    GET /api/reports/lot/{lot_id}          — Executed scenarios of a lot, summarized
    GET /api/reports/decisions/{firm_id}   — Decision outcome statistics for a firm
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from ..engines.reports import lot_scenarios_report, decision_summary_report

router = APIRouter(prefix="/api/reports", tags=["Reports"])


@router.get("/lot/{lot_id}")
def lot_report(lot_id: int, db: Session = Depends(get_db)):
    """Best / average margin and ROI, risk counts and per-type averages for a lot."""
    report = lot_scenarios_report(db, lot_id)
    if report is None:
        raise HTTPException(
            status_code=404, detail=f"No executed scenarios for lot {lot_id}"
        )
    return report


@router.get("/decisions/{firm_id}")
def decisions_report(firm_id: int, db: Session = Depends(get_db)):
    """Outcome counts, effectiveness rate and per-type breakdown of a firm's decisions."""
    return decision_summary_report(db, firm_id)
