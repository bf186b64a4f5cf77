"""
Predictive Alert Router — /api/alerts

Alerts are created by scenario execution only; this router reads them.

Endpoints:
    GET /api/alerts        — List alerts with optional filters
    GET /api/alerts/{id}   — Get a single alert
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..models import AlertStatus, Severity
from ..schemas import AlertResponse

router = APIRouter(prefix="/api/alerts", tags=["Alerts"])


@router.get("", response_model=list[AlertResponse])
def list_alerts(
    firm_id: Optional[int] = Query(None),
    scenario_id: Optional[int] = Query(None),
    lot_id: Optional[int] = Query(None),
    status: Optional[AlertStatus] = Query(None),
    severity: Optional[Severity] = Query(None),
    db: Session = Depends(get_db),
):
    """List alerts, earliest projected date first."""
    return crud.list_alerts(
        db,
        firm_id=firm_id,
        scenario_id=scenario_id,
        lot_id=lot_id,
        status=status.value if status else None,
        severity=severity.value if severity else None,
    )


@router.get("/{alert_id}", response_model=AlertResponse)
def get_alert(alert_id: int, db: Session = Depends(get_db)):
    alert = crud.get_alert(db, alert_id)
    if not alert:
        raise HTTPException(status_code=404, detail=f"Alert {alert_id} not found")
    return alert
