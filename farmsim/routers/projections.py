"""
Planning Projection Router — /api/projections

Planning projections are the records scenarios are seeded from and
converted into.

Endpoints:
    POST /api/projections        — Register a planning projection
    GET  /api/projections/{id}   — Get a planning projection
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..schemas import ProjectionCreate, ProjectionResponse

router = APIRouter(prefix="/api/projections", tags=["Planning Projections"])


@router.post("", response_model=ProjectionResponse, status_code=201)
def create_projection(data: ProjectionCreate, db: Session = Depends(get_db)):
    return crud.create_projection(db, data)


@router.get("/{projection_id}", response_model=ProjectionResponse)
def get_projection(projection_id: int, db: Session = Depends(get_db)):
    projection = crud.get_projection(db, projection_id)
    if not projection:
        raise HTTPException(status_code=404, detail=f"Planning projection {projection_id} not found")
    return projection
