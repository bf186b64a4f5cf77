"""
FarmSim API Routers

Each module in this package defines a FastAPI APIRouter for a specific
domain of the application (scenarios, comparisons, alerts, projections,
reports). Routers are included in the main FastAPI app in main.py.
"""

from fastapi import HTTPException

from ..engines.errors import (
    ScenarioValidationError, ScenarioNotFoundError, InvalidTransitionError,
    UnknownSimulationTypeError,
)


def engine_http_error(e: ValueError) -> HTTPException:
    """Map an engine error onto the HTTP status the API reports for it."""
    if isinstance(e, ScenarioValidationError):
        return HTTPException(
            status_code=422,
            detail={"detail": str(e), "error_code": "INVALID_PARAMETERS", "errors": e.errors},
        )
    if isinstance(e, ScenarioNotFoundError):
        return HTTPException(status_code=404, detail={"detail": str(e), "error_code": "NOT_FOUND"})
    if isinstance(e, InvalidTransitionError):
        return HTTPException(
            status_code=409, detail={"detail": str(e), "error_code": "INVALID_TRANSITION"}
        )
    if isinstance(e, UnknownSimulationTypeError):
        return HTTPException(
            status_code=400, detail={"detail": str(e), "error_code": "UNKNOWN_SIMULATION_TYPE"}
        )
    return HTTPException(status_code=400, detail={"detail": str(e), "error_code": "BAD_REQUEST"})
