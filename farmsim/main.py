"""
FarmSim API — application entry point

Wires the scenario engine's routers into one FastAPI app:

    /api/scenarios     scenario CRUD, execute, convert, variants
    /api/comparisons   weighted ranking of executed scenarios
    /api/alerts        predictive alerts raised by executions
    /api/projections   planning projections scenarios start from / end in
    /api/reports       lot and decision summaries
    /api/config        risk thresholds and comparison weights in effect

Environment:
    FARMSIM_LOG_LEVEL      root log level (default INFO)
    FARMSIM_CORS_ORIGINS   comma-separated allowed origins
    DATABASE_URL           see database.py; FARMSIM_* thresholds see config.py

Usage:
    python -m uvicorn farmsim.main:app --host 127.0.0.1 --port 8050
"""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import ComparisonWeights, RiskThresholds, get_risk_thresholds
from .database import init_db
from .routers import scenarios, comparisons, alerts, projections, reports

logging.basicConfig(
    level=os.environ.get("FARMSIM_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    init_db()
    yield


app = FastAPI(
    title="FarmSim Scenario Simulation API",
    description=(
        "REST API for farm scenario simulation. "
        "Supports economic, livestock, pasture and integral simulations, "
        "risk identification, predictive alerts, variant generation "
        "and scenario comparison."
    ),
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get(
        "FARMSIM_CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount all routers
app.include_router(scenarios.router)    # /api/scenarios (CRUD + execute/convert/variants)
app.include_router(comparisons.router)  # /api/comparisons
app.include_router(alerts.router)       # /api/alerts
app.include_router(projections.router)  # /api/projections
app.include_router(reports.router)      # /api/reports


@app.get("/")
def root():
    """API information endpoint."""
    return {
        "name": "FarmSim API",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
        "endpoints": {
            "scenarios": "/api/scenarios",
            "execute": "/api/scenarios/{scenario_id}/execute",
            "variants": "/api/scenarios/{scenario_id}/variants",
            "comparisons": "/api/comparisons",
            "alerts": "/api/alerts",
            "projections": "/api/projections",
            "reports": "/api/reports/lot/{lot_id}",
            "config": "/api/config",
        },
    }


@app.get("/health")
def health_check():
    """Simple health check for monitoring."""
    return {"status": "healthy"}


@app.get("/api/config")
def engine_config(thresholds: RiskThresholds = Depends(get_risk_thresholds)):
    """Risk thresholds (after FARMSIM_* overrides) and the default comparison weights."""
    return {
        "risk_thresholds": thresholds.model_dump(),
        "comparison_weights": ComparisonWeights().model_dump(),
    }
