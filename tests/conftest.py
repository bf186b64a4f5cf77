"""Shared test fixtures for FarmSim."""

import sys
import os
import pytest
from sqlalchemy.orm import sessionmaker

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from farmsim.database import create_db_engine, init_db
from farmsim import crud, models, schemas


# Reference economic inputs: cost 5000, revenue 6000, margin 1000
ECONOMIC_INPUTS = {
    "input_costs": 3000,
    "machinery_costs": 1000,
    "labor_costs": 1000,
    "production_kg": 2000,
    "price_per_kg": 3.0,
    "area_hectares": 10,
}

# Revenue 2000 against 3000 of cost: margin -1000
LOSS_INPUTS = {
    "input_costs": 2000,
    "machinery_costs": 500,
    "labor_costs": 500,
    "production_kg": 1000,
    "price_per_kg": 2.0,
    "area_hectares": 5,
}

# 100 animals × 450 kg on 100 ha = 450 kg/ha against 400 kg/ha capacity
LIVESTOCK_INPUTS = {
    "animal_count": 100,
    "avg_weight_kg": 450,
    "area_hectares": 100,
    "daily_gain_kg": 0.6,
    "duration_days": 150,
    "price_per_kg": 2.5,
}


@pytest.fixture
def db_session():
    """Create an in-memory SQLite database session for testing."""
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


def _make_scenario(db_session, name, simulation_type, inputs, lot_id=7):
    data = schemas.ScenarioCreate(
        firm_id=1,
        premise_id=3,
        lot_id=lot_id,
        name=name,
        description=f"{name} test scenario",
        simulation_type=simulation_type,
        input_parameters=dict(inputs),
    )
    return crud.create_scenario(db_session, data, current_user="tester")


@pytest.fixture
def economic_scenario(db_session):
    """DRAFT economic scenario with the reference inputs."""
    return _make_scenario(
        db_session, "Soybean plan", models.SimulationType.ECONOMIC, ECONOMIC_INPUTS
    )


@pytest.fixture
def loss_scenario(db_session):
    """DRAFT economic scenario with a negative margin."""
    return _make_scenario(
        db_session, "Loss plan", models.SimulationType.ECONOMIC, LOSS_INPUTS
    )


@pytest.fixture
def livestock_scenario(db_session):
    """DRAFT stocking-load scenario above carrying capacity."""
    return _make_scenario(
        db_session, "Winter grazing", models.SimulationType.LIVESTOCK_LOAD, LIVESTOCK_INPUTS
    )


@pytest.fixture
def agricultural_projection(db_session):
    """Agricultural planning projection to seed scenarios from."""
    data = schemas.ProjectionCreate(
        projection_type=models.ProjectionType.AGRICULTURAL,
        firm_id=1,
        premise_id=3,
        lot_id=7,
        crop="Maize",
        hectares=40,
        estimated_inputs_cost=8000,
        estimated_machinery_cost=3000,
        estimated_labor_cost=2000,
        estimated_total_cost=13000,
    )
    return crud.create_projection(db_session, data)
