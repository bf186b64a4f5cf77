"""Seed the database with a demo farm: five scenarios on two lots, executed, plus a projection."""

from sqlalchemy.orm import Session

from .database import init_db, session_scope
from . import crud, schemas
from .engines.scenario_engine import execute_scenario

DEMO_FIRM_ID = 1

SCENARIOS = [
    {"name": "Soybean - first crop", "lot_id": 1, "simulation_type": "ECONOMIC",
     "input_parameters": {"input_costs": 42000, "machinery_costs": 18000, "labor_costs": 9000,
                          "production_kg": 120000, "price_per_kg": 0.75, "area_hectares": 40}},
    {"name": "Maize - late sowing", "lot_id": 1, "simulation_type": "ECONOMIC",
     "input_parameters": {"input_costs": 55000, "machinery_costs": 21000, "labor_costs": 10000,
                          "production_kg": 280000, "price_per_kg": 0.28, "area_hectares": 40}},
    {"name": "Steer fattening", "lot_id": 2, "simulation_type": "PRODUCTION",
     "input_parameters": {"animal_count": 80, "initial_weight_kg": 220, "daily_gain_kg": 0.7,
                          "duration_days": 200, "price_per_kg": 2.1,
                          "expected_mortality_percent": 2, "area_hectares": 60}},
    {"name": "Winter stocking", "lot_id": 2, "simulation_type": "LIVESTOCK_LOAD",
     "input_parameters": {"animal_count": 120, "avg_weight_kg": 380, "area_hectares": 90,
                          "daily_gain_kg": 0.4, "duration_days": 120, "price_per_kg": 2.1}},
    {"name": "Rotational grazing", "lot_id": 2, "simulation_type": "PASTURE_MANAGEMENT",
     "input_parameters": {"area_hectares": 90, "rotation_days": 7, "rest_days": 45,
                          "remanent_kg_ha": 1200, "initial_available_kg_ha": 3200}},
]

PROJECTION = {
    "projection_type": "AGRICULTURAL", "firm_id": DEMO_FIRM_ID, "lot_id": 1,
    "crop": "Wheat", "work_type": "Sowing", "hectares": 40,
    "estimated_inputs_cost": 30000, "estimated_machinery_cost": 15000,
    "estimated_labor_cost": 8000, "estimated_total_cost": 53000,
}

def seed(db: Session) -> int:
    """Create and execute the demo scenarios. Returns the number of scenarios created."""
    # Check if already seeded
    if crud.list_scenarios(db, firm_id=DEMO_FIRM_ID, limit=1):
        print("Database already seeded. Skipping.")
        return 0

    print(f"Seeding database with {len(SCENARIOS)} scenarios...")

    for scenario_data in SCENARIOS:
        scenario = crud.create_scenario(
            db, schemas.ScenarioCreate(firm_id=DEMO_FIRM_ID, **scenario_data), "seed"
        )
        scenario = execute_scenario(db, scenario.id, executed_by="seed")
        results = scenario.results
        print(f"  {scenario.name} (ID={scenario.id}, {scenario.simulation_type}): "
              f"risk {results['risk_level']}, {len(results['risk_factors'])} factor(s)")

    projection = crud.create_projection(db, schemas.ProjectionCreate(**PROJECTION))
    print(f"  Planning projection: {projection.crop} on lot {projection.lot_id} (ID={projection.id})")

    print("\nSeeding complete!")
    return len(SCENARIOS)


if __name__ == "__main__":
    init_db()
    with session_scope() as session:
        seed(session)
