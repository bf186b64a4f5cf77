"""
FarmSim Engines

Calculators (economic, livestock, agricultural), risk identification,
predictive alerts, the scenario lifecycle engine, variant generation,
comparison scoring and reports. Routers call into these modules.
"""
