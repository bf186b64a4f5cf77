"""
FarmSim Backend Package

FastAPI-based backend for farm scenario simulation and decision support.
Provides REST API endpoints for scenario management, simulation execution,
what-if variants, risk alerts, scenario comparison and reports.
"""
