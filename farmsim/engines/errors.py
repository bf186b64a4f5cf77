"""
FarmSim — Engine Errors

All engine errors subclass ValueError so callers that only care about
"bad request vs. server error" can keep catching ValueError. Routers map
each subclass to its own HTTP status.
"""


class ScenarioValidationError(ValueError):
    """Input parameters failed validation; nothing was computed."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid input parameters: " + "; ".join(self.errors))


class ScenarioNotFoundError(ValueError):
    """Referenced scenario (or source record) does not exist."""


class InvalidTransitionError(ValueError):
    """Requested status transition is not allowed from the current status."""


class UnknownSimulationTypeError(ValueError):
    """simulation_type has no calculator."""
