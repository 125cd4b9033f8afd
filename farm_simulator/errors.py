# farm_simulator/errors.py

"""Exceptions raised across the simulator's public surface."""


class SimulationError(Exception):
    """Base class for all errors the simulator reports to its callers."""


class InvalidLayer(SimulationError, ValueError):
    """A layer name outside the fixed set was requested."""

    def __init__(self, layer, allowed):
        self.layer = layer
        self.allowed = tuple(allowed)
        super().__init__(f"invalid layer '{layer}' (expected one of: {', '.join(self.allowed)})")


class InvalidCoordinate(SimulationError, ValueError):
    """A probe request did not carry a usable lat/lng pair."""
