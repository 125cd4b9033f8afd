# farm_simulator/__init__.py

# This file makes the 'farm_simulator' directory a Python package.
# It also defines the public API of the package.

from .errors import InvalidCoordinate, InvalidLayer, SimulationError
from .payloads import parse_probe_request
from .simulation import FarmSimulation

__all__ = [
    "FarmSimulation",
    "parse_probe_request",
    "SimulationError",
    "InvalidLayer",
    "InvalidCoordinate",
]
