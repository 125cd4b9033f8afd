import logging

import pytest

from farm_simulator import FarmSimulation


@pytest.fixture(scope="session")
def simulation():
    """The default dataset; generation is deterministic, so it can be shared."""
    return FarmSimulation(logger=logging.getLogger("test"))


@pytest.fixture
def small_simulation():
    """A coarse grid over the default box with its own sample log."""
    return FarmSimulation({"grid_rows": 8, "grid_cols": 10, "field_count": 6})


@pytest.fixture
def toy_simulation():
    """2x2 grid over a tiny box, every layer seeded with 1."""
    return FarmSimulation({
        "bbox": [0.0, 0.0, 0.002, 0.002],
        "grid_rows": 2,
        "grid_cols": 2,
        "layer_seeds": {"acidity": 1, "nitrogen": 1, "stoniness": 1, "weeds": 1},
        "field_count": 3,
    })
