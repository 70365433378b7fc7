"""
Shared fixtures for the shade-evo test suite.
"""

import pytest

from shade_evo.core.fitness import Objective, SingleObjective
from shade_evo.core.parameters import ContinuousParameter, DiscreteParameter


class RecordingFitness:
    """
    Async fitness function that records every design it is called with.

    Args:
        metrics_fn: Maps a design to the metrics dict to return
    """

    def __init__(self, metrics_fn):
        self.metrics_fn = metrics_fn
        self.calls = []

    async def __call__(self, design):
        self.calls.append(dict(design))
        return self.metrics_fn(design)


@pytest.fixture
def depth_parameter():
    """Continuous overhang depth, 0.1-2.0 m in 0.1 m steps."""
    return ContinuousParameter("depth", 0.1, 2.0, 0.1)


@pytest.fixture
def overhang_parameters():
    """Two continuous overhang parameters."""
    return [
        ContinuousParameter("depth", 0.1, 1.5, 0.1),
        ContinuousParameter("dist-above", 0.0, 0.5, 0.05),
    ]


@pytest.fixture
def mixed_parameters():
    """One continuous and one discrete parameter."""
    return [
        ContinuousParameter("depth", 0.1, 2.0, 0.1),
        DiscreteParameter("orientation", ("horizontal", "vertical", "tilted")),
    ]


@pytest.fixture
def daylight_objectives():
    """Maximize sDA, minimize ASE."""
    return [Objective("sda", "maximize"), Objective("ase", "minimize")]


@pytest.fixture
def depth_objective():
    return SingleObjective(metric="fitness", direction="maximize")


def daylight_metrics(design):
    """Synthetic trade-off: deeper overhangs lower both sDA and ASE."""
    depth = design["depth"]
    above = design.get("dist-above", 0.0)
    return {
        "sda": round(90.0 - 20.0 * depth - 10.0 * above, 6),
        "ase": round(30.0 / (1.0 + 3.0 * depth) + 5.0 * above, 6),
    }


@pytest.fixture
def recording_fitness():
    """Factory for RecordingFitness instances."""
    return RecordingFitness


@pytest.fixture
def daylight_fitness():
    return RecordingFitness(daylight_metrics)
