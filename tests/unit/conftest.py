"""
Fixtures for unit tests.
"""

import math

import pytest

from shade_evo.core.individual import EvaluationResult, Individual
from shade_evo.core.population import Population


@pytest.fixture
def sample_individual():
    """Create a sample evaluated individual for testing."""
    return Individual(
        design={"depth": 0.6, "orientation": "horizontal"},
        result=EvaluationResult(metrics={"sda": 72.5, "ase": 8.0}, fitness=72.5),
        origin="offspring",
        generation=3,
    )


@pytest.fixture
def sample_population():
    """Create a sample population of ten evaluated individuals."""
    individuals = []
    for i in range(10):
        fitness = 0.5 + i * 0.05
        individuals.append(Individual(
            design={"depth": round(0.1 * (i + 1), 1)},
            result=EvaluationResult(metrics={"fitness": fitness}, fitness=fitness),
        ))
    return Population(individuals)


@pytest.fixture
def failed_individual():
    """Create an individual whose evaluation failed."""
    return Individual(
        design={"depth": 1.5},
        result=EvaluationResult(metrics={}, fitness=-math.inf, failed=True, error="simulation crashed"),
    )
