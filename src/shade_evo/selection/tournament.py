"""
Tournament selection for shade-evo.

Both optimizers pick parents the same way: draw ``k`` distinct individuals
uniformly at random and keep the best one. Only the comparison differs.
"""

import math
from typing import Callable, Sequence, Tuple

import numpy as np

from ..core.individual import Individual
from ..core.population import fitness_sort_key


def scalar_fitness_key(individual: Individual) -> float:
    """Higher is better; unevaluated and failed individuals lose every tournament."""
    return fitness_sort_key(individual)


def crowded_comparison_key(individual: Individual) -> Tuple[float, float]:
    """
    Higher is better: lower rank first, then larger crowding distance.
    """
    rank = individual.rank if individual.rank is not None else math.inf
    crowding = individual.crowding_distance if individual.crowding_distance is not None else 0.0
    return (-rank, crowding)


def tournament_select(
    individuals: Sequence[Individual],
    rng: np.random.Generator,
    k: int = 2,
    key: Callable[[Individual], object] = scalar_fitness_key,
) -> Individual:
    """
    Select one individual by tournament.

    Args:
        individuals: Candidates to choose from
        rng: Random generator
        k: Tournament size, capped at the number of candidates
        key: Comparison key, higher wins; the first sampled wins ties

    Returns:
        The tournament winner
    """
    if not individuals:
        raise ValueError("Cannot select from an empty population")

    k = max(1, min(k, len(individuals)))
    indices = rng.choice(len(individuals), size=k, replace=False)

    best = individuals[int(indices[0])]
    for idx in indices[1:]:
        candidate = individuals[int(idx)]
        if key(candidate) > key(best):
            best = candidate
    return best
