"""
Population management for shade-evo.

This module defines the Population class, an ordered, fixed-size collection
of individuals owned by the active optimizer, with helpers for replacement,
ranking by scalar fitness, statistics and serialization.
"""

import math
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from .individual import Individual


def fitness_sort_key(individual: Individual) -> float:
    """Scalar fitness with unevaluated and failed individuals ranked last."""
    fitness = individual.fitness
    if fitness is None or math.isnan(fitness):
        return -math.inf
    return fitness


class Population:
    """
    Manages a population of individuals for evolutionary optimization.

    Attributes:
        individuals: List of individuals in the population
    """

    def __init__(self, individuals: Optional[List[Individual]] = None):
        """
        Initialize a Population.

        Args:
            individuals: Initial list of individuals (empty if None)
        """
        self.individuals = individuals if individuals is not None else []

    @property
    def size(self) -> int:
        """Get the current population size."""
        return len(self.individuals)

    def is_empty(self) -> bool:
        return len(self.individuals) == 0

    def add(self, individual: Individual) -> None:
        self.individuals.append(individual)

    def extend(self, individuals: List[Individual]) -> None:
        self.individuals.extend(individuals)

    def replace(self, individuals: List[Individual]) -> None:
        """Swap in the next generation in place."""
        self.individuals = list(individuals)

    def get_best(self, n: int = 1) -> List[Individual]:
        """
        Get the n best individuals by scalar fitness.

        Individuals without a finite fitness (unevaluated, failed, or
        penalized to -inf) are never returned.

        Args:
            n: Number of individuals to return

        Returns:
            Up to n individuals sorted by fitness descending
        """
        usable = [i for i in self.individuals if fitness_sort_key(i) > -math.inf]
        # sorted() is stable, so ties keep population order
        return sorted(usable, key=fitness_sort_key, reverse=True)[:n]

    def ranked(self) -> List[Individual]:
        """All individuals sorted by scalar fitness descending, unusable ones last."""
        return sorted(self.individuals, key=fitness_sort_key, reverse=True)

    def get_unevaluated(self) -> List[Individual]:
        return [i for i in self.individuals if not i.is_evaluated()]

    def filter(self, condition: Callable[[Individual], bool]) -> "Population":
        """
        Filter individuals based on a condition.

        Returns:
            New Population sharing the matching individuals
        """
        return Population([i for i in self.individuals if condition(i)])

    def get_feasible(self) -> "Population":
        """Evaluated individuals that neither failed nor violated the constraint."""
        return self.filter(lambda i: i.is_evaluated() and not i.failed and not i.constraint_violated)

    def clone(self) -> "Population":
        return Population([i.clone() for i in self.individuals])

    def statistics(self) -> Dict[str, Any]:
        """
        Compute population statistics.

        Returns:
            Dictionary with size, evaluation counts and fitness summary
        """
        evaluated = [i for i in self.individuals if i.is_evaluated()]
        fitness_scores = [i.fitness for i in evaluated
                          if i.fitness is not None and math.isfinite(i.fitness)]

        return {
            "size": len(self.individuals),
            "evaluated": len(evaluated),
            "failed": sum(1 for i in evaluated if i.failed),
            "constraint_violations": sum(1 for i in evaluated if i.constraint_violated),
            "avg_fitness": float(np.mean(fitness_scores)) if fitness_scores else None,
            "best_fitness": float(np.max(fitness_scores)) if fitness_scores else None,
            "worst_fitness": float(np.min(fitness_scores)) if fitness_scores else None,
        }

    def to_dict(self) -> List[Dict[str, Any]]:
        return [i.to_dict() for i in self.individuals]

    @classmethod
    def from_dict(cls, data: List[Dict[str, Any]]) -> "Population":
        return cls([Individual.from_dict(d) for d in data])

    def __repr__(self) -> str:
        stats = self.statistics()
        return (
            f"Population(size={stats['size']}, "
            f"evaluated={stats['evaluated']}, "
            f"failed={stats['failed']})"
        )

    def __len__(self) -> int:
        return len(self.individuals)

    def __iter__(self):
        return iter(self.individuals)

    def __getitem__(self, index: int) -> Individual:
        return self.individuals[index]
