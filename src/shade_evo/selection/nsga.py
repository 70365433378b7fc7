"""
Non-dominated sorting and crowding distance for shade-evo (NSGA-II style).

- Dominance: A dominates B iff A is no worse on every objective and strictly
  better on at least one.
- Fast non-dominated sorting partitions a pool into fronts F0, F1, ...
- Crowding distance measures how isolated an individual is within its front;
  the extremes of each objective get infinite distance.
- Survivor selection fills the next generation front by front and truncates
  the overflowing front by descending crowding distance.
"""

import logging
import math
from typing import List, Sequence

from ..core.fitness import MAXIMIZE, Objective
from ..core.individual import Individual

logger = logging.getLogger(__name__)


def dominates(a: Individual, b: Individual, objectives: Sequence[Objective]) -> bool:
    """
    Check whether ``a`` dominates ``b``.

    Args:
        a: First individual (evaluated)
        b: Second individual (evaluated)
        objectives: Objectives with their directions

    Returns:
        True if a is no worse than b everywhere and strictly better somewhere
    """
    strictly_better = False
    for objective in objectives:
        a_val = objective.value(a.metrics)
        b_val = objective.value(b.metrics)

        if objective.direction == MAXIMIZE:
            if a_val < b_val:
                return False
            if a_val > b_val:
                strictly_better = True
        else:
            if a_val > b_val:
                return False
            if a_val < b_val:
                strictly_better = True
    return strictly_better


def fast_non_dominated_sort(
    individuals: Sequence[Individual],
    objectives: Sequence[Objective],
) -> List[List[Individual]]:
    """
    Partition individuals into non-domination fronts and tag their rank.

    Args:
        individuals: Evaluated individuals
        objectives: Objectives with their directions

    Returns:
        List of fronts; fronts[0] is the Pareto front (rank 0). Order within a
        front follows the input order.
    """
    n = len(individuals)
    if n == 0:
        return []

    dominated_by = [[] for _ in range(n)]  # indices each individual dominates
    domination_count = [0] * n

    for i in range(n):
        for j in range(i + 1, n):
            if dominates(individuals[i], individuals[j], objectives):
                dominated_by[i].append(j)
                domination_count[j] += 1
            elif dominates(individuals[j], individuals[i], objectives):
                dominated_by[j].append(i)
                domination_count[i] += 1

    fronts: List[List[int]] = [[i for i in range(n) if domination_count[i] == 0]]
    while True:
        next_front = []
        for i in fronts[-1]:
            for j in dominated_by[i]:
                domination_count[j] -= 1
                if domination_count[j] == 0:
                    next_front.append(j)
        if not next_front:
            break
        fronts.append(sorted(next_front))

    result = []
    for rank, front in enumerate(fronts):
        members = [individuals[i] for i in front]
        for individual in members:
            individual.rank = rank
        result.append(members)
    return result


def assign_crowding_distance(front: List[Individual], objectives: Sequence[Objective]) -> None:
    """
    Compute the crowding distance of every individual in one front.

    For each objective the front is sorted by value; boundary individuals get
    infinity and interior ones accumulate the normalized gap between their
    neighbors. Objectives with a zero or non-finite range add nothing to the
    interior individuals.
    """
    if not front:
        return

    for individual in front:
        individual.crowding_distance = 0.0

    if len(front) <= 2:
        for individual in front:
            individual.crowding_distance = math.inf
        return

    for objective in objectives:
        ordered = sorted(front, key=lambda ind: objective.value(ind.metrics))
        ordered[0].crowding_distance = math.inf
        ordered[-1].crowding_distance = math.inf

        low = objective.value(ordered[0].metrics)
        high = objective.value(ordered[-1].metrics)
        span = high - low
        if span == 0 or not math.isfinite(span):
            continue

        for idx in range(1, len(ordered) - 1):
            gap = objective.value(ordered[idx + 1].metrics) - objective.value(ordered[idx - 1].metrics)
            ordered[idx].crowding_distance += gap / span


def select_survivors(
    pool: Sequence[Individual],
    objectives: Sequence[Objective],
    n: int,
) -> List[Individual]:
    """
    Select the next generation from a combined parent + offspring pool.

    Whole fronts are added in rank order while they fit; the first front that
    would overflow is truncated by descending crowding distance, dropping the
    most crowded individuals first. Every returned individual carries a rank
    and crowding distance.

    Args:
        pool: Evaluated individuals (typically 2N)
        objectives: Objectives with their directions
        n: Number of survivors

    Returns:
        Up to n survivors
    """
    fronts = fast_non_dominated_sort(pool, objectives)

    survivors: List[Individual] = []
    for front in fronts:
        assign_crowding_distance(front, objectives)
        if len(survivors) + len(front) <= n:
            survivors.extend(front)
            continue

        remaining = n - len(survivors)
        if remaining > 0:
            # sorted() is stable: equal distances keep front order
            by_diversity = sorted(front, key=lambda ind: ind.crowding_distance, reverse=True)
            survivors.extend(by_diversity[:remaining])
            logger.debug(
                f"Truncated front of {len(front)} to {remaining} by crowding distance"
            )
        break

    return survivors


def rank_population(individuals: Sequence[Individual], objectives: Sequence[Objective]) -> List[List[Individual]]:
    """Tag rank and crowding distance on every individual; returns the fronts."""
    fronts = fast_non_dominated_sort(individuals, objectives)
    for front in fronts:
        assign_crowding_distance(front, objectives)
    return fronts
