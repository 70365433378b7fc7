"""
Selection algorithms for shade-evo: tournament selection and NSGA-II style
non-dominated sorting with crowding distance.
"""

from .tournament import tournament_select, scalar_fitness_key, crowded_comparison_key
from .nsga import (
    dominates,
    fast_non_dominated_sort,
    assign_crowding_distance,
    select_survivors,
    rank_population,
)

__all__ = [
    "tournament_select",
    "scalar_fitness_key",
    "crowded_comparison_key",
    "dominates",
    "fast_non_dominated_sort",
    "assign_crowding_distance",
    "select_survivors",
    "rank_population",
]
