"""
Variation operators for shade-evo.
"""

from .crossover import crossover
from .mutation import mutate

__all__ = ["crossover", "mutate"]
