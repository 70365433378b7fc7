"""
Utility modules for shade-evo.

This package provides the fitness cache and the per-generation JSON logger.
"""

from .fitness_cache import FitnessCache
from .evolution_logger import EvolutionLogger

__all__ = [
    "FitnessCache",
    "EvolutionLogger",
]
