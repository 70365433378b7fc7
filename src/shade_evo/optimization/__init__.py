"""
Optimization module for shade-evo.

This module contains the two optimizers (single-objective GA and NSGA-II
style multi-objective GA), their configuration, checkpointing, the run
controller and the preset profiles.
"""

from .config import (
    GA_KIND,
    MOGA_KIND,
    OptimizerConfig,
    GeneticConfig,
    MultiObjectiveConfig,
    GenerationHistory,
    load_config,
)
from .checkpoint import OptimizationCheckpoint, CheckpointManager
from .base import BaseOptimizer, OptimizerPhase
from .genetic import GeneticOptimizer
from .moga import MultiObjectiveOptimizer, ParetoFront
from .controller import OptimizationResult, RunController, create_optimizer
from .presets import PRESET_PROFILES, list_presets, load_preset

__all__ = [
    # Configuration
    "GA_KIND",
    "MOGA_KIND",
    "OptimizerConfig",
    "GeneticConfig",
    "MultiObjectiveConfig",
    "GenerationHistory",
    "load_config",

    # Checkpointing
    "OptimizationCheckpoint",
    "CheckpointManager",

    # Optimizers
    "BaseOptimizer",
    "OptimizerPhase",
    "GeneticOptimizer",
    "MultiObjectiveOptimizer",
    "ParetoFront",

    # Running
    "OptimizationResult",
    "RunController",
    "create_optimizer",

    # Presets
    "PRESET_PROFILES",
    "list_presets",
    "load_preset",
]
