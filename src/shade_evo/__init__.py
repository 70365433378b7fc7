"""
shade-evo: evolutionary design-space optimization for shading devices.

Searches a small parameter space (continuous grids and discrete option sets)
with a single-objective genetic algorithm or an NSGA-II style multi-objective
algorithm, scoring candidates with an external async fitness function.
"""

from .core import (
    ContinuousParameter,
    DiscreteParameter,
    DesignCodec,
    EvaluationResult,
    Individual,
    Population,
    Objective,
    SingleObjective,
    Constraint,
    OptimizationError,
    ConfigurationError,
    EvaluationError,
    CancellationError,
    CheckpointError,
)
from .optimization import (
    GeneticConfig,
    MultiObjectiveConfig,
    GeneticOptimizer,
    MultiObjectiveOptimizer,
    CheckpointManager,
    OptimizationResult,
    RunController,
    create_optimizer,
    load_config,
    load_preset,
)

__version__ = "0.1.0"

__all__ = [
    "ContinuousParameter",
    "DiscreteParameter",
    "DesignCodec",
    "EvaluationResult",
    "Individual",
    "Population",
    "Objective",
    "SingleObjective",
    "Constraint",
    "OptimizationError",
    "ConfigurationError",
    "EvaluationError",
    "CancellationError",
    "CheckpointError",
    "GeneticConfig",
    "MultiObjectiveConfig",
    "GeneticOptimizer",
    "MultiObjectiveOptimizer",
    "CheckpointManager",
    "OptimizationResult",
    "RunController",
    "create_optimizer",
    "load_config",
    "load_preset",
]
