"""
Core data structures for shade-evo: the parameter model, design codec,
individuals, populations, objectives and the error taxonomy.
"""

from .errors import (
    OptimizationError,
    ConfigurationError,
    EvaluationError,
    CancellationError,
    CheckpointError,
)
from .parameters import (
    MAX_PARAMETERS,
    ContinuousParameter,
    DiscreteParameter,
    ParameterSpec,
    parameter_from_dict,
    validate_parameters,
    quantize,
    random_value,
)
from .design import Design, DesignCodec
from .individual import EvaluationResult, Individual
from .population import Population
from .fitness import (
    MAXIMIZE,
    MINIMIZE,
    SET_TARGET,
    Objective,
    SingleObjective,
    Constraint,
    FitnessScorer,
    coerce_result,
)

__all__ = [
    # Errors
    "OptimizationError",
    "ConfigurationError",
    "EvaluationError",
    "CancellationError",
    "CheckpointError",

    # Parameter model
    "MAX_PARAMETERS",
    "ContinuousParameter",
    "DiscreteParameter",
    "ParameterSpec",
    "parameter_from_dict",
    "validate_parameters",
    "quantize",
    "random_value",

    # Designs and individuals
    "Design",
    "DesignCodec",
    "EvaluationResult",
    "Individual",
    "Population",

    # Objectives
    "MAXIMIZE",
    "MINIMIZE",
    "SET_TARGET",
    "Objective",
    "SingleObjective",
    "Constraint",
    "FitnessScorer",
    "coerce_result",
]
