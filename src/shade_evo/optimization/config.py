"""
Configuration and data classes for the shade-evo optimizers.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from ..core.errors import ConfigurationError
from ..core.fitness import Constraint, Objective, SingleObjective, validate_objectives
from ..core.parameters import ParameterSpec, validate_parameters

logger = logging.getLogger(__name__)

GA_KIND = "ga"
MOGA_KIND = "moga"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class OptimizerConfig:
    """
    Settings shared by both optimizers.

    Contains the search space and the hyperparameters of the genetic operators.
    """

    # Search space
    parameters: List[ParameterSpec]

    # Evolution hyperparameters
    population_size: int = 20
    mutation_rate: float = 0.1
    mutation_scale: float = 0.2
    tournament_size: int = 2
    seed: Optional[int] = None

    # Constraint expression, e.g. "ASE < 10"
    constraint: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_generation_stats: bool = True

    kind = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.parameters = validate_parameters(self.parameters)

        if isinstance(self.population_size, bool) or not isinstance(self.population_size, int):
            raise ConfigurationError("population_size must be an integer")
        if self.population_size < 2:
            raise ConfigurationError("population_size must be at least 2")
        if not 0.0 <= self.mutation_rate <= 1.0:
            raise ConfigurationError("mutation_rate must be between 0 and 1")
        if self.mutation_scale <= 0.0:
            raise ConfigurationError("mutation_scale must be positive")
        if self.tournament_size < 1:
            raise ConfigurationError("tournament_size must be at least 1")
        if self.tournament_size > self.population_size:
            raise ConfigurationError("tournament_size cannot exceed population_size")
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")

        if self.constraint is not None and not str(self.constraint).strip():
            self.constraint = None
        if self.constraint is not None:
            # Fail at construction rather than mid-run
            self.parsed_constraint()

    def parsed_constraint(self) -> Optional[Constraint]:
        """Parse the constraint expression, if any."""
        if self.constraint is None:
            return None
        return Constraint.parse(self.constraint, default_metric=self._default_constraint_metric())

    def _default_constraint_metric(self) -> Optional[str]:
        return None

    @classmethod
    def from_yaml(cls, config_path: Path) -> "OptimizerConfig":
        """
        Load configuration from a YAML file.

        The settings may sit at the top level or under an ``optimization`` key.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Config instance
        """
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}

        section = dict(config.get("optimization", config))
        section.pop("kind", None)
        return cls(**section)

    def _base_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "parameters": [p.to_dict() for p in self.parameters],
            "population_size": self.population_size,
            "mutation_rate": self.mutation_rate,
            "mutation_scale": self.mutation_scale,
            "tournament_size": self.tournament_size,
            "seed": self.seed,
            "constraint": self.constraint,
            "log_level": self.log_level,
            "log_generation_stats": self.log_generation_stats,
        }

    def to_dict(self) -> Dict[str, Any]:
        return self._base_dict()

    def to_yaml(self, save_path: Path) -> None:
        """
        Save configuration to a YAML file.

        Args:
            save_path: Path where to save the configuration
        """
        with open(save_path, "w") as f:
            yaml.safe_dump({"optimization": self.to_dict()}, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved configuration to {save_path}")

    @staticmethod
    def _env_overrides() -> Dict[str, Any]:
        overrides: Dict[str, Any] = {}
        if os.getenv("POPULATION_SIZE"):
            overrides["population_size"] = int(os.environ["POPULATION_SIZE"])
        if os.getenv("MUTATION_RATE"):
            overrides["mutation_rate"] = float(os.environ["MUTATION_RATE"])
        if os.getenv("RANDOM_SEED"):
            overrides["seed"] = int(os.environ["RANDOM_SEED"])
        if os.getenv("LOG_LEVEL"):
            overrides["log_level"] = os.environ["LOG_LEVEL"]
        return overrides


@dataclass
class GeneticConfig(OptimizerConfig):
    """
    Configuration of the single-objective genetic optimizer.

    The run stops once ``max_evaluations`` individuals have been evaluated
    (cache hits included).
    """

    max_evaluations: int = 50
    objective: Union[SingleObjective, Dict[str, Any]] = field(default_factory=SingleObjective)

    kind = GA_KIND

    def __post_init__(self):
        if isinstance(self.objective, dict):
            self.objective = SingleObjective(**self.objective)
        super().__post_init__()
        if self.max_evaluations < self.population_size:
            raise ConfigurationError("max_evaluations must be at least population_size")

    def _default_constraint_metric(self) -> Optional[str]:
        return self.objective.metric

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data["max_evaluations"] = self.max_evaluations
        data["objective"] = self.objective.to_dict()
        return data

    @classmethod
    def from_env(cls, parameters: List[ParameterSpec], **kwargs) -> "GeneticConfig":
        """
        Build a configuration with overrides from environment variables.

        Reads POPULATION_SIZE, MAX_EVALUATIONS, MUTATION_RATE, RANDOM_SEED
        and LOG_LEVEL. Explicit keyword arguments win over the environment.
        """
        overrides = cls._env_overrides()
        if os.getenv("MAX_EVALUATIONS"):
            overrides["max_evaluations"] = int(os.environ["MAX_EVALUATIONS"])
        overrides.update(kwargs)
        return cls(parameters=parameters, **overrides)


@dataclass
class MultiObjectiveConfig(OptimizerConfig):
    """
    Configuration of the multi-objective (Pareto) optimizer.
    """

    max_generations: int = 20
    objectives: List[Union[Objective, Dict[str, Any]]] = field(default_factory=list)

    kind = MOGA_KIND

    def __post_init__(self):
        self.objectives = validate_objectives(self.objectives)
        super().__post_init__()
        if self.max_generations < 1:
            raise ConfigurationError("max_generations must be at least 1")

    def _default_constraint_metric(self) -> Optional[str]:
        return self.objectives[0].name

    def to_dict(self) -> Dict[str, Any]:
        data = self._base_dict()
        data["max_generations"] = self.max_generations
        data["objectives"] = [o.to_dict() for o in self.objectives]
        return data

    @classmethod
    def from_env(cls, parameters: List[ParameterSpec], objectives: List[Objective], **kwargs) -> "MultiObjectiveConfig":
        """
        Build a configuration with overrides from environment variables.

        Reads POPULATION_SIZE, MAX_GENERATIONS, MUTATION_RATE, RANDOM_SEED
        and LOG_LEVEL. Explicit keyword arguments win over the environment.
        """
        overrides = cls._env_overrides()
        if os.getenv("MAX_GENERATIONS"):
            overrides["max_generations"] = int(os.environ["MAX_GENERATIONS"])
        overrides.update(kwargs)
        return cls(parameters=parameters, objectives=objectives, **overrides)


def load_config(config_path: Path) -> OptimizerConfig:
    """
    Load either config type from YAML.

    Uses the ``kind`` key when present ("ga" or "moga"), otherwise a config
    with an ``objectives`` list is multi-objective.
    """
    with open(config_path) as f:
        config = yaml.safe_load(f) or {}

    section = config.get("optimization", config)
    kind = section.get("kind")
    if kind is None:
        kind = MOGA_KIND if "objectives" in section else GA_KIND

    if kind == MOGA_KIND:
        return MultiObjectiveConfig.from_yaml(config_path)
    if kind == GA_KIND:
        return GeneticConfig.from_yaml(config_path)
    raise ConfigurationError(f"Unknown optimizer kind: {kind!r}")


@dataclass
class GenerationHistory:
    """
    Statistics for a single generation.

    Tracks key metrics to monitor optimization progress.
    """

    generation: int
    evaluations: int
    population_size: int
    best_fitness: Optional[float] = None
    avg_fitness: Optional[float] = None
    pareto_front_size: int = 0
    n_failed: int = 0
    n_constraint_violations: int = 0
    cache_hits: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "generation": self.generation,
            "evaluations": self.evaluations,
            "population_size": self.population_size,
            "best_fitness": self.best_fitness,
            "avg_fitness": self.avg_fitness,
            "pareto_front_size": self.pareto_front_size,
            "n_failed": self.n_failed,
            "n_constraint_violations": self.n_constraint_violations,
            "cache_hits": self.cache_hits,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GenerationHistory":
        """Create instance from dictionary."""
        return cls(**data)
