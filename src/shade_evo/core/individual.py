"""
Core data structures for shade-evo.

This module defines the EvaluationResult produced by the external fitness
function and the Individual class, which pairs a design with its (possibly
absent) evaluation result and the ranking attributes used by the
multi-objective optimizer.
"""

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .design import Design


def _encode_number(value):
    """Keep infinities JSON-portable by spelling them out as strings."""
    if isinstance(value, float) and math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return value


def _decode_number(value):
    if value == "inf":
        return math.inf
    if value == "-inf":
        return -math.inf
    return value


@dataclass
class EvaluationResult:
    """
    Outcome of evaluating one design.

    Attributes:
        metrics: Raw metrics reported by the fitness function (objective name -> value)
        fitness: Scalar fitness derived by the single-objective optimizer
        failed: True when the fitness function raised or returned unusable data
        error: Error message for failed evaluations
        constraint_violated: True when the configured constraint was checked and failed
    """

    metrics: Dict[str, Any] = field(default_factory=dict)
    fitness: Optional[float] = None
    failed: bool = False
    error: Optional[str] = None
    constraint_violated: bool = False

    def copy(self) -> "EvaluationResult":
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metrics": {k: _encode_number(v) for k, v in self.metrics.items()},
            "fitness": _encode_number(self.fitness),
            "failed": self.failed,
            "error": self.error,
            "constraint_violated": self.constraint_violated,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EvaluationResult":
        return cls(
            metrics={k: _decode_number(v) for k, v in data.get("metrics", {}).items()},
            fitness=_decode_number(data.get("fitness")),
            failed=data.get("failed", False),
            error=data.get("error"),
            constraint_violated=data.get("constraint_violated", False),
        )


@dataclass
class Individual:
    """
    A candidate design plus its evaluation state.

    Individuals are created when a design is proposed (seeding, crossover,
    mutation) and receive a result exactly once, in the evaluation step.

    Attributes:
        design: Parameter name -> value mapping
        result: Evaluation result, None until evaluated
        origin: How the design was produced (seed/offspring/elite/survivor)
        generation: Generation in which the design was proposed

    Ranking attributes (multi-objective only):
        rank: Non-domination rank, 0 for the Pareto front
        crowding_distance: Diversity measure within the rank
    """

    design: Design
    result: Optional[EvaluationResult] = None
    origin: str = "seed"
    generation: int = 0
    rank: Optional[int] = None
    crowding_distance: Optional[float] = None

    @property
    def fitness(self) -> Optional[float]:
        """Scalar fitness, None if unevaluated or not a single-objective result."""
        return self.result.fitness if self.result is not None else None

    @property
    def metrics(self) -> Dict[str, Any]:
        return self.result.metrics if self.result is not None else {}

    @property
    def failed(self) -> bool:
        return self.result is not None and self.result.failed

    @property
    def constraint_violated(self) -> bool:
        return self.result is not None and self.result.constraint_violated

    def is_evaluated(self) -> bool:
        """Check if this individual has an evaluation result attached."""
        return self.result is not None

    def set_result(self, result: EvaluationResult) -> None:
        """Attach an evaluation result."""
        self.result = result

    def clone(self) -> "Individual":
        """Deep copy, so later changes to the population never reach the clone."""
        return copy.deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "design": dict(self.design),
            "result": self.result.to_dict() if self.result is not None else None,
            "origin": self.origin,
            "generation": self.generation,
            "rank": self.rank,
            "crowding_distance": _encode_number(self.crowding_distance),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Individual":
        result = data.get("result")
        return cls(
            design=dict(data["design"]),
            result=EvaluationResult.from_dict(result) if result is not None else None,
            origin=data.get("origin", "seed"),
            generation=data.get("generation", 0),
            rank=data.get("rank"),
            crowding_distance=_decode_number(data.get("crowding_distance")),
        )

    def __repr__(self) -> str:
        if self.result is None:
            status = "unevaluated"
        elif self.result.failed:
            status = "failed"
        elif self.result.fitness is not None:
            status = f"fitness={self.result.fitness:.3f}"
        else:
            status = f"metrics={self.result.metrics}"
        return f"Individual(design={self.design}, {status}, rank={self.rank})"
