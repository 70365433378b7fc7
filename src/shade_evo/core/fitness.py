"""
Objectives, constraints and fitness scoring for shade-evo.

The single-objective optimizer turns a metrics map into one scalar fitness:
``maximize`` keeps the metric, ``minimize`` negates it and ``set-target``
scores the negative absolute distance to a target. A constraint such as
``"ASE < 10"`` is checked against the metrics after every evaluation.
"""

import logging
import math
import numbers
import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from .errors import ConfigurationError, EvaluationError
from .individual import EvaluationResult

logger = logging.getLogger(__name__)

MAXIMIZE = "maximize"
MINIMIZE = "minimize"
SET_TARGET = "set-target"

# Absolute tolerance used by the "==" constraint operator
EQUALITY_TOLERANCE = 0.01

_CONSTRAINT_PATTERN = re.compile(
    r"^\s*(?P<metric>[A-Za-z_][\w\-\.]*)?\s*(?P<op><=|>=|==|<|>)\s*(?P<threshold>[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?)\s*$"
)


def lookup_metric(metrics: Mapping[str, Any], name: str) -> Optional[Any]:
    """Find a metric by exact name, falling back to a case-insensitive match."""
    if name in metrics:
        return metrics[name]
    lowered = name.lower()
    for key, value in metrics.items():
        if str(key).lower() == lowered:
            return value
    return None


def as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return None
    value = float(value)
    return None if math.isnan(value) else value


@dataclass(frozen=True)
class Objective:
    """
    A named objective of the multi-objective optimizer.

    Attributes:
        name: Metric name in the evaluation result (e.g. "sda")
        direction: "maximize" or "minimize"
    """

    name: str
    direction: str = MAXIMIZE

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise ConfigurationError("Objective name cannot be empty")
        if self.direction not in (MAXIMIZE, MINIMIZE):
            raise ConfigurationError(
                f"Objective '{self.name}': direction must be '{MAXIMIZE}' or '{MINIMIZE}', "
                f"got {self.direction!r}"
            )

    @property
    def worst_value(self) -> float:
        """Least favorable value, assigned when an evaluation fails."""
        return -math.inf if self.direction == MAXIMIZE else math.inf

    def value(self, metrics: Mapping[str, Any]) -> float:
        """Objective value from a metrics map, worst case when missing."""
        number = as_number(lookup_metric(metrics, self.name))
        return self.worst_value if number is None else number

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "direction": self.direction}


def validate_objectives(objectives: Sequence[Any]) -> list:
    """
    Validate multi-objective definitions.

    Raises:
        ConfigurationError: Fewer than two objectives or duplicate names
    """
    parsed = [o if isinstance(o, Objective) else Objective(**o) for o in (objectives or [])]
    if len(parsed) < 2:
        raise ConfigurationError("Multi-objective optimization needs at least two objectives")
    names = [o.name for o in parsed]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate objective names: {', '.join(duplicates)}")
    return parsed


@dataclass(frozen=True)
class SingleObjective:
    """
    The objective of the single-objective optimizer.

    Attributes:
        metric: Metric name in the evaluation result
        direction: "maximize", "minimize" or "set-target"
        target: Target value, required for "set-target"
    """

    metric: str = "fitness"
    direction: str = MAXIMIZE
    target: Optional[float] = None

    def __post_init__(self):
        if not self.metric or not str(self.metric).strip():
            raise ConfigurationError("Objective metric cannot be empty")
        if self.direction not in (MAXIMIZE, MINIMIZE, SET_TARGET):
            raise ConfigurationError(
                f"Objective direction must be one of {MAXIMIZE}, {MINIMIZE}, {SET_TARGET}; "
                f"got {self.direction!r}"
            )
        if self.direction == SET_TARGET and as_number(self.target) is None:
            raise ConfigurationError("A 'set-target' objective requires a numeric target")

    def score(self, metrics: Mapping[str, Any]) -> float:
        """
        Compute the scalar fitness from a metrics map.

        Raises:
            EvaluationError: If the metric is missing or not numeric
        """
        value = as_number(lookup_metric(metrics, self.metric))
        if value is None:
            raise EvaluationError(f"Evaluation did not report a numeric '{self.metric}' metric")

        if self.direction == MAXIMIZE:
            return value
        if self.direction == MINIMIZE:
            return -value
        # Fitness is maximized when the distance to the target is 0
        return -abs(value - float(self.target))

    def to_dict(self) -> Dict[str, Any]:
        return {"metric": self.metric, "direction": self.direction, "target": self.target}


@dataclass(frozen=True)
class Constraint:
    """
    A relational constraint over one named metric, e.g. ``ASE < 10``.

    Attributes:
        metric: Metric name; None means "the primary objective metric"
        operator: One of <, <=, >, >=, ==
        threshold: Right-hand side value
    """

    metric: Optional[str]
    operator: str
    threshold: float

    @classmethod
    def parse(cls, expression: str, default_metric: Optional[str] = None) -> "Constraint":
        """
        Parse a constraint expression.

        Args:
            expression: Text such as "ASE < 10" or "< 10"
            default_metric: Metric used when the expression names none

        Raises:
            ConfigurationError: If the expression is malformed
        """
        match = _CONSTRAINT_PATTERN.match(expression or "")
        if not match:
            raise ConfigurationError(f"Invalid constraint syntax: {expression!r}")
        metric = match.group("metric") or default_metric
        if not metric:
            raise ConfigurationError(f"Constraint {expression!r} does not name a metric")
        return cls(metric=metric, operator=match.group("op"), threshold=float(match.group("threshold")))

    def check(self, metrics: Mapping[str, Any]) -> Optional[bool]:
        """
        Check the constraint against a metrics map.

        Returns:
            True if satisfied, False if violated, None if the metric is
            missing (the constraint is then not checked)
        """
        value = as_number(lookup_metric(metrics, self.metric))
        if value is None:
            return None

        if self.operator == "<":
            return value < self.threshold
        if self.operator == "<=":
            return value <= self.threshold
        if self.operator == ">":
            return value > self.threshold
        if self.operator == ">=":
            return value >= self.threshold
        return abs(value - self.threshold) < EQUALITY_TOLERANCE

    def __str__(self) -> str:
        return f"{self.metric} {self.operator} {self.threshold:g}"


def coerce_result(raw: Any, default_metric: str) -> EvaluationResult:
    """
    Normalize what a fitness function returned into an EvaluationResult.

    Accepts an EvaluationResult, a metrics mapping, or a bare number (stored
    under ``default_metric``).

    Raises:
        EvaluationError: If the value cannot be interpreted
    """
    if isinstance(raw, EvaluationResult):
        return raw
    if isinstance(raw, Mapping):
        return EvaluationResult(metrics=dict(raw))
    if as_number(raw) is not None:
        return EvaluationResult(metrics={default_metric: float(raw)})
    raise EvaluationError(f"Fitness function returned an unsupported value: {raw!r}")


class FitnessScorer:
    """
    Derives the usable fitness of a single-objective evaluation.

    Attributes:
        objective: Objective turning metrics into a scalar
        constraint: Optional constraint; violations force -inf
    """

    def __init__(self, objective: SingleObjective, constraint: Optional[Constraint] = None):
        self.objective = objective
        self.constraint = constraint

    def score(self, result: EvaluationResult) -> EvaluationResult:
        """
        Fill in ``fitness`` and ``constraint_violated`` on a result.

        Failed results and constraint violators get -inf.

        Raises:
            EvaluationError: If the objective metric is missing
        """
        if result.failed:
            result.fitness = -math.inf
            return result

        fitness = self.objective.score(result.metrics)

        if self.constraint is not None and self.constraint.check(result.metrics) is False:
            result.constraint_violated = True
            logger.warning(f"Constraint failed ({self.constraint}): metrics={result.metrics}")
            fitness = -math.inf

        result.fitness = fitness
        return result
