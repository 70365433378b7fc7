"""
Parameter model for the shade-evo search space.

A search space is a short list of named parameters, each either continuous
(bounded and quantized to a fixed step) or discrete (an ordered option set).
Specs are validated once, when the optimizer is configured.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple, Union

import numpy as np

from .errors import ConfigurationError

# Largest number of parameters a single run may search over.
MAX_PARAMETERS = 3

CONTINUOUS = "continuous"
DISCRETE = "discrete"

_MAX_DECIMALS = 10


def _decimal_places(value: float) -> int:
    """Number of decimal places needed to write ``value`` exactly as typed."""
    text = repr(float(value)).lower()
    if "e" in text:
        mantissa, exponent = text.split("e")
        places = len(mantissa.split(".")[1].rstrip("0")) if "." in mantissa else 0
        return max(0, places - int(exponent))
    if "." not in text:
        return 0
    return len(text.split(".")[1].rstrip("0"))


@dataclass(frozen=True)
class ContinuousParameter:
    """
    A bounded numeric parameter sampled on a regular grid.

    Attributes:
        name: Parameter identifier (e.g. "depth")
        min: Lower bound (inclusive)
        max: Upper bound (inclusive)
        step: Grid increment measured from ``min``
    """

    name: str
    min: float
    max: float
    step: float

    kind = CONTINUOUS

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise ConfigurationError("Parameter name cannot be empty")
        for attr in ("min", "max", "step"):
            value = getattr(self, attr)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
                raise ConfigurationError(f"Parameter '{self.name}': {attr} must be a finite number, got {value!r}")
        if self.min >= self.max:
            raise ConfigurationError(
                f"Parameter '{self.name}': min ({self.min}) must be less than max ({self.max})"
            )
        if self.step <= 0:
            raise ConfigurationError(f"Parameter '{self.name}': step must be positive, got {self.step}")

    @property
    def decimals(self) -> int:
        """Fixed decimal precision used when formatting values of this parameter."""
        return min(_MAX_DECIMALS, max(_decimal_places(self.step), _decimal_places(self.min)))

    @property
    def n_steps(self) -> int:
        """Number of whole steps that fit between ``min`` and ``max``."""
        return int(math.floor((self.max - self.min) / self.step + 1e-9))

    def value_at(self, index: int) -> float:
        """Grid value for a step index, rounded to the parameter precision."""
        index = max(0, min(self.n_steps, int(index)))
        return round(self.min + index * self.step, self.decimals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "min": self.min,
            "max": self.max,
            "step": self.step,
        }


@dataclass(frozen=True)
class DiscreteParameter:
    """
    A parameter restricted to an ordered set of options.

    Attributes:
        name: Parameter identifier (e.g. "slat-orientation")
        options: Allowed values, in display order
    """

    name: str
    options: Tuple[Any, ...] = field(default_factory=tuple)

    kind = DISCRETE

    def __post_init__(self):
        if not self.name or not str(self.name).strip():
            raise ConfigurationError("Parameter name cannot be empty")
        # Accept any sequence but store an immutable tuple
        object.__setattr__(self, "options", tuple(self.options))
        if not self.options:
            raise ConfigurationError(f"Parameter '{self.name}': options cannot be empty")
        if len(set(map(repr, self.options))) != len(self.options):
            raise ConfigurationError(f"Parameter '{self.name}': options must be unique")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kind": self.kind,
            "options": list(self.options),
        }


ParameterSpec = Union[ContinuousParameter, DiscreteParameter]


def parameter_from_dict(data: Dict[str, Any]) -> ParameterSpec:
    """
    Build a parameter spec from its dictionary form.

    The ``kind`` key may be omitted: specs with ``options`` are discrete,
    everything else is continuous. ``type`` is accepted as an alias of ``kind``.

    Raises:
        ConfigurationError: If the dictionary does not describe a valid spec
    """
    if not isinstance(data, dict):
        raise ConfigurationError(f"Parameter spec must be a mapping, got {type(data).__name__}")

    kind = data.get("kind", data.get("type"))
    if kind is None:
        kind = DISCRETE if "options" in data else CONTINUOUS

    try:
        if kind == CONTINUOUS:
            return ContinuousParameter(
                name=data["name"],
                min=data["min"],
                max=data["max"],
                step=data["step"],
            )
        if kind == DISCRETE:
            return DiscreteParameter(name=data["name"], options=tuple(data["options"]))
    except KeyError as e:
        raise ConfigurationError(f"Parameter spec is missing field {e}") from e

    raise ConfigurationError(f"Unknown parameter kind: {kind!r}")


def validate_parameters(parameters: Sequence[ParameterSpec]) -> List[ParameterSpec]:
    """
    Validate a full search space.

    Args:
        parameters: Parameter specs (or their dictionary forms)

    Returns:
        List of parameter spec objects

    Raises:
        ConfigurationError: No parameters, too many, or duplicate names
    """
    specs = [p if isinstance(p, (ContinuousParameter, DiscreteParameter)) else parameter_from_dict(p)
             for p in (parameters or [])]

    if not specs:
        raise ConfigurationError("At least one parameter must be selected for optimization")
    if len(specs) > MAX_PARAMETERS:
        raise ConfigurationError(
            f"Maximum {MAX_PARAMETERS} parameters allowed for optimization, got {len(specs)}"
        )

    names = [p.name for p in specs]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigurationError(f"Duplicate parameter names: {', '.join(duplicates)}")

    return specs


def quantize(spec: ContinuousParameter, raw_value: float) -> float:
    """
    Snap a raw value onto the parameter grid.

    Clamps to ``[min, max]`` and rounds to the nearest multiple of ``step``
    measured from ``min``. Idempotent: ``quantize(s, quantize(s, x)) == quantize(s, x)``.
    """
    value = float(raw_value)
    if math.isnan(value):
        raise ValueError(f"Cannot quantize NaN for parameter '{spec.name}'")
    value = min(spec.max, max(spec.min, value))
    index = int(round((value - spec.min) / spec.step))
    return spec.value_at(index)


def random_value(spec: ParameterSpec, rng: np.random.Generator) -> Any:
    """Draw a uniformly random valid value for a parameter."""
    if spec.kind == CONTINUOUS:
        return spec.value_at(int(rng.integers(0, spec.n_steps + 1)))
    return spec.options[int(rng.integers(0, len(spec.options)))]
