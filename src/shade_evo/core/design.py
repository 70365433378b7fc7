"""
Design codec for shade-evo.

A design is a plain mapping of parameter name to value. The codec enforces the
quantization and membership invariants of the search space and produces the
canonical signature used as the fitness cache key.
"""

import json
import logging
from typing import Any, Dict, List, Sequence

import numpy as np

from .errors import ConfigurationError
from .parameters import CONTINUOUS, ParameterSpec, quantize, random_value, validate_parameters

logger = logging.getLogger(__name__)

Design = Dict[str, Any]


class DesignCodec:
    """
    Converts designs to canonical signatures and keeps them on the grid.

    Attributes:
        parameters: Validated parameter specs, in configuration order
    """

    def __init__(self, parameters: Sequence[ParameterSpec]):
        """
        Initialize the codec.

        Args:
            parameters: Parameter specs describing the search space

        Raises:
            ConfigurationError: If the parameter specs are invalid
        """
        self.parameters: List[ParameterSpec] = validate_parameters(parameters)
        self._by_name = {p.name: p for p in self.parameters}

    @property
    def names(self) -> List[str]:
        return [p.name for p in self.parameters]

    def spec(self, name: str) -> ParameterSpec:
        return self._by_name[name]

    def signature(self, design: Design) -> str:
        """
        Compute the canonical signature of a design.

        Parameter names are sorted; continuous values are written with the
        fixed precision of their spec, so values that differ only by floating
        point noise share a signature. Discrete values are JSON encoded.

        Args:
            design: Design to encode

        Returns:
            Deterministic, order-independent string key
        """
        parts = []
        for name in sorted(design):
            value = design[name]
            spec = self._by_name.get(name)
            if spec is not None and spec.kind == CONTINUOUS:
                # Snap first so that 0.30000000000000004 and 0.3 agree
                encoded = f"{quantize(spec, value):.{spec.decimals}f}"
            else:
                encoded = json.dumps(value, sort_keys=True)
            parts.append(f"{name}={encoded}")
        return ";".join(parts)

    def normalize(self, design: Design) -> Design:
        """
        Return a copy of the design with every continuous value quantized.

        Raises:
            ConfigurationError: If a parameter is missing, unknown, or a
                discrete value is not one of its options
        """
        self._check_keys(design)
        normalized = {}
        for spec in self.parameters:
            value = design[spec.name]
            if spec.kind == CONTINUOUS:
                normalized[spec.name] = quantize(spec, value)
            else:
                if value not in spec.options:
                    raise ConfigurationError(
                        f"Value {value!r} is not an option of parameter '{spec.name}'"
                    )
                normalized[spec.name] = value
        return normalized

    def validate(self, design: Design) -> None:
        """
        Check that a design satisfies every parameter spec exactly.

        Raises:
            ConfigurationError: If the design is incomplete, has unknown keys,
                holds an off-grid continuous value or a non-member discrete value
        """
        normalized = self.normalize(design)
        for spec in self.parameters:
            if spec.kind == CONTINUOUS:
                value = float(design[spec.name])
                if abs(value - normalized[spec.name]) > 10 ** -(spec.decimals + 1):
                    raise ConfigurationError(
                        f"Value {value} of parameter '{spec.name}' is not on its "
                        f"grid (min={spec.min}, max={spec.max}, step={spec.step})"
                    )

    def random_design(self, rng: np.random.Generator) -> Design:
        """Draw a random design, one value per parameter in configuration order."""
        return {spec.name: random_value(spec, rng) for spec in self.parameters}

    def parameters_to_dict(self) -> List[Dict[str, Any]]:
        return [p.to_dict() for p in self.parameters]

    def _check_keys(self, design: Design) -> None:
        missing = [n for n in self.names if n not in design]
        unknown = [n for n in design if n not in self._by_name]
        if missing:
            raise ConfigurationError(f"Design is missing parameters: {', '.join(missing)}")
        if unknown:
            raise ConfigurationError(f"Design has unknown parameters: {', '.join(unknown)}")
