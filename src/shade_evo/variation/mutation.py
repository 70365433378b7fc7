"""
Mutation operator for shade-evo.

Each parameter mutates independently with probability ``rate``:
- continuous: add a bounded uniform delta, then quantize
- discrete: replace with a uniformly random *different* option
"""

import logging
from typing import Sequence

import numpy as np

from ..core.design import Design
from ..core.parameters import CONTINUOUS, ContinuousParameter, ParameterSpec, quantize

logger = logging.getLogger(__name__)


def _continuous_delta(spec: ContinuousParameter, scale: float, rng: np.random.Generator) -> float:
    """
    Uniform delta spanning ``scale`` of the parameter range in total
    (``±scale/2 * range``), never narrower than one step either way.
    """
    half_width = max(0.5 * scale * (spec.max - spec.min), spec.step)
    return rng.uniform(-half_width, half_width)


def mutate(
    design: Design,
    parameters: Sequence[ParameterSpec],
    rate: float,
    rng: np.random.Generator,
    scale: float = 0.2,
) -> Design:
    """
    Randomly perturb a design.

    Args:
        design: Design to mutate (not modified)
        parameters: Parameter specs of the search space
        rate: Per-parameter mutation probability
        rng: Random generator
        scale: Width of the continuous perturbation as a fraction of the range

    Returns:
        New mutated design
    """
    mutated = dict(design)
    for spec in parameters:
        if rng.random() >= rate:
            continue

        if spec.kind == CONTINUOUS:
            mutated[spec.name] = quantize(spec, mutated[spec.name] + _continuous_delta(spec, scale, rng))
        else:
            current = mutated[spec.name]
            others = [o for o in spec.options if o != current]
            if not others:
                # Single-option parameter: nothing to switch to
                continue
            mutated[spec.name] = others[int(rng.integers(0, len(others)))]

    return mutated
