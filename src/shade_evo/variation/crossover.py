"""
Crossover operator for shade-evo.

Each parameter is recombined independently:
- continuous: uniform blend ``quantize(a + u * (b - a))`` with ``u ~ U[0, 1)``
- discrete: uniform pick of either parent's value
"""

from typing import Sequence

import numpy as np

from ..core.design import Design
from ..core.parameters import CONTINUOUS, ParameterSpec, quantize


def crossover(
    parent_a: Design,
    parent_b: Design,
    parameters: Sequence[ParameterSpec],
    rng: np.random.Generator,
) -> Design:
    """
    Produce a child design from two parent designs.

    Args:
        parent_a: First parent design
        parent_b: Second parent design
        parameters: Parameter specs of the search space
        rng: Random generator

    Returns:
        New child design; the parents are not modified
    """
    child = {}
    for spec in parameters:
        a = parent_a[spec.name]
        b = parent_b[spec.name]
        if spec.kind == CONTINUOUS:
            u = rng.random()
            child[spec.name] = quantize(spec, a + u * (b - a))
        else:
            child[spec.name] = a if rng.random() < 0.5 else b
    return child
