"""
Preset optimization profiles for common shading design goals.

A profile bundles a search space, an objective and a constraint. The
``recipe`` and ``shading_type`` entries describe which simulation and device
a fitness function is expected to model; the optimizer itself ignores them.
"""

import logging
from typing import Any, Dict, List

from ..core.errors import ConfigurationError
from ..core.fitness import SingleObjective
from ..core.parameters import ContinuousParameter
from .config import GeneticConfig

logger = logging.getLogger(__name__)

# Quick mode trades search quality for a short run
QUICK_POPULATION_SIZE = 8
QUICK_MAX_EVALUATIONS = 20

PRESET_PROFILES: Dict[str, Dict[str, Any]] = {
    "maximize-daylight": {
        "recipe": "sda-ase",
        "shading_type": "overhang",
        "objective": {"metric": "sDA", "direction": "maximize"},
        "constraint": "ASE < 10",
        "parameters": [
            {"name": "depth", "min": 0.1, "max": 1.5, "step": 0.1},
            {"name": "dist-above", "min": 0.0, "max": 0.5, "step": 0.05},
        ],
    },
    "minimize-glare": {
        "recipe": "dgp",
        "shading_type": "louver",
        "objective": {"metric": "DGP", "direction": "minimize"},
        "constraint": "DGP < 0.40",
        "parameters": [
            {"name": "slat-angle", "min": -45, "max": 45, "step": 5},
        ],
    },
    "balanced-performance": {
        "recipe": "sda-ase",
        "shading_type": "lightshelf",
        "objective": {"metric": "sDA", "direction": "maximize"},
        "constraint": "ASE < 15",
        "parameters": [
            {"name": "depth", "min": 0.2, "max": 1.2, "step": 0.1},
            {"name": "tilt", "min": 0, "max": 30, "step": 5},
        ],
    },
}


def list_presets() -> List[str]:
    return sorted(PRESET_PROFILES)


def load_preset(name: str, quick: bool = False, **overrides) -> GeneticConfig:
    """
    Build a single-objective configuration from a preset profile.

    Args:
        name: Profile name, see ``list_presets()``
        quick: Use the quick settings (population 8, 20 evaluations)
        **overrides: GeneticConfig fields that replace the profile's values

    Returns:
        Validated GeneticConfig

    Raises:
        ConfigurationError: If the preset name is unknown
    """
    if name not in PRESET_PROFILES:
        raise ConfigurationError(f"Unknown preset {name!r}; choose one of {', '.join(list_presets())}")

    profile = PRESET_PROFILES[name]
    settings: Dict[str, Any] = {
        "parameters": [ContinuousParameter(**p) for p in profile["parameters"]],
        "objective": SingleObjective(**profile["objective"]),
        "constraint": profile["constraint"],
    }
    if quick:
        settings["population_size"] = QUICK_POPULATION_SIZE
        settings["max_evaluations"] = QUICK_MAX_EVALUATIONS
    settings.update(overrides)

    logger.info(f"Loaded preset '{name}' ({profile['shading_type']}, {profile['recipe']})"
                + (" in quick mode" if quick else ""))
    return GeneticConfig(**settings)
