"""
Checkpointing for shade-evo.

A checkpoint is a JSON document holding everything needed to continue a run
exactly where it stopped: counters, the population with its results, the
best design or Pareto front, the search space, the random generator state and
the fitness cache.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..core.errors import CheckpointError

logger = logging.getLogger(__name__)

CHECKPOINT_VERSION = 1

_REQUIRED_FIELDS = ("optimizer_kind", "generation", "evaluations", "population", "parameters", "rng_state")


@dataclass
class OptimizationCheckpoint:
    """
    Checkpoint data for resuming an optimization run.

    Contains all necessary state to resume from a generation boundary.
    """

    optimizer_kind: str
    generation: int
    evaluations: int
    population: List[Dict[str, Any]]  # Serialized individuals
    parameters: List[Dict[str, Any]]  # Serialized parameter specs
    rng_state: Dict[str, Any]
    best: Optional[Dict[str, Any]] = None
    pareto_front: List[Dict[str, Any]] = field(default_factory=list)
    cache: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    history: List[Dict[str, Any]] = field(default_factory=list)
    version: int = CHECKPOINT_VERSION
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "optimizer_kind": self.optimizer_kind,
            "generation": self.generation,
            "evaluations": self.evaluations,
            "population": self.population,
            "parameters": self.parameters,
            "rng_state": self.rng_state,
            "best": self.best,
            "pareto_front": self.pareto_front,
            "cache": self.cache,
            "history": self.history,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "OptimizationCheckpoint":
        """
        Rebuild a checkpoint from its dictionary form.

        Raises:
            CheckpointError: If required fields are missing or have the wrong type
        """
        if not isinstance(data, dict):
            raise CheckpointError(f"Checkpoint must be a JSON object, got {type(data).__name__}")

        missing = [name for name in _REQUIRED_FIELDS if name not in data]
        if missing:
            raise CheckpointError(f"Checkpoint is missing fields: {', '.join(missing)}")

        version = data.get("version", CHECKPOINT_VERSION)
        if version != CHECKPOINT_VERSION:
            raise CheckpointError(f"Unsupported checkpoint version {version} (expected {CHECKPOINT_VERSION})")

        for name, expected in (("generation", int), ("evaluations", int), ("population", list),
                               ("parameters", list), ("rng_state", dict)):
            if isinstance(data[name], bool) or not isinstance(data[name], expected):
                raise CheckpointError(f"Checkpoint field '{name}' must be of type {expected.__name__}")

        for individual in data["population"]:
            if not isinstance(individual, dict) or not isinstance(individual.get("design"), dict):
                raise CheckpointError("Checkpoint population entries must contain a 'design' mapping")

        return cls(
            optimizer_kind=data["optimizer_kind"],
            generation=data["generation"],
            evaluations=data["evaluations"],
            population=data["population"],
            parameters=data["parameters"],
            rng_state=data["rng_state"],
            best=data.get("best"),
            pareto_front=data.get("pareto_front") or [],
            cache=data.get("cache") or {},
            history=data.get("history") or [],
            version=version,
            timestamp=data.get("timestamp", datetime.now().isoformat()),
        )


class CheckpointManager:
    """
    Reads and writes checkpoints as JSON files.

    Writes go to a temporary file in the same directory first and are moved
    into place, so an interrupted save never leaves a truncated checkpoint.
    """

    def __init__(self, checkpoint_path: Union[str, Path]):
        self.checkpoint_path = Path(checkpoint_path)

    def exists(self) -> bool:
        return self.checkpoint_path.exists()

    def save(self, checkpoint: Union[OptimizationCheckpoint, Dict[str, Any]]) -> None:
        """
        Save a checkpoint to disk.

        Args:
            checkpoint: Checkpoint object or the dict returned by ``get_state()``
        """
        data = checkpoint.to_dict() if isinstance(checkpoint, OptimizationCheckpoint) else checkpoint
        self.checkpoint_path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=str(self.checkpoint_path.parent), prefix=".checkpoint-", suffix=".json"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, self.checkpoint_path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

        logger.info(f"Saved checkpoint at generation {data.get('generation')} to {self.checkpoint_path}")

    def load(self) -> OptimizationCheckpoint:
        """
        Load and structurally validate a checkpoint.

        Raises:
            CheckpointError: If the file is missing, unreadable or malformed
        """
        try:
            with open(self.checkpoint_path) as f:
                data = json.load(f)
        except FileNotFoundError as e:
            raise CheckpointError(f"Checkpoint not found: {self.checkpoint_path}") from e
        except (OSError, ValueError) as e:
            raise CheckpointError(f"Could not read checkpoint {self.checkpoint_path}: {e}") from e

        checkpoint = OptimizationCheckpoint.from_dict(data)
        logger.info(f"Loaded checkpoint from generation {checkpoint.generation} at {self.checkpoint_path}")
        return checkpoint

    def clear(self) -> None:
        """Delete the checkpoint file if present."""
        if self.checkpoint_path.exists():
            self.checkpoint_path.unlink()
            logger.info(f"Removed checkpoint {self.checkpoint_path}")
