"""
Run controller for shade-evo.

Drives one optimizer run end to end: optional resume from a checkpoint file,
a checkpoint and JSON log after every completed generation, and a uniform
OptimizationResult for both optimizer kinds.
"""

import inspect
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.errors import ConfigurationError
from ..core.individual import Individual
from ..utils.evolution_logger import EvolutionLogger
from .base import BaseOptimizer, FitnessFunction, LogCallback, ProgressCallback
from .checkpoint import CheckpointManager
from .config import GenerationHistory, GeneticConfig, MultiObjectiveConfig, OptimizerConfig
from .genetic import GeneticOptimizer
from .moga import MultiObjectiveOptimizer

logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    """
    Outcome of a controlled optimization run.

    Attributes:
        kind: Optimizer kind ("ga" or "moga")
        best: Best individual (single objective only)
        pareto_front: Final Pareto front (multi-objective only)
        generations: Completed generations
        evaluations: Evaluations completed, cache hits included
        cancelled: True if the run stopped on a cancellation request
        history: Per-generation statistics
        cache_stats: Fitness cache statistics
    """

    kind: str
    best: Optional[Individual] = None
    pareto_front: Tuple[Individual, ...] = ()
    generations: int = 0
    evaluations: int = 0
    cancelled: bool = False
    history: List[GenerationHistory] = field(default_factory=list)
    cache_stats: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "best": self.best.to_dict() if self.best is not None else None,
            "pareto_front": [i.to_dict() for i in self.pareto_front],
            "generations": self.generations,
            "evaluations": self.evaluations,
            "cancelled": self.cancelled,
            "history": [h.to_dict() for h in self.history],
            "cache_stats": self.cache_stats,
        }


def create_optimizer(config: OptimizerConfig) -> BaseOptimizer:
    """
    Build the optimizer matching a configuration.

    Raises:
        ConfigurationError: For an unknown configuration type
    """
    if isinstance(config, GeneticConfig):
        return GeneticOptimizer(config)
    if isinstance(config, MultiObjectiveConfig):
        return MultiObjectiveOptimizer(config)
    raise ConfigurationError(f"No optimizer for configuration type {type(config).__name__}")


class RunController:
    """
    Runs an optimizer with checkpointing and per-generation logging.

    Example usage:
        ```python
        controller = RunController(
            create_optimizer(config),
            checkpoint_path="runs/checkpoint.json",
            output_dir="runs/logs",
        )
        result = await controller.run(fitness_fn, resume=True)
        ```
    """

    def __init__(
        self,
        optimizer: BaseOptimizer,
        checkpoint_path: Optional[Union[str, Path]] = None,
        output_dir: Optional[Union[str, Path]] = None,
    ):
        self.optimizer = optimizer
        self.checkpoints = CheckpointManager(checkpoint_path) if checkpoint_path else None
        self.evolution_logger = EvolutionLogger(Path(output_dir)) if output_dir else None

    def cancel(self) -> None:
        """Request cancellation of the running optimization."""
        self.optimizer.stop()

    async def run(
        self,
        fitness_fn: FitnessFunction,
        progress_callback: Optional[ProgressCallback] = None,
        log_callback: Optional[LogCallback] = None,
        resume: bool = False,
    ) -> OptimizationResult:
        """
        Run the optimizer to completion or cancellation.

        Args:
            fitness_fn: External fitness function
            progress_callback: Forwarded optimizer progress callback
                (sync or async)
            log_callback: Forwarded evaluation log callback; also receives
                checkpoint write failures
            resume: Restore state from the checkpoint file first, if it exists

        Returns:
            OptimizationResult for the run

        Raises:
            CheckpointError: If resuming from an invalid or mismatched checkpoint
        """
        if resume:
            if self.checkpoints is None:
                raise ConfigurationError("Cannot resume without a checkpoint path")
            if self.checkpoints.exists():
                self.optimizer.load_state(self.checkpoints.load())
            else:
                logger.info(f"No checkpoint at {self.checkpoints.checkpoint_path}, starting fresh")

        async def on_generation(index: int, payload: Any) -> None:
            self._persist(log_callback)
            if progress_callback is not None:
                outcome = progress_callback(index, payload)
                if inspect.isawaitable(outcome):
                    await outcome

        outcome = await self.optimizer.run(fitness_fn, on_generation, log_callback)

        result = self._build_result(outcome)
        if self.evolution_logger is not None:
            self.evolution_logger.log_summary(result.to_dict())
        return result

    def _persist(self, log_callback: Optional[LogCallback] = None) -> None:
        optimizer = self.optimizer
        if self.checkpoints is not None:
            try:
                self.checkpoints.save(optimizer.get_state())
            except (OSError, TypeError, ValueError) as e:
                # A lost checkpoint never ends the run
                logger.error(f"Failed to save checkpoint at generation {optimizer.generation}: {e}")
                if log_callback is not None:
                    log_callback(f"Checkpoint FAILED at generation {optimizer.generation}: {e}")

        if self.evolution_logger is not None:
            self.evolution_logger.log_generation(
                generation=optimizer.generation,
                evaluations=optimizer.evaluations,
                population=optimizer.population,
                best=getattr(optimizer, "best", None),
                pareto_front=getattr(optimizer, "pareto_front", ()),
            )

    def _build_result(self, outcome: Any) -> OptimizationResult:
        optimizer = self.optimizer
        result = OptimizationResult(
            kind=optimizer.kind,
            generations=optimizer.generation,
            evaluations=optimizer.evaluations,
            cancelled=optimizer.is_cancelled,
            history=list(optimizer.history),
            cache_stats=optimizer.cache.get_stats(),
        )
        if isinstance(optimizer, MultiObjectiveOptimizer):
            result.pareto_front = tuple(outcome)
        else:
            result.best = outcome
        return result
