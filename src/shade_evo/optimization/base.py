"""
Shared machinery of the shade-evo optimizers.

Both optimizers evaluate individuals the same way: strictly one at a time,
through the fitness cache, with a cooperative cancellation check before every
external call. They also share state export/import for checkpointing.
"""

import copy
import inspect
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import numpy as np

from ..core.design import Design, DesignCodec
from ..core.errors import CancellationError, CheckpointError, ConfigurationError
from ..core.fitness import coerce_result
from ..core.individual import EvaluationResult, Individual
from ..core.population import Population
from ..utils.fitness_cache import FitnessCache
from .checkpoint import OptimizationCheckpoint
from .config import GenerationHistory, OptimizerConfig

logger = logging.getLogger(__name__)

FitnessFunction = Callable[[Design], Union[Awaitable[Any], Any]]
ProgressCallback = Callable[[int, Any], Union[Awaitable[None], None]]
LogCallback = Callable[[str], None]


class OptimizerPhase(str, Enum):
    """Where an optimizer currently is in its generational loop."""

    IDLE = "idle"
    SEEDING = "seeding"
    EVALUATING = "evaluating"
    SELECTING = "selecting"
    REPRODUCING = "reproducing"
    RANKING = "ranking_and_crowding"
    SELECTING_SURVIVORS = "selecting_survivors"
    TERMINATED = "terminated"


class BaseOptimizer(ABC):
    """
    Base class holding the state every optimizer owns for the duration of a run.

    Attributes:
        config: Optimizer configuration
        codec: Design codec for the configured search space
        rng: numpy random generator, seeded from ``config.seed``
        cache: Fitness cache (signature -> result)
        population: Current generation
        generation: Number of completed generations
        evaluations: Number of individuals evaluated so far (cache hits included)
        history: Per-generation statistics
        phase: Current phase of the generational loop
    """

    kind: Optional[str] = None

    def __init__(self, config: OptimizerConfig):
        """
        Initialize the optimizer.

        Args:
            config: Validated optimizer configuration

        Raises:
            ConfigurationError: If the configuration does not suit this optimizer
        """
        if config.kind != self.kind:
            raise ConfigurationError(
                f"{type(self).__name__} needs a '{self.kind}' configuration, got '{config.kind}'"
            )

        self.config = config
        self.codec = DesignCodec(config.parameters)
        self.constraint = config.parsed_constraint()
        self.rng = np.random.default_rng(config.seed)
        self.cache = FitnessCache()

        # State tracking
        self.population = Population()
        self.generation: int = 0
        self.evaluations: int = 0
        self.history: List[GenerationHistory] = []
        self.phase = OptimizerPhase.IDLE

        self._cancelled = False
        self._log_callback: Optional[LogCallback] = None
        self._generation_cache_hits = 0

        # Configure logging
        logging.getLogger().setLevel(getattr(logging, config.log_level))

        logger.info(
            f"Initialized {type(self).__name__} over {', '.join(self.codec.names)} "
            f"with population size {config.population_size}"
        )

    # ------------------------------------------------------------------
    # Cancellation
    # ------------------------------------------------------------------

    def stop(self) -> None:
        """Request cooperative cancellation; takes effect before the next evaluation."""
        if not self._cancelled:
            logger.info("Cancellation requested - no new evaluations will be started")
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    @abstractmethod
    async def run(
        self,
        fitness_fn: FitnessFunction,
        progress_callback: Optional[ProgressCallback] = None,
        log_callback: Optional[LogCallback] = None,
    ) -> Any:
        """Run (or resume) the optimization until its budget is spent or it is cancelled."""
        pass

    @abstractmethod
    def _score(self, result: EvaluationResult) -> EvaluationResult:
        """Turn raw metrics into the optimizer's usable result."""
        pass

    @abstractmethod
    def _failed_result(self, error: Exception) -> EvaluationResult:
        """Worst-case result for a design whose evaluation failed."""
        pass

    @abstractmethod
    def _default_metric(self) -> str:
        pass

    def _on_evaluated(self, individual: Individual) -> None:
        """Hook called after every evaluation (cached or not)."""

    async def _evaluate_individual(self, individual: Individual, fitness_fn: FitnessFunction) -> bool:
        """
        Evaluate one individual, consulting the cache first.

        Args:
            individual: Individual lacking a result
            fitness_fn: External fitness function

        Returns:
            False if cancellation prevented the evaluation, True otherwise
        """
        if self._cancelled:
            return False

        signature = self.codec.signature(individual.design)
        cached = self.cache.get(signature)

        if cached is not None:
            individual.set_result(cached)
            self._generation_cache_hits += 1
            logger.debug(f"Design {signature}: cached result reused")
        else:
            try:
                raw = fitness_fn(dict(individual.design))
                if inspect.isawaitable(raw):
                    raw = await raw
                result = self._score(self._coerce(raw))
            except CancellationError as e:
                logger.info(f"Fitness function requested cancellation: {e}")
                self.stop()
                return False
            except Exception as e:
                # A single bad evaluation never stops the run
                logger.warning(f"Evaluation failed for {signature}: {e}")
                self._emit_log(f"Evaluation FAILED for {individual.design}: {e}")
                result = self._failed_result(e)
            else:
                if result.failed:
                    self._emit_log(f"Evaluation FAILED for {individual.design}: {result.error}")
                if result.constraint_violated:
                    self._emit_log(f"Constraint FAILED ({self.constraint}) for {individual.design}")

            # Failures are cached too: one external call per signature per run
            self.cache.put(signature, result)
            individual.set_result(result)

        self.evaluations += 1
        self._on_evaluated(individual)
        return True

    async def _evaluate_all(self, individuals: List[Individual], fitness_fn: FitnessFunction) -> bool:
        """
        Evaluate individuals sequentially, in order.

        Returns:
            False if the run was cancelled before all were evaluated
        """
        for individual in individuals:
            if not await self._evaluate_individual(individual, fitness_fn):
                return False
        return True

    def _coerce(self, raw: Any) -> EvaluationResult:
        return coerce_result(raw, self._default_metric())

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _emit_log(self, message: str) -> None:
        if self._log_callback is not None:
            self._log_callback(message)

    async def _report(self, progress_callback: Optional[ProgressCallback], index: int, payload: Any) -> None:
        if progress_callback is None:
            return
        outcome = progress_callback(index, payload)
        if inspect.isawaitable(outcome):
            await outcome

    def _record_generation(self, best_fitness: Optional[float] = None, pareto_front_size: int = 0) -> GenerationHistory:
        stats = self.population.statistics()
        entry = GenerationHistory(
            generation=self.generation,
            evaluations=self.evaluations,
            population_size=stats["size"],
            best_fitness=best_fitness,
            avg_fitness=stats["avg_fitness"],
            pareto_front_size=pareto_front_size,
            n_failed=stats["failed"],
            n_constraint_violations=stats["constraint_violations"],
            cache_hits=self._generation_cache_hits,
        )
        self.history.append(entry)
        self._generation_cache_hits = 0
        return entry

    def _seed_population(self) -> None:
        self.phase = OptimizerPhase.SEEDING
        self.population = Population([
            Individual(design=self.codec.random_design(self.rng), origin="seed", generation=0)
            for _ in range(self.config.population_size)
        ])
        logger.info(f"Seeded population with {self.population.size} random designs")

    # ------------------------------------------------------------------
    # State export / import
    # ------------------------------------------------------------------

    def _extra_state(self) -> Dict[str, Any]:
        return {}

    def _restore_extra(self, checkpoint: OptimizationCheckpoint) -> None:
        pass

    def get_state(self) -> Dict[str, Any]:
        """
        Snapshot the optimizer state.

        Returns:
            JSON-serializable checkpoint dictionary
        """
        checkpoint = OptimizationCheckpoint(
            optimizer_kind=self.kind,
            generation=self.generation,
            evaluations=self.evaluations,
            population=self.population.to_dict(),
            parameters=self.codec.parameters_to_dict(),
            rng_state=copy.deepcopy(self.rng.bit_generator.state),
            cache=self.cache.to_dict(),
            history=[h.to_dict() for h in self.history],
            **self._extra_state(),
        )
        return checkpoint.to_dict()

    def load_state(self, state: Union[Dict[str, Any], OptimizationCheckpoint]) -> None:
        """
        Replace population, counters, RNG state and cache from a checkpoint.

        Args:
            state: Checkpoint object or dictionary from ``get_state()``

        Raises:
            CheckpointError: If the checkpoint is malformed or was produced by a
                different optimizer kind or search space
        """
        checkpoint = state if isinstance(state, OptimizationCheckpoint) else OptimizationCheckpoint.from_dict(state)

        if checkpoint.optimizer_kind != self.kind:
            raise CheckpointError(
                f"Checkpoint was written by a '{checkpoint.optimizer_kind}' optimizer, "
                f"this is a '{self.kind}' optimizer"
            )
        if checkpoint.parameters != self.codec.parameters_to_dict():
            raise CheckpointError("Checkpoint parameter specs do not match the current configuration")

        try:
            population = Population.from_dict(checkpoint.population)
            for individual in population:
                self.codec.validate(individual.design)
        except (ConfigurationError, KeyError, TypeError, ValueError) as e:
            raise CheckpointError(f"Checkpoint population is invalid: {e}") from e

        if population.size != self.config.population_size:
            raise CheckpointError(
                f"Checkpoint population has {population.size} individuals, "
                f"configuration expects {self.config.population_size}"
            )

        try:
            self.rng.bit_generator.state = copy.deepcopy(checkpoint.rng_state)
        except (KeyError, TypeError, ValueError) as e:
            raise CheckpointError(f"Checkpoint random generator state is invalid: {e}") from e

        self.population = population
        self.generation = checkpoint.generation
        self.evaluations = checkpoint.evaluations
        self.history = [GenerationHistory.from_dict(h) for h in checkpoint.history]
        self._restore_extra(checkpoint)

        self.cache.load_entries(checkpoint.cache)
        self.cache.seed_from_population(self.population, self.codec)

        logger.info(
            f"Resumed from generation {self.generation} "
            f"({self.evaluations} evaluations, {len(self.cache)} cached designs)"
        )
