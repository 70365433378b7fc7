"""
Multi-objective (Pareto) optimizer for shade-evo.

NSGA-II style loop:

    Seeding -> Evaluating -> RankingAndCrowding -> SelectingSurvivors
        -> Reproducing -> (loop) -> Terminated

Each generation breeds N offspring with crowded-comparison tournaments,
evaluates them, sorts the combined parent + offspring pool into
non-domination fronts and keeps the N best by (rank, crowding distance).
The first front of the pool is reported as the Pareto front.
"""

import logging
from typing import Any, Dict, Optional, Tuple

from ..core.errors import EvaluationError
from ..core.fitness import as_number, lookup_metric
from ..core.individual import EvaluationResult, Individual
from ..selection.nsga import rank_population, select_survivors
from ..selection.tournament import crowded_comparison_key, tournament_select
from ..variation.crossover import crossover
from ..variation.mutation import mutate
from .base import BaseOptimizer, FitnessFunction, LogCallback, OptimizerPhase, ProgressCallback
from .checkpoint import OptimizationCheckpoint
from .config import MOGA_KIND, MultiObjectiveConfig

logger = logging.getLogger(__name__)

ParetoFront = Tuple[Individual, ...]


class MultiObjectiveOptimizer(BaseOptimizer):
    """
    Searches for the trade-off front between two or more objectives.

    Example usage:
        ```python
        config = MultiObjectiveConfig(
            parameters=[ContinuousParameter("depth", 0.1, 1.5, 0.1)],
            objectives=[Objective("sDA", "maximize"), Objective("ASE", "minimize")],
            population_size=10,
            max_generations=15,
        )
        optimizer = MultiObjectiveOptimizer(config)
        front = await optimizer.run(fitness_fn, progress_callback)
        ```
    """

    kind = MOGA_KIND

    def __init__(self, config: MultiObjectiveConfig):
        super().__init__(config)
        self.objectives = list(config.objectives)
        self.pareto_front: ParetoFront = ()

    async def run(
        self,
        fitness_fn: FitnessFunction,
        progress_callback: Optional[ProgressCallback] = None,
        log_callback: Optional[LogCallback] = None,
    ) -> ParetoFront:
        """
        Run (or resume) the optimization.

        Args:
            fitness_fn: ``async (design) -> EvaluationResult | metrics``; the
                metrics must contain every objective name
            progress_callback: Called after every generation with
                ``(generation, pareto_front)``
            log_callback: Receives human-readable messages about failed
                evaluations and constraint violations

        Returns:
            Pareto front of the last completed generation (clones)
        """
        self._cancelled = False
        self._log_callback = log_callback

        if self.population.is_empty():
            self._seed_population()

        pending = self.population.get_unevaluated()
        if pending:
            self.phase = OptimizerPhase.EVALUATING
            logger.info(f"Evaluating {len(pending)} unevaluated designs")
            if not await self._evaluate_all(pending, fitness_fn):
                return self._terminate()

            # Initial ranking so the first tournaments have ranks to compare
            self.phase = OptimizerPhase.RANKING
            fronts = rank_population(self.population.individuals, self.objectives)
            self.pareto_front = tuple(i.clone() for i in fronts[0])
            self._finish_generation()
            await self._report(progress_callback, self.generation, self.pareto_front)

        while self.generation < self.config.max_generations and not self._cancelled:
            self.phase = OptimizerPhase.REPRODUCING
            offspring = [self._breed() for _ in range(self.config.population_size)]

            self.phase = OptimizerPhase.EVALUATING
            if not await self._evaluate_all(offspring, fitness_fn):
                break

            self.phase = OptimizerPhase.RANKING
            pool = self.population.individuals + offspring

            self.phase = OptimizerPhase.SELECTING_SURVIVORS
            survivors = select_survivors(pool, self.objectives, self.config.population_size)
            # Sorting tagged every pool member, so rank 0 is the whole first front
            self.pareto_front = tuple(i.clone() for i in pool if i.rank == 0)
            self.population.replace(survivors)

            self.generation += 1
            self._finish_generation()
            await self._report(progress_callback, self.generation, self.pareto_front)

        return self._terminate()

    def _breed(self) -> Individual:
        k = self.config.tournament_size
        parent_a = tournament_select(self.population.individuals, self.rng, k=k, key=crowded_comparison_key)
        parent_b = tournament_select(self.population.individuals, self.rng, k=k, key=crowded_comparison_key)

        child = crossover(parent_a.design, parent_b.design, self.codec.parameters, self.rng)
        child = mutate(child, self.codec.parameters, self.config.mutation_rate, self.rng,
                       scale=self.config.mutation_scale)

        return Individual(design=child, origin="offspring", generation=self.generation + 1)

    def _finish_generation(self) -> None:
        entry = self._record_generation(pareto_front_size=len(self.pareto_front))

        if self.config.log_generation_stats:
            ranges = ", ".join(self._front_range(o) for o in self.objectives)
            logger.info(
                f"Gen {self.generation}/{self.config.max_generations}: "
                f"front={len(self.pareto_front)} ({ranges}), evals={self.evaluations}, "
                f"failed={entry.n_failed}, violations={entry.n_constraint_violations}, "
                f"cache_hits={entry.cache_hits}"
            )

    def _front_range(self, objective) -> str:
        values = [objective.value(i.metrics) for i in self.pareto_front]
        if not values:
            return f"{objective.name}=n/a"
        return f"{objective.name}=[{min(values):.3g}, {max(values):.3g}]"

    def _terminate(self) -> ParetoFront:
        self.phase = OptimizerPhase.TERMINATED
        status = "cancelled" if self._cancelled else "complete"
        logger.info(
            f"Optimization {status} at generation {self.generation} "
            f"({self.evaluations} evaluations, front of {len(self.pareto_front)})"
        )
        return tuple(i.clone() for i in self.pareto_front)

    # ------------------------------------------------------------------
    # Scoring hooks
    # ------------------------------------------------------------------

    def _default_metric(self) -> str:
        return self.objectives[0].name

    def _score(self, result: EvaluationResult) -> EvaluationResult:
        """
        Check that every objective was reported and flag constraint violations.

        Violators keep their raw metrics and stay in the ranking.

        Raises:
            EvaluationError: If an objective metric is missing or not numeric
        """
        if result.failed:
            result.metrics.update({o.name: o.worst_value for o in self.objectives})
            return result

        missing = [o.name for o in self.objectives
                   if as_number(lookup_metric(result.metrics, o.name)) is None]
        if missing:
            raise EvaluationError(f"Evaluation did not report numeric objectives: {', '.join(missing)}")

        if self.constraint is not None and self.constraint.check(result.metrics) is False:
            result.constraint_violated = True
            logger.warning(f"Constraint failed ({self.constraint}): metrics={result.metrics}")
        return result

    def _failed_result(self, error: Exception) -> EvaluationResult:
        return EvaluationResult(
            metrics={o.name: o.worst_value for o in self.objectives},
            failed=True,
            error=str(error),
        )

    # ------------------------------------------------------------------
    # Checkpointing
    # ------------------------------------------------------------------

    def _extra_state(self) -> Dict[str, Any]:
        return {"pareto_front": [i.to_dict() for i in self.pareto_front]}

    def _restore_extra(self, checkpoint: OptimizationCheckpoint) -> None:
        self.pareto_front = tuple(Individual.from_dict(d) for d in checkpoint.pareto_front)
