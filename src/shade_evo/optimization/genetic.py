"""
Single-objective genetic optimizer for shade-evo.

Generational loop with tournament selection, per-parameter crossover and
mutation, and elitism of size 1:

    Seeding -> Evaluating -> Selecting -> Reproducing -> (loop) -> Terminated

The run is bounded by an evaluation budget. The best individual ever
evaluated is tracked separately from the population, so a cancelled run
still returns the best design it has seen.
"""

import logging
import math
from typing import Any, Dict, Optional

from ..core.fitness import FitnessScorer
from ..core.individual import EvaluationResult, Individual
from ..selection.tournament import scalar_fitness_key, tournament_select
from ..variation.crossover import crossover
from ..variation.mutation import mutate
from .base import BaseOptimizer, FitnessFunction, LogCallback, OptimizerPhase, ProgressCallback
from .checkpoint import OptimizationCheckpoint
from .config import GA_KIND, GeneticConfig

logger = logging.getLogger(__name__)


class GeneticOptimizer(BaseOptimizer):
    """
    Maximizes one scalar fitness derived from the evaluation metrics.

    Example usage:
        ```python
        config = GeneticConfig(
            parameters=[ContinuousParameter("depth", 0.1, 2.0, 0.1)],
            population_size=8,
            max_evaluations=40,
            objective=SingleObjective(metric="sDA", direction="maximize"),
            constraint="ASE < 10",
        )
        optimizer = GeneticOptimizer(config)
        best = await optimizer.run(fitness_fn, progress_callback)
        ```
    """

    kind = GA_KIND

    def __init__(self, config: GeneticConfig):
        super().__init__(config)
        self.scorer = FitnessScorer(config.objective, self.constraint)
        self.best: Optional[Individual] = None

    async def run(
        self,
        fitness_fn: FitnessFunction,
        progress_callback: Optional[ProgressCallback] = None,
        log_callback: Optional[LogCallback] = None,
    ) -> Optional[Individual]:
        """
        Run (or resume) the optimization.

        Args:
            fitness_fn: ``async (design) -> EvaluationResult | metrics | number``
            progress_callback: Called after every generation with
                ``(evaluations_completed, best_individual)``
            log_callback: Receives human-readable messages about failed
                evaluations and constraint violations

        Returns:
            Best individual seen across the run, or None if no evaluation
            produced a usable fitness
        """
        self._cancelled = False
        self._log_callback = log_callback
        max_evaluations = self.config.max_evaluations

        if self.population.is_empty():
            self._seed_population()

        pending = self.population.get_unevaluated()
        if pending:
            self.phase = OptimizerPhase.EVALUATING
            logger.info(f"Evaluating {len(pending)} unevaluated designs")
            if not await self._evaluate_all(pending, fitness_fn):
                return self._terminate()
            self._finish_generation()
            await self._report(progress_callback, self.evaluations, self.best)

        while self.evaluations < max_evaluations and not self._cancelled:
            # Selecting: the elite is the best of the current population
            self.phase = OptimizerPhase.SELECTING
            ranked = self.population.ranked()
            elite = ranked[0]

            # Reproducing: never breed more children than the budget allows
            self.phase = OptimizerPhase.REPRODUCING
            n_offspring = min(self.config.population_size - 1, max_evaluations - self.evaluations)
            offspring = [self._breed() for _ in range(n_offspring)]

            self.phase = OptimizerPhase.EVALUATING
            if not await self._evaluate_all(offspring, fitness_fn):
                break

            # Keep the population at N when the budget cut the brood short
            n_fill = self.config.population_size - 1 - n_offspring
            fill = ranked[1:1 + n_fill]
            self.population.replace([elite] + offspring + fill)

            self.generation += 1
            self._finish_generation()
            await self._report(progress_callback, self.evaluations, self.best)

        return self._terminate()

    def _breed(self) -> Individual:
        """Tournament-select two parents, cross them over and mutate the child."""
        k = self.config.tournament_size
        parent_a = tournament_select(self.population.individuals, self.rng, k=k, key=scalar_fitness_key)
        parent_b = tournament_select(self.population.individuals, self.rng, k=k, key=scalar_fitness_key)

        child = crossover(parent_a.design, parent_b.design, self.codec.parameters, self.rng)
        child = mutate(child, self.codec.parameters, self.config.mutation_rate, self.rng,
                       scale=self.config.mutation_scale)

        return Individual(design=child, origin="offspring", generation=self.generation + 1)

    def _finish_generation(self) -> None:
        entry = self._record_generation(best_fitness=self.best.fitness if self.best else None)

        if self.config.log_generation_stats:
            best_str = f"{entry.best_fitness:.4f}" if entry.best_fitness is not None else "n/a"
            avg_str = f"{entry.avg_fitness:.4f}" if entry.avg_fitness is not None else "n/a"
            logger.info(
                f"Gen {self.generation}: evals={self.evaluations}/{self.config.max_evaluations}, "
                f"best={best_str}, avg={avg_str}, "
                f"failed={entry.n_failed}, cache_hits={entry.cache_hits}"
            )

    def _terminate(self) -> Optional[Individual]:
        self.phase = OptimizerPhase.TERMINATED
        if self._cancelled:
            logger.info(f"Optimization cancelled after {self.evaluations} evaluations")
        else:
            logger.info(f"Optimization complete after {self.evaluations} evaluations")
        if self.best is not None:
            logger.info(f"Best design: {self.best.design} (fitness {self.best.fitness:.4f})")
        return self.best.clone() if self.best is not None else None

    # ------------------------------------------------------------------
    # Scoring hooks
    # ------------------------------------------------------------------

    def _default_metric(self) -> str:
        return self.config.objective.metric

    def _score(self, result: EvaluationResult) -> EvaluationResult:
        return self.scorer.score(result)

    def _failed_result(self, error: Exception) -> EvaluationResult:
        return EvaluationResult(metrics={}, fitness=-math.inf, failed=True, error=str(error))

    def _on_evaluated(self, individual: Individual) -> None:
        fitness = individual.fitness
        if fitness is None or not math.isfinite(fitness):
            return
        if self.best is None or fitness > self.best.fitness:
            self.best = individual.clone()
            logger.info(f"New best at evaluation {self.evaluations}: {individual.design} (fitness {fitness:.4f})")
            self._emit_log(f"Eval #{self.evaluations}: new best {fitness:.4f} for {individual.design}")

    # ------------------------------------------------------------------
    # Checkpointing
    # ------------------------------------------------------------------

    def _extra_state(self) -> Dict[str, Any]:
        return {"best": self.best.to_dict() if self.best is not None else None}

    def _restore_extra(self, checkpoint: OptimizationCheckpoint) -> None:
        self.best = Individual.from_dict(checkpoint.best) if checkpoint.best else None
