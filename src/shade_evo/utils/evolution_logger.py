"""
Evolution logger for tracking the optimization process.

This module writes one JSON snapshot per completed generation:
- The population with designs, metrics and ranking attributes
- The best design (single objective) or the Pareto front (multi-objective)
- Population statistics

A final summary is written when the run ends. Files are organized under one
directory per run for easy analysis.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from ..core.individual import Individual
from ..core.population import Population

logger = logging.getLogger(__name__)


class EvolutionLogger:
    """
    Per-generation JSON logger for optimization runs.
    """

    def __init__(self, output_dir: Path, run_id: Optional[str] = None):
        """
        Initialize the evolution logger.

        Args:
            output_dir: Base output directory
            run_id: Run identifier used for the subdirectory name
                (defaults to a timestamp)
        """
        self.run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S")
        self.output_dir = Path(output_dir) / f"run_{self.run_id}"
        self.output_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"EvolutionLogger initialized for run {self.run_id} at {self.output_dir}")

    def log_generation(
        self,
        generation: int,
        evaluations: int,
        population: Population,
        best: Optional[Individual] = None,
        pareto_front: Sequence[Individual] = (),
    ) -> Path:
        """
        Log a completed generation.

        Args:
            generation: Generation number (0 for the evaluated seed population)
            evaluations: Evaluations completed so far
            population: Population after replacement
            best: Best individual so far (single objective)
            pareto_front: Current Pareto front (multi-objective)

        Returns:
            Path of the written file
        """
        data = {
            "run_id": self.run_id,
            "generation": generation,
            "evaluations": evaluations,
            "timestamp": datetime.now().isoformat(),
            "population": [self._individual_to_dict(ind, i) for i, ind in enumerate(population)],
            "statistics": population.statistics(),
        }
        if best is not None:
            data["best"] = self._individual_to_dict(best, 0)
        if pareto_front:
            data["pareto_front"] = [self._individual_to_dict(ind, i) for i, ind in enumerate(pareto_front)]

        path = self._save_json(f"generation_{generation}.json", data)
        logger.debug(f"Logged generation {generation}: {len(population)} individuals")
        return path

    def log_summary(self, summary: Dict[str, Any]) -> Path:
        """
        Log the final outcome of a run.

        Args:
            summary: JSON-serializable result summary
        """
        data = {
            "run_id": self.run_id,
            "phase": "final",
            "timestamp": datetime.now().isoformat(),
            **summary,
        }
        path = self._save_json("summary.json", data)
        logger.info(f"Logged run summary to {path}")
        return path

    def _individual_to_dict(self, individual: Individual, idx: int) -> Dict[str, Any]:
        data = individual.to_dict()
        data["id"] = f"ind_{idx}"
        return data

    def _save_json(self, filename: str, data: Dict[str, Any]) -> Path:
        filepath = self.output_dir / filename

        try:
            with open(filepath, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save {filename}: {e}")
        return filepath
