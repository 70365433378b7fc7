#!/usr/bin/env python3
"""
Basic example of using the shade-evo optimizers.

This script demonstrates how to:
1. Load a preset profile and run the single-objective optimizer
2. Configure and run the multi-objective optimizer
3. Checkpoint a run and resume it

The fitness function here is a cheap synthetic stand-in for a daylight
simulation of a south-facing overhang: deeper overhangs cut direct sun
(lower ASE) but also daylight autonomy (lower sDA) once they get too deep.
"""

import asyncio
import logging
import math
import tempfile
from pathlib import Path

from shade_evo import (
    ContinuousParameter,
    MultiObjectiveConfig,
    Objective,
    RunController,
    create_optimizer,
    load_preset,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


async def daylight_model(design):
    """
    Synthetic annual daylight metrics for an overhang design.

    Args:
        design: Mapping with "depth" and "dist-above" in meters

    Returns:
        Metrics dictionary with sDA and ASE percentages
    """
    await asyncio.sleep(0)  # stands in for the simulation round trip

    depth = design["depth"]
    above = design.get("dist-above", 0.0)

    effective = depth / (1.0 + 2.0 * above)
    sda = 85.0 - 30.0 * (effective - 0.5) ** 2 - 8.0 * above
    ase = 30.0 * math.exp(-2.5 * effective)

    return {"sDA": round(sda, 3), "ASE": round(ase, 3)}


async def run_single_objective(workdir: Path):
    """Maximize sDA subject to ASE < 10, from the preset profile."""
    config = load_preset("maximize-daylight", quick=True, seed=42)
    controller = RunController(
        create_optimizer(config),
        checkpoint_path=workdir / "ga_checkpoint.json",
        output_dir=workdir / "ga_logs",
    )

    def on_progress(evaluations, best):
        if best is not None:
            logger.info(f"[GA] {evaluations} evaluations, best sDA {best.fitness:.2f} at {best.design}")

    result = await controller.run(daylight_model, progress_callback=on_progress, log_callback=logger.info)
    logger.info(f"[GA] Best design: {result.best.design if result.best else None}")
    return result


async def run_multi_objective(workdir: Path):
    """Trade sDA against ASE, then resume the run for a few more generations."""
    parameters = [
        ContinuousParameter("depth", 0.1, 1.5, 0.1),
        ContinuousParameter("dist-above", 0.0, 0.5, 0.05),
    ]
    objectives = [Objective("sDA", "maximize"), Objective("ASE", "minimize")]
    checkpoint_path = workdir / "moga_checkpoint.json"

    config = MultiObjectiveConfig(
        parameters=parameters,
        objectives=objectives,
        population_size=12,
        max_generations=4,
        seed=7,
    )
    first = await RunController(create_optimizer(config), checkpoint_path=checkpoint_path).run(daylight_model)
    logger.info(f"[MOGA] First leg: {first.generations} generations, front of {len(first.pareto_front)}")

    # Same search space and seed, larger budget: continue from the checkpoint
    longer = MultiObjectiveConfig(
        parameters=parameters,
        objectives=objectives,
        population_size=12,
        max_generations=8,
        seed=7,
    )
    result = await RunController(create_optimizer(longer), checkpoint_path=checkpoint_path).run(
        daylight_model, resume=True
    )

    logger.info(f"[MOGA] Resumed to generation {result.generations}, {result.evaluations} evaluations")
    for individual in sorted(result.pareto_front, key=lambda i: i.metrics["ASE"]):
        logger.info(f"  {individual.design} -> sDA {individual.metrics['sDA']:.1f}, ASE {individual.metrics['ASE']:.1f}")
    return result


async def main():
    with tempfile.TemporaryDirectory() as tmp:
        workdir = Path(tmp)
        await run_single_objective(workdir)
        await run_multi_objective(workdir)


if __name__ == "__main__":
    asyncio.run(main())
