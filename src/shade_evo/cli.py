"""
Command-line interface for shade-evo.

Loads a YAML configuration or a preset profile, imports the fitness function
given as ``module:function`` and runs it under a RunController with
checkpointing. Ctrl-C requests a cooperative stop; the run then ends after
the current evaluation and the last checkpoint stays resumable.

Usage:
    shade-evo --preset maximize-daylight --fitness my_sim:evaluate --quick
    shade-evo --config optimization.yaml --fitness my_sim:evaluate \\
        --checkpoint runs/checkpoint.json --resume
"""

import argparse
import asyncio
import dataclasses
import importlib
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Callable, List, Optional

from .core.errors import OptimizationError
from .optimization.config import GeneticConfig, OptimizerConfig, load_config
from .optimization.controller import OptimizationResult, RunController, create_optimizer
from .optimization.presets import QUICK_MAX_EVALUATIONS, QUICK_POPULATION_SIZE, list_presets, load_preset

logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Optimize a shading device design with a genetic algorithm",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Quick single-objective run from a preset
  shade-evo --preset maximize-daylight --fitness my_sim:evaluate --quick

  # Multi-objective run from YAML, resumable
  shade-evo --config moga.yaml --fitness my_sim:evaluate --checkpoint runs/cp.json --resume
        """
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--config",
        type=str,
        help="Path to an optimization config YAML"
    )
    source.add_argument(
        "--preset",
        type=str,
        choices=list_presets(),
        help="Preset profile to run"
    )

    parser.add_argument(
        "--fitness",
        type=str,
        required=True,
        help="Fitness function as module:function (sync or async, takes a design dict)"
    )

    parser.add_argument(
        "--quick",
        action="store_true",
        default=False,
        help=f"Quick mode: population {QUICK_POPULATION_SIZE}, {QUICK_MAX_EVALUATIONS} max evaluations"
    )

    parser.add_argument(
        "--checkpoint",
        type=str,
        default=None,
        help="Checkpoint file written after every generation"
    )

    parser.add_argument(
        "--resume",
        action="store_true",
        default=False,
        help="Resume from --checkpoint if it exists"
    )

    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for per-generation JSON logs"
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (overrides the config)"
    )

    args = parser.parse_args(argv)
    if args.resume and not args.checkpoint:
        parser.error("--resume requires --checkpoint")
    return args


def resolve_fitness_function(spec: str) -> Callable:
    """
    Import a fitness function given as ``module:function``.

    Raises:
        ValueError: If the reference is malformed or does not name a callable
    """
    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ValueError(f"Fitness function must be given as module:function, got {spec!r}")

    module = importlib.import_module(module_name)
    fn = getattr(module, attr, None)
    if not callable(fn):
        raise ValueError(f"{spec!r} is not a callable")
    return fn


def build_config(args: argparse.Namespace) -> OptimizerConfig:
    """Load the configuration selected on the command line and apply overrides."""
    if args.preset:
        config = load_preset(args.preset, quick=args.quick)
    else:
        config = load_config(Path(args.config))
        if args.quick:
            if isinstance(config, GeneticConfig):
                config = dataclasses.replace(
                    config, population_size=QUICK_POPULATION_SIZE, max_evaluations=QUICK_MAX_EVALUATIONS
                )
            else:
                logger.warning("--quick only applies to single-objective runs; ignoring")

    if args.seed is not None:
        config = dataclasses.replace(config, seed=args.seed)
    return config


def _log_result(result: OptimizationResult) -> None:
    status = "cancelled" if result.cancelled else "finished"
    logger.info(f"Run {status}: {result.generations} generations, {result.evaluations} evaluations")
    logger.info(f"Cache: {result.cache_stats}")

    if result.best is not None:
        logger.info(f"Best design: {json.dumps(result.best.design)} (fitness {result.best.fitness:.4f})")
    elif result.pareto_front:
        logger.info(f"Pareto front ({len(result.pareto_front)} designs):")
        for individual in result.pareto_front:
            flag = " [constraint violated]" if individual.constraint_violated else ""
            logger.info(f"  {json.dumps(individual.design)} -> {individual.metrics}{flag}")
    else:
        logger.warning("No usable design was found")


async def run(args: argparse.Namespace) -> OptimizationResult:
    config = build_config(args)
    fitness_fn = resolve_fitness_function(args.fitness)

    controller = RunController(
        create_optimizer(config),
        checkpoint_path=args.checkpoint,
        output_dir=args.output_dir,
    )

    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, controller.cancel)
    except (NotImplementedError, RuntimeError):
        # No signal handlers on this platform; Ctrl-C aborts instead
        pass

    result = await controller.run(fitness_fn, resume=args.resume)
    _log_result(result)
    return result


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    args = parse_arguments(argv)

    try:
        asyncio.run(run(args))
    except (OptimizationError, ValueError, ImportError) as e:
        logger.error(f"Optimization failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
