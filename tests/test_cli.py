"""
Unit tests for the command-line interface.
"""

import pytest

from shade_evo import cli
from shade_evo.optimization.config import GeneticConfig, MultiObjectiveConfig
from shade_evo.optimization.presets import QUICK_MAX_EVALUATIONS, QUICK_POPULATION_SIZE


def overhang_fitness(design):
    """Fitness function resolved by name in the tests below."""
    return {"sDA": 80.0 - 10.0 * abs(design["depth"] - 0.6), "ASE": 12.0 - 5.0 * design["depth"]}


class TestParseArguments:
    """Test suite for parse_arguments()."""

    def test_preset(self):
        args = cli.parse_arguments(["--preset", "maximize-daylight", "--fitness", "sim:run", "--quick"])

        assert args.preset == "maximize-daylight"
        assert args.config is None
        assert args.quick
        assert not args.resume

    def test_config_and_preset_are_exclusive(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments(["--preset", "minimize-glare", "--config", "a.yaml", "--fitness", "sim:run"])

    def test_fitness_is_required(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments(["--preset", "minimize-glare"])

    def test_unknown_preset(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments(["--preset", "maximize-views", "--fitness", "sim:run"])

    def test_resume_requires_checkpoint(self):
        with pytest.raises(SystemExit):
            cli.parse_arguments(["--preset", "minimize-glare", "--fitness", "sim:run", "--resume"])


class TestResolveFitnessFunction:
    """Test suite for resolve_fitness_function()."""

    def test_resolves_callable(self):
        assert cli.resolve_fitness_function("test_cli:overhang_fitness") is overhang_fitness

    @pytest.mark.parametrize("spec", ["test_cli", "test_cli:", ":overhang_fitness"])
    def test_malformed_reference(self, spec):
        with pytest.raises(ValueError, match="module:function"):
            cli.resolve_fitness_function(spec)

    def test_not_callable(self):
        with pytest.raises(ValueError, match="not a callable"):
            cli.resolve_fitness_function("test_cli:pytest")  # a module, not a function

    def test_missing_module(self):
        with pytest.raises(ImportError):
            cli.resolve_fitness_function("no_such_module_here:run")


class TestBuildConfig:
    """Test suite for build_config()."""

    def test_quick_preset_with_seed(self):
        args = cli.parse_arguments(["--preset", "maximize-daylight", "--fitness", "m:f", "--quick", "--seed", "4"])
        config = cli.build_config(args)

        assert isinstance(config, GeneticConfig)
        assert config.population_size == QUICK_POPULATION_SIZE
        assert config.max_evaluations == QUICK_MAX_EVALUATIONS
        assert config.seed == 4

    def test_quick_yaml_genetic(self, tmp_path, depth_parameter):
        path = tmp_path / "ga.yaml"
        GeneticConfig(parameters=[depth_parameter], population_size=30, max_evaluations=300).to_yaml(path)

        args = cli.parse_arguments(["--config", str(path), "--fitness", "m:f", "--quick"])
        config = cli.build_config(args)

        assert config.population_size == QUICK_POPULATION_SIZE
        assert config.max_evaluations == QUICK_MAX_EVALUATIONS

    def test_quick_ignored_for_multi_objective(self, tmp_path, overhang_parameters, daylight_objectives):
        path = tmp_path / "moga.yaml"
        MultiObjectiveConfig(parameters=overhang_parameters, objectives=daylight_objectives,
                             population_size=10).to_yaml(path)

        args = cli.parse_arguments(["--config", str(path), "--fitness", "m:f", "--quick"])
        config = cli.build_config(args)

        assert isinstance(config, MultiObjectiveConfig)
        assert config.population_size == 10


class TestMain:
    """Test suite for main()."""

    def test_runs_preset(self, tmp_path):
        checkpoint = tmp_path / "checkpoint.json"
        code = cli.main([
            "--preset", "maximize-daylight", "--fitness", "test_cli:overhang_fitness",
            "--quick", "--seed", "1", "--checkpoint", str(checkpoint), "--output-dir", str(tmp_path / "logs"),
        ])

        assert code == 0
        assert checkpoint.exists()
        assert list((tmp_path / "logs").glob("run_*/summary.json"))

    def test_bad_fitness_reference_fails(self):
        assert cli.main(["--preset", "maximize-daylight", "--fitness", "not-a-reference"]) == 1

    def test_corrupt_checkpoint_fails(self, tmp_path):
        checkpoint = tmp_path / "checkpoint.json"
        checkpoint.write_text("garbage")

        code = cli.main([
            "--preset", "minimize-glare", "--fitness", "test_cli:overhang_fitness",
            "--checkpoint", str(checkpoint), "--resume",
        ])
        assert code == 1
