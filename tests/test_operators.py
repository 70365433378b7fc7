"""
Unit tests for tournament selection, crossover and mutation.
"""

import math
from collections import Counter

import numpy as np
import pytest

from shade_evo.core.design import DesignCodec
from shade_evo.core.individual import EvaluationResult, Individual
from shade_evo.core.parameters import ContinuousParameter, DiscreteParameter, quantize
from shade_evo.selection.tournament import crowded_comparison_key, scalar_fitness_key, tournament_select
from shade_evo.variation.crossover import crossover
from shade_evo.variation.mutation import mutate


def _scored(fitness, **design):
    return Individual(design=design, result=EvaluationResult(fitness=fitness))


class TestTournamentSelect:
    """Test suite for tournament selection."""

    def test_empty_population(self):
        with pytest.raises(ValueError):
            tournament_select([], np.random.default_rng(0))

    def test_full_tournament_picks_best(self):
        """Test that k equal to the population size always returns the best."""
        individuals = [_scored(f, depth=f) for f in (0.2, 0.9, 0.5)]
        rng = np.random.default_rng(0)
        for _ in range(20):
            assert tournament_select(individuals, rng, k=3).fitness == 0.9

    def test_k_capped_at_population_size(self):
        individuals = [_scored(1.0, depth=0.1), _scored(2.0, depth=0.2)]
        assert tournament_select(individuals, np.random.default_rng(0), k=10).fitness == 2.0

    def test_worst_never_wins_binary_tournament(self):
        """Test that with k=2 and distinct fitness the worst individual is never chosen."""
        individuals = [_scored(float(f), depth=f) for f in range(5)]
        rng = np.random.default_rng(4)
        winners = Counter(tournament_select(individuals, rng, k=2).fitness for _ in range(500))
        assert winners[0.0] == 0
        assert winners[4.0] > winners[1.0]

    def test_failed_individuals_lose(self):
        failed = _scored(-math.inf, depth=0.1)
        ok = _scored(-5.0, depth=0.2)
        assert tournament_select([failed, ok], np.random.default_rng(1), k=2) is ok

    def test_crowded_comparison(self):
        """Test that lower rank wins, then larger crowding distance."""
        front_crowded = Individual(design={}, rank=0, crowding_distance=0.1)
        front_sparse = Individual(design={}, rank=0, crowding_distance=math.inf)
        dominated = Individual(design={}, rank=1, crowding_distance=math.inf)

        assert crowded_comparison_key(front_crowded) > crowded_comparison_key(dominated)
        assert crowded_comparison_key(front_sparse) > crowded_comparison_key(front_crowded)
        winner = tournament_select([dominated, front_crowded], np.random.default_rng(0), k=2,
                                   key=crowded_comparison_key)
        assert winner is front_crowded

    def test_scalar_key_matches_fitness(self):
        assert scalar_fitness_key(_scored(3.5, depth=0.1)) == 3.5


class TestCrossover:
    """Test suite for the crossover operator."""

    def test_child_is_between_parents_and_on_grid(self, mixed_parameters):
        rng = np.random.default_rng(5)
        depth = mixed_parameters[0]
        a = {"depth": 0.3, "orientation": "horizontal"}
        b = {"depth": 1.7, "orientation": "tilted"}
        for _ in range(100):
            child = crossover(a, b, mixed_parameters, rng)
            assert 0.3 <= child["depth"] <= 1.7
            assert quantize(depth, child["depth"]) == child["depth"]
            assert child["orientation"] in ("horizontal", "tilted")

    def test_discrete_picks_both_parents(self, mixed_parameters):
        rng = np.random.default_rng(6)
        a = {"depth": 0.3, "orientation": "horizontal"}
        b = {"depth": 0.3, "orientation": "vertical"}
        picks = {crossover(a, b, mixed_parameters, rng)["orientation"] for _ in range(50)}
        assert picks == {"horizontal", "vertical"}

    def test_identical_parents(self, mixed_parameters):
        parent = {"depth": 1.2, "orientation": "vertical"}
        assert crossover(parent, dict(parent), mixed_parameters, np.random.default_rng(7)) == parent

    def test_parents_not_modified(self, mixed_parameters):
        a = {"depth": 0.3, "orientation": "horizontal"}
        b = {"depth": 1.7, "orientation": "tilted"}
        crossover(a, b, mixed_parameters, np.random.default_rng(8))
        assert a == {"depth": 0.3, "orientation": "horizontal"}

    def test_deterministic_for_seed(self, mixed_parameters):
        a = {"depth": 0.3, "orientation": "horizontal"}
        b = {"depth": 1.7, "orientation": "tilted"}
        first = crossover(a, b, mixed_parameters, np.random.default_rng(9))
        second = crossover(a, b, mixed_parameters, np.random.default_rng(9))
        assert first == second


class TestMutate:
    """Test suite for the mutation operator."""

    def test_rate_zero_is_identity(self, mixed_parameters):
        design = {"depth": 1.0, "orientation": "vertical"}
        assert mutate(design, mixed_parameters, 0.0, np.random.default_rng(0)) == design

    def test_rate_one_changes_discrete(self, mixed_parameters):
        """Test that a discrete mutation always picks a different option."""
        rng = np.random.default_rng(1)
        design = {"depth": 1.0, "orientation": "vertical"}
        for _ in range(50):
            assert mutate(design, mixed_parameters, 1.0, rng)["orientation"] != "vertical"

    def test_single_option_is_noop(self):
        parameters = [DiscreteParameter("color", ("white",))]
        assert mutate({"color": "white"}, parameters, 1.0, np.random.default_rng(2)) == {"color": "white"}

    def test_continuous_stays_valid(self, mixed_parameters):
        codec = DesignCodec(mixed_parameters)
        rng = np.random.default_rng(3)
        design = {"depth": 2.0, "orientation": "tilted"}
        for _ in range(200):
            design = mutate(design, mixed_parameters, 1.0, rng)
            codec.validate(design)

    def test_continuous_delta_bounded(self):
        """Test that one mutation moves at most scale/2 of the range (rounded to the grid)."""
        spec = ContinuousParameter("depth", 0.0, 10.0, 0.1)
        rng = np.random.default_rng(4)
        for _ in range(200):
            mutated = mutate({"depth": 5.0}, [spec], 1.0, rng, scale=0.2)
            assert abs(mutated["depth"] - 5.0) <= 1.0 + 1e-9

    def test_continuous_moves_at_least_to_neighbors(self):
        """Test that a narrow range still mutates across at least one step."""
        spec = ContinuousParameter("tilt", 0, 30, 5)
        rng = np.random.default_rng(5)
        values = {mutate({"tilt": 15.0}, [spec], 1.0, rng)["tilt"] for _ in range(200)}
        assert {10.0, 20.0} <= values

    def test_input_not_modified(self, mixed_parameters):
        design = {"depth": 1.0, "orientation": "vertical"}
        mutate(design, mixed_parameters, 1.0, np.random.default_rng(6))
        assert design == {"depth": 1.0, "orientation": "vertical"}
