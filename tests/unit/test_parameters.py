"""
Unit tests for the parameter model.
"""

import numpy as np
import pytest

from shade_evo.core.errors import ConfigurationError
from shade_evo.core.parameters import (
    MAX_PARAMETERS,
    ContinuousParameter,
    DiscreteParameter,
    parameter_from_dict,
    quantize,
    random_value,
    validate_parameters,
)


class TestContinuousParameter:
    """Test cases for ContinuousParameter."""

    def test_valid_parameter(self):
        """Test creating a valid continuous parameter."""
        spec = ContinuousParameter("depth", 0.1, 2.0, 0.1)
        assert spec.kind == "continuous"
        assert spec.decimals == 1
        assert spec.n_steps == 19

    def test_decimals_follow_min_when_finer_than_step(self):
        """Test precision when min is not a multiple of step."""
        spec = ContinuousParameter("offset", 0.05, 1.0, 0.1)
        assert spec.decimals == 2

    def test_integer_step_has_no_decimals(self):
        """Test integer grids format without decimals."""
        spec = ContinuousParameter("slat-angle", -45, 45, 5)
        assert spec.decimals == 0
        assert spec.n_steps == 18

    @pytest.mark.parametrize("kwargs", [
        {"name": "depth", "min": 1.0, "max": 1.0, "step": 0.1},
        {"name": "depth", "min": 2.0, "max": 1.0, "step": 0.1},
        {"name": "depth", "min": 0.0, "max": 1.0, "step": 0.0},
        {"name": "depth", "min": 0.0, "max": 1.0, "step": -0.1},
        {"name": "", "min": 0.0, "max": 1.0, "step": 0.1},
        {"name": "depth", "min": float("nan"), "max": 1.0, "step": 0.1},
        {"name": "depth", "min": True, "max": 1.0, "step": 0.1},
    ])
    def test_invalid_parameter(self, kwargs):
        """Test that invalid bounds and steps are rejected."""
        with pytest.raises(ConfigurationError):
            ContinuousParameter(**kwargs)

    def test_configuration_error_is_value_error(self):
        """Test that configuration errors can be caught as ValueError."""
        with pytest.raises(ValueError):
            ContinuousParameter("depth", 1.0, 0.0, 0.1)

    def test_to_dict(self):
        """Test dictionary form."""
        spec = ContinuousParameter("depth", 0.1, 2.0, 0.1)
        assert spec.to_dict() == {"name": "depth", "kind": "continuous", "min": 0.1, "max": 2.0, "step": 0.1}


class TestDiscreteParameter:
    """Test cases for DiscreteParameter."""

    def test_options_stored_as_tuple(self):
        """Test that any sequence of options is stored immutably."""
        spec = DiscreteParameter("orientation", ["horizontal", "vertical"])
        assert spec.options == ("horizontal", "vertical")
        assert spec.kind == "discrete"

    def test_empty_options_rejected(self):
        with pytest.raises(ConfigurationError):
            DiscreteParameter("orientation", [])

    def test_duplicate_options_rejected(self):
        with pytest.raises(ConfigurationError):
            DiscreteParameter("orientation", ["horizontal", "horizontal"])


class TestParameterFromDict:
    """Test cases for building specs from dictionaries."""

    def test_continuous_from_dict(self):
        spec = parameter_from_dict({"name": "depth", "kind": "continuous", "min": 0.1, "max": 1.5, "step": 0.1})
        assert spec == ContinuousParameter("depth", 0.1, 1.5, 0.1)

    def test_kind_inferred_from_options(self):
        """Test that specs with options are discrete without an explicit kind."""
        spec = parameter_from_dict({"name": "color", "options": ["white", "grey"]})
        assert spec == DiscreteParameter("color", ("white", "grey"))

    def test_type_alias(self):
        spec = parameter_from_dict({"name": "tilt", "type": "continuous", "min": 0, "max": 30, "step": 5})
        assert isinstance(spec, ContinuousParameter)

    def test_round_trip(self):
        """Test that to_dict output is accepted back."""
        spec = DiscreteParameter("color", ("white", "grey"))
        assert parameter_from_dict(spec.to_dict()) == spec

    def test_missing_field(self):
        with pytest.raises(ConfigurationError, match="missing"):
            parameter_from_dict({"name": "depth", "min": 0.1, "max": 1.5})

    def test_unknown_kind(self):
        with pytest.raises(ConfigurationError, match="Unknown parameter kind"):
            parameter_from_dict({"name": "depth", "kind": "integer", "min": 0, "max": 1, "step": 1})


class TestValidateParameters:
    """Test cases for search space validation."""

    def test_no_parameters(self):
        with pytest.raises(ConfigurationError, match="At least one parameter"):
            validate_parameters([])

    def test_too_many_parameters(self):
        specs = [ContinuousParameter(f"p{i}", 0.0, 1.0, 0.1) for i in range(MAX_PARAMETERS + 1)]
        with pytest.raises(ConfigurationError, match="Maximum"):
            validate_parameters(specs)

    def test_duplicate_names(self):
        specs = [ContinuousParameter("depth", 0.0, 1.0, 0.1), DiscreteParameter("depth", ("a", "b"))]
        with pytest.raises(ConfigurationError, match="Duplicate"):
            validate_parameters(specs)

    def test_accepts_dictionaries(self):
        specs = validate_parameters([{"name": "depth", "min": 0.1, "max": 1.5, "step": 0.1}])
        assert specs == [ContinuousParameter("depth", 0.1, 1.5, 0.1)]


class TestQuantize:
    """Test cases for grid quantization."""

    @pytest.fixture
    def depth(self):
        return ContinuousParameter("depth", 0.1, 2.0, 0.1)

    def test_snaps_to_nearest_step(self, depth):
        assert quantize(depth, 0.3333) == 0.3
        assert quantize(depth, 0.68) == 0.7

    def test_removes_floating_noise(self, depth):
        assert quantize(depth, 0.1 + 0.2) == 0.3

    def test_clamps_to_bounds(self, depth):
        assert quantize(depth, -5.0) == 0.1
        assert quantize(depth, 5.0) == 2.0

    def test_stays_in_bounds_when_step_does_not_divide_range(self):
        """Test that the top of a partial grid is the last whole step."""
        spec = ContinuousParameter("x", 0.0, 1.0, 0.3)
        assert quantize(spec, 1.0) == 0.9
        assert quantize(spec, 0.95) == 0.9

    def test_nan_rejected(self, depth):
        with pytest.raises(ValueError):
            quantize(depth, float("nan"))

    @pytest.mark.parametrize("spec", [
        ContinuousParameter("depth", 0.1, 2.0, 0.1),
        ContinuousParameter("dist-above", 0.0, 0.5, 0.05),
        ContinuousParameter("slat-angle", -45, 45, 5),
        ContinuousParameter("x", 0.0, 1.0, 0.3),
    ])
    def test_on_grid_in_bounds_and_idempotent(self, spec):
        """Test the quantization invariants over a sweep of raw values."""
        span = spec.max - spec.min
        for raw in np.linspace(spec.min - span, spec.max + span, 257):
            value = quantize(spec, raw)
            assert spec.min <= value <= spec.max
            index = round((value - spec.min) / spec.step)
            assert abs(spec.min + index * spec.step - value) < 1e-9
            assert quantize(spec, value) == value


class TestRandomValue:
    """Test cases for random sampling."""

    def test_continuous_values_on_grid(self):
        spec = ContinuousParameter("dist-above", 0.0, 0.5, 0.05)
        rng = np.random.default_rng(0)
        for _ in range(200):
            value = random_value(spec, rng)
            assert quantize(spec, value) == value

    def test_continuous_reaches_both_bounds(self):
        spec = ContinuousParameter("depth", 0.1, 0.3, 0.1)
        rng = np.random.default_rng(1)
        values = {random_value(spec, rng) for _ in range(200)}
        assert values == {0.1, 0.2, 0.3}

    def test_discrete_membership(self):
        spec = DiscreteParameter("orientation", ("horizontal", "vertical", "tilted"))
        rng = np.random.default_rng(2)
        values = {random_value(spec, rng) for _ in range(200)}
        assert values == set(spec.options)
