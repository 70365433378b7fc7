"""
Unit tests for the design codec.
"""

import numpy as np
import pytest

from shade_evo.core.design import DesignCodec
from shade_evo.core.errors import ConfigurationError
from shade_evo.core.parameters import ContinuousParameter, DiscreteParameter


@pytest.fixture
def codec():
    return DesignCodec([
        ContinuousParameter("depth", 0.1, 2.0, 0.1),
        ContinuousParameter("dist-above", 0.0, 0.5, 0.05),
        DiscreteParameter("orientation", ("horizontal", "vertical")),
    ])


class TestSignature:
    """Test cases for canonical design signatures."""

    def test_format(self, codec):
        design = {"depth": 0.6, "dist-above": 0.1, "orientation": "vertical"}
        assert codec.signature(design) == 'depth=0.6;dist-above=0.10;orientation="vertical"'

    def test_key_order_does_not_matter(self, codec):
        a = {"depth": 0.6, "dist-above": 0.1, "orientation": "vertical"}
        b = {"orientation": "vertical", "dist-above": 0.1, "depth": 0.6}
        assert codec.signature(a) == codec.signature(b)

    def test_floating_noise_does_not_matter(self, codec):
        """Test that designs equal up to floating point noise share a signature."""
        a = {"depth": 0.1 + 0.2, "dist-above": 0.15, "orientation": "horizontal"}
        b = {"depth": 0.3, "dist-above": 0.15000000000000002, "orientation": "horizontal"}
        assert codec.signature(a) == codec.signature(b)

    def test_different_designs_differ(self, codec):
        a = {"depth": 0.3, "dist-above": 0.15, "orientation": "horizontal"}
        b = {"depth": 0.4, "dist-above": 0.15, "orientation": "horizontal"}
        assert codec.signature(a) != codec.signature(b)

    def test_numeric_discrete_options(self):
        codec = DesignCodec([DiscreteParameter("slats", (4, 8, 12))])
        assert codec.signature({"slats": 8}) == "slats=8"


class TestNormalizeAndValidate:
    """Test cases for normalization and validation."""

    def test_normalize_quantizes(self, codec):
        design = {"depth": 0.64, "dist-above": 0.26, "orientation": "vertical"}
        assert codec.normalize(design) == {"depth": 0.6, "dist-above": 0.25, "orientation": "vertical"}

    def test_normalize_does_not_modify_input(self, codec):
        design = {"depth": 0.64, "dist-above": 0.26, "orientation": "vertical"}
        codec.normalize(design)
        assert design["depth"] == 0.64

    def test_validate_accepts_grid_values(self, codec):
        codec.validate({"depth": 0.1 + 0.2, "dist-above": 0.5, "orientation": "horizontal"})

    def test_validate_rejects_off_grid(self, codec):
        with pytest.raises(ConfigurationError, match="grid"):
            codec.validate({"depth": 0.64, "dist-above": 0.0, "orientation": "horizontal"})

    def test_validate_rejects_out_of_bounds(self, codec):
        with pytest.raises(ConfigurationError):
            codec.validate({"depth": 2.5, "dist-above": 0.0, "orientation": "horizontal"})

    def test_validate_rejects_unknown_option(self, codec):
        with pytest.raises(ConfigurationError, match="not an option"):
            codec.validate({"depth": 0.5, "dist-above": 0.0, "orientation": "diagonal"})

    def test_validate_rejects_missing_parameter(self, codec):
        with pytest.raises(ConfigurationError, match="missing"):
            codec.validate({"depth": 0.5, "orientation": "vertical"})

    def test_validate_rejects_unknown_parameter(self, codec):
        with pytest.raises(ConfigurationError, match="unknown"):
            codec.validate({"depth": 0.5, "dist-above": 0.0, "orientation": "vertical", "tilt": 10})


class TestRandomDesign:
    """Test cases for random design generation."""

    def test_random_designs_are_valid(self, codec):
        rng = np.random.default_rng(3)
        for _ in range(100):
            codec.validate(codec.random_design(rng))

    def test_same_seed_same_designs(self, codec):
        a = [codec.random_design(np.random.default_rng(11)) for _ in range(3)]
        b = [codec.random_design(np.random.default_rng(11)) for _ in range(3)]
        assert a == b

    def test_parameters_to_dict(self, codec):
        assert [p["name"] for p in codec.parameters_to_dict()] == ["depth", "dist-above", "orientation"]
