"""Tests for potentials, minima, the minimizer, and the vacuum search."""

import logging
import math

import pytest
import numpy as np
from numpy.testing import assert_allclose

from vacuum_tunnel.potential.function import CallablePotential
from vacuum_tunnel.potential.minimum import PotentialMinimum
from vacuum_tunnel.potential.minimizer import GradientMinimizer, VacuumSearch
from vacuum_tunnel.core.config import MinimizerConfig
from vacuum_tunnel.core.exceptions import (
    ConfigurationError,
    ConvergenceError,
    NumericalFailure,
)

from conftest import quartic_true_vacuum


class TestPotentialMinimum:
    """Tests for PotentialMinimum helpers."""

    def test_distances(self):
        a = PotentialMinimum([3.0, 4.0], -1.0)
        b = PotentialMinimum([0.0, 1.0], 0.0)
        assert a.length_squared == pytest.approx(25.0)
        assert a.square_distance_to(b) == pytest.approx(18.0)
        assert a.square_distance_to(np.array([3.0, 0.0])) == pytest.approx(16.0)

    def test_is_finite(self):
        assert PotentialMinimum([1.0], 0.0).is_finite()
        assert not PotentialMinimum([float("nan")], 0.0).is_finite()
        assert not PotentialMinimum([1.0], float("inf")).is_finite()

    def test_dict_round_trip(self):
        minimum = PotentialMinimum([1.5, -2.0], -3.25, 1e-9)
        restored = PotentialMinimum.from_dict(minimum.to_dict())
        assert_allclose(restored.field_configuration, minimum.field_configuration)
        assert restored.function_value == minimum.function_value
        assert restored.function_error == minimum.function_error

    def test_mathematica(self):
        text = PotentialMinimum([1.0, 2.0], -0.5).as_mathematica(["h", "s"])
        assert "h -> 1" in text
        assert "s -> 2" in text


class TestPotentialFunction:
    """Tests for the potential interface."""

    def test_properties(self, two_field_potential):
        assert two_field_potential.number_of_fields == 2
        assert two_field_potential.field_names == ["h", "s"]
        assert_allclose(two_field_potential.field_origin, [0.0, 0.0])
        assert_allclose(two_field_potential.dsb_field_values, [10.0, 0.0])
        assert two_field_potential.field_index("s") == 1
        assert two_field_potential.field_index("x") == -1

    def test_gradient(self, two_field_potential):
        point = np.array([3.0, 2.0])
        h, s = point
        expected = [-100.0 * h + h ** 3 + 2.0 * h * s * s,
                    -100.0 * s + 0.8 * s ** 3 + 2.0 * h * h * s]
        assert_allclose(two_field_potential.gradient(point), expected, rtol=1e-6)

    def test_default_scale(self, two_field_potential):
        a = PotentialMinimum([10.0, 0.0], -2500.0)
        b = PotentialMinimum([0.0, 11.0], -3000.0)
        assert two_field_potential.scale_squared_relevant_to_tunneling(a, b) == \
            pytest.approx(221.0)

    def test_fixed_scale(self, quartic_potential, quartic_vacua):
        assert quartic_potential.scale_squared_relevant_to_tunneling(
            *quartic_vacua) == 1.0

    def test_mismatched_dsb_values(self):
        with pytest.raises(ConfigurationError):
            CallablePotential(lambda x, T: 0.0, ["a", "b"], dsb_field_values=[1.0])

    def test_no_fields(self):
        with pytest.raises(ConfigurationError):
            CallablePotential(lambda x, T: 0.0, [])


def nan_outside(fields, temperature=0.0):
    """Double well that is NaN for |x| > 3."""
    x = fields[0]
    if abs(x) > 3.0:
        return float("nan")
    return (x * x - 1.0) ** 2


class TestGradientMinimizer:
    """Tests for minimization with bounded retries."""

    def test_finds_minimum(self, quartic_potential):
        minimizer = GradientMinimizer(quartic_potential)
        minimum = minimizer([1.8])
        assert minimum.field_configuration[0] == pytest.approx(
            quartic_true_vacuum(), abs=1e-5)
        assert minimum.function_error > 0.0

    def test_temperature(self, thermal_potential):
        minimizer = GradientMinimizer(thermal_potential)
        cold = minimizer([1.0])
        minimizer.set_temperature(0.9)
        warm = minimizer([1.0])
        assert abs(warm.field_configuration[0]) < abs(cold.field_configuration[0])

    def test_single_attempt_raises(self):
        potential = CallablePotential(nan_outside, ["x"])
        minimizer = GradientMinimizer(potential)
        with pytest.raises(NumericalFailure) as exc_info:
            minimizer.attempt_minimize([5.0])
        assert exc_info.value.scale_factor == 1.0

    def test_retry_from_scaled_point(self, caplog):
        """5.0 -> 4.0 -> 3.2 -> 2.56: the fourth attempt starts in the valid region."""
        potential = CallablePotential(nan_outside, ["x"])
        minimizer = GradientMinimizer(potential)
        with caplog.at_level(logging.WARNING):
            minimum = minimizer([5.0])
        assert minimum.field_configuration[0] == pytest.approx(1.0, abs=1e-5)
        assert len([r for r in caplog.records if r.levelno == logging.WARNING]) == 3

    def test_retry_budget_exhausted(self):
        potential = CallablePotential(lambda x, T: float("nan"), ["x"])
        minimizer = GradientMinimizer(potential, MinimizerConfig(max_retries=3))
        with pytest.raises(ConvergenceError) as exc_info:
            minimizer([1.0])
        assert exc_info.value.iterations == 4


class TestVacuumSearch:
    """Tests for finding DSB and panic vacua."""

    def test_finds_panic_vacuum(self, two_field_potential):
        search = VacuumSearch(two_field_potential)
        result = search.find_minima([[0.0, 10.0], [0.0, -10.0]])
        assert_allclose(result.dsb_vacuum.field_configuration, [10.0, 0.0], atol=1e-4)
        assert result.dsb_vacuum.function_value == pytest.approx(-2500.0)
        assert not result.is_stable
        assert not result.dsb_rolled_to_origin
        assert len(result.panic_vacua) == 2
        assert result.panic_vacuum.function_value == pytest.approx(-3125.0)
        assert abs(result.panic_vacuum.field_configuration[1]) == pytest.approx(
            math.sqrt(125.0), abs=1e-4)

    def test_phase_rotation_is_not_panic(self, two_field_potential):
        """(-10, 0) is a sign flip of the DSB vacuum."""
        search = VacuumSearch(two_field_potential)
        result = search.find_minima([[-10.0, 0.0]])
        assert result.is_stable
        assert result.panic_vacuum is None
        assert len(result.found_minima) == 1

    def test_global_panic_vacuum(self):
        """Wells at -10 (DSB), 15 and 30 of depths 1, 2 and 3."""
        def wells(x, T):
            return -sum(depth * math.exp(-(x[0] - center) ** 2 / 8.0)
                        for center, depth in ((-10.0, 1.0), (15.0, 2.0), (30.0, 3.0)))

        potential = CallablePotential(wells, ["x"], dsb_field_values=[-10.0])
        starting_points = [[14.0], [31.0]]
        nearest = VacuumSearch(potential).find_minima(starting_points)
        deepest = VacuumSearch(
            potential, config=MinimizerConfig(global_is_panic=True)
        ).find_minima(starting_points)
        assert len(nearest.panic_vacua) == 2
        assert nearest.panic_vacuum.field_configuration[0] == pytest.approx(15.0, abs=1e-3)
        assert deepest.panic_vacuum.field_configuration[0] == pytest.approx(30.0, abs=1e-3)
        assert deepest.panic_vacuum is deepest.global_minimum

    def test_to_dict(self, two_field_potential):
        result = VacuumSearch(two_field_potential).find_minima([[0.0, 10.0]])
        data = result.to_dict()
        assert data["n_panic_vacua"] == 1
        assert data["panic_vacuum"]["function_value"] == pytest.approx(-3125.0)
