"""Tests for critical temperature bracketing."""

import math

import pytest

from vacuum_tunnel.tunneling.temperature import (
    TemperatureBracket,
    find_max_temperature_bracket,
    bracket_for_vacuum,
    deeper_than_origin_criterion,
    initial_temperature_guess,
)
from vacuum_tunnel.core.constants import DEFAULT_CONSTANTS, REDUCED_PLANCK_MASS
from vacuum_tunnel.core.exceptions import ConfigurationError


class CountingPredicate:
    """T < critical, counting evaluations."""

    def __init__(self, critical):
        self.critical = critical
        self.calls = 0

    def __call__(self, temperature):
        self.calls += 1
        return temperature < self.critical


class TestFindMaxTemperatureBracket:
    """Tests for the doubling/halving/bisection bracket search."""

    @pytest.mark.parametrize("initial_guess", [0.01, 1.0, 3.7, 1000.0])
    def test_brackets_critical_temperature(self, initial_guess):
        predicate = CountingPredicate(3.7)
        bracket = find_max_temperature_bracket(predicate, initial_guess, 7)
        assert predicate(bracket.low)
        assert not predicate(bracket.high)
        assert bracket.low < 3.7 <= bracket.high

    @pytest.mark.parametrize("accuracy_bits", [0, 1, 3, 7, 12])
    def test_ratio_bound(self, accuracy_bits):
        """Each bisection halves ln(high / low)."""
        bracket = find_max_temperature_bracket(CountingPredicate(123.4), 1.0,
                                               accuracy_bits)
        assert bracket.ratio <= 2.0 ** (2.0 ** -accuracy_bits) * (1.0 + 1e-12)

    def test_zero_accuracy_gives_factor_two(self):
        bracket = find_max_temperature_bracket(CountingPredicate(5.0), 1.0, 0)
        assert bracket.high == pytest.approx(2.0 * bracket.low)

    def test_persists_to_cutoff(self):
        bracket = find_max_temperature_bracket(lambda T: True, 1.0, 7)
        assert bracket.persists_to_cutoff
        assert bracket.low == bracket.high == REDUCED_PLANCK_MASS

    def test_just_below_cutoff(self):
        """Critical temperature between the last doubling and the cap."""
        critical = 0.9 * REDUCED_PLANCK_MASS
        bracket = find_max_temperature_bracket(CountingPredicate(critical), 1.0, 10)
        assert not bracket.persists_to_cutoff
        assert bracket.low < critical <= bracket.high

    def test_never_below_critical_terminates(self):
        predicate = CountingPredicate(0.0)
        bracket = find_max_temperature_bracket(predicate, 1.0, 7)
        assert bracket.low == 0.0
        assert predicate.calls < 500

    def test_invalid_guess(self):
        with pytest.raises(ConfigurationError):
            find_max_temperature_bracket(lambda T: True, 0.0, 7)

    def test_invalid_bracket(self):
        with pytest.raises(ConfigurationError):
            TemperatureBracket(low=2.0, high=1.0)

    def test_geometric_midpoint(self):
        bracket = TemperatureBracket(low=2.0, high=8.0)
        assert bracket.geometric_midpoint == pytest.approx(4.0)
        assert bracket.ratio == pytest.approx(4.0)

    def test_first_bisection_at_geometric_midpoint(self):
        """A guess of 4 with critical 5 gives [4, 8], then probes sqrt(32)."""
        probed = []

        def below_five(temperature):
            probed.append(temperature)
            return temperature < 5.0

        bracket = find_max_temperature_bracket(below_five, 4.0, 1)
        assert probed[-1] == pytest.approx(math.sqrt(32.0))
        assert bracket.low == pytest.approx(4.0)
        assert bracket.high == pytest.approx(math.sqrt(32.0))


class TestVacuumBrackets:
    """Tests for brackets built from a potential."""

    def test_initial_guess(self):
        assert initial_temperature_guess(5.0) == pytest.approx(1.0)
        assert initial_temperature_guess(-5.0) == pytest.approx(1.0)
        assert initial_temperature_guess(0.0) == 1.0

    def test_initial_guess_uses_coefficient(self):
        c = DEFAULT_CONSTANTS.thermal_mass_coefficient
        assert initial_temperature_guess(80.0) == pytest.approx((c * 80.0) ** 0.25)

    def test_deeper_than_origin(self, thermal_potential, thermal_vacua):
        false_vacuum, _ = thermal_vacua
        criterion = deeper_than_origin_criterion(thermal_potential, false_vacuum)
        assert criterion(0.0)
        assert criterion(0.9)
        assert not criterion(1.0)

    def test_bracket_for_vacuum(self, thermal_potential, thermal_vacua):
        """V(-1, T) = 0.1 + T^2 crosses V(0, T) = 1 at T = sqrt(0.9)."""
        false_vacuum, true_vacuum = thermal_vacua
        false_bracket = bracket_for_vacuum(thermal_potential, false_vacuum, 10)
        true_bracket = bracket_for_vacuum(thermal_potential, true_vacuum, 10)
        assert false_bracket.low < math.sqrt(0.9) <= false_bracket.high
        assert true_bracket.low < math.sqrt(1.1) <= true_bracket.high
        assert false_bracket.ratio < 1.001
