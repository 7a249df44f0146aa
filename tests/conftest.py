"""Pytest fixtures for vacuum_tunnel tests."""

import math

import pytest
import numpy as np

from vacuum_tunnel.potential.function import CallablePotential
from vacuum_tunnel.potential.minimum import PotentialMinimum
from vacuum_tunnel.tunneling.base import BounceActionSolver


# Quartic toy potential with a false vacuum at 0 and a deeper true vacuum
QUARTIC_COEFFICIENT = 0.3


def quartic_value(x, c=QUARTIC_COEFFICIENT):
    return 0.5 * x * x - x ** 3 + c * x ** 4


def quartic_true_vacuum(c=QUARTIC_COEFFICIENT):
    """Position of the deeper minimum of x^2/2 - x^3 + c x^4."""
    return (3.0 + math.sqrt(9.0 - 16.0 * c)) / (8.0 * c)


def linear_thermal_action(temperature):
    return 200.0 + 100.0 * temperature


class StubActionSolver(BounceActionSolver):
    """
    Bounce solver returning fixed actions.

    quantum_action is returned at zero temperature; thermal_action(T) gives
    S3 at non-zero temperature.
    """

    name = "stub"

    def __init__(self, quantum_action=50.0, thermal_action=None):
        self.quantum_action = quantum_action
        self.thermal_action = thermal_action or linear_thermal_action
        self.calls = []
        self.prepared = 0

    def prepare(self, potential):
        self.prepared += 1

    def bounce_action(self, potential, false_vacuum, true_vacuum, temperature=0.0):
        self.calls.append(temperature)
        if temperature == 0.0:
            return self.quantum_action
        return self.thermal_action(temperature)


@pytest.fixture
def quartic_potential():
    """Single-field potential x^2/2 - x^3 + 0.3 x^4."""
    return CallablePotential(lambda x, T: quartic_value(x[0]), ["phi"],
                             scale_squared=1.0)


@pytest.fixture
def quartic_vacua():
    """(false, true) minima of the single-field quartic potential."""
    x_true = quartic_true_vacuum()
    return (PotentialMinimum([0.0], 0.0),
            PotentialMinimum([x_true], quartic_value(x_true)))


def tilted_double_well(fields, temperature=0.0):
    x = fields[0]
    return (x * x - 1.0) ** 2 - 0.1 * x + temperature * temperature * x * x


@pytest.fixture
def thermal_potential():
    """
    Tilted double well (x^2 - 1)^2 - 0.1 x + T^2 x^2.

    Both minima lie below the origin at T = 0; the thermal mass lifts them
    above it near T ~ 1.
    """
    return CallablePotential(tilted_double_well, ["phi"], dsb_field_values=[-1.0],
                             scale_squared=1.0)


@pytest.fixture
def thermal_vacua():
    """(false, true) zero-temperature vacua of the tilted double well."""
    return (PotentialMinimum([-1.0], tilted_double_well(np.array([-1.0]))),
            PotentialMinimum([1.0], tilted_double_well(np.array([1.0]))))


def two_field_value(fields, temperature=0.0):
    h, s = fields
    return (-50.0 * h * h + 0.25 * h ** 4
            - 50.0 * s * s + 0.2 * s ** 4
            + h * h * s * s
            + 0.1 * temperature * temperature * (h * h + s * s))


@pytest.fixture
def two_field_potential():
    """
    Two fields with a DSB vacuum at (10, 0) and a deeper vacuum at (0, ~11.18).
    """
    return CallablePotential(two_field_value, ["h", "s"], dsb_field_values=[10.0, 0.0])


@pytest.fixture
def stub_solver():
    return StubActionSolver()
