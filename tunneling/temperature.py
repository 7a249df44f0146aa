"""Bracketing the temperature at which a vacuum stops being preferred."""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import math
import numpy as np

from ..core.constants import DEFAULT_CONSTANTS, PhysicalConstants
from ..core.exceptions import ConfigurationError
from ..potential.function import PotentialFunction
from ..potential.minimum import PotentialMinimum

logger = logging.getLogger(__name__)

# Halvings allowed before concluding the vacuum is never below critical
MAX_HALVINGS = 200


@dataclass(frozen=True)
class TemperatureBracket:
    """
    Interval known to contain a critical temperature.

    Attributes:
        low: Highest temperature (GeV) confirmed below critical
        high: Lowest temperature (GeV) confirmed above critical
        persists_to_cutoff: True if the vacuum is still below critical at
            the maximum allowed temperature, in which case low == high
    """
    low: float
    high: float
    persists_to_cutoff: bool = False

    def __post_init__(self):
        if not 0.0 <= self.low <= self.high:
            raise ConfigurationError(
                f"Invalid temperature bracket [{self.low}, {self.high}]"
            )

    @property
    def ratio(self) -> float:
        """high / low (infinite if low is zero)."""
        if self.low == 0.0:
            return math.inf
        return self.high / self.low

    @property
    def geometric_midpoint(self) -> float:
        return math.sqrt(self.low * self.high)


def initial_temperature_guess(
    potential_difference: float,
    constants: PhysicalConstants = DEFAULT_CONSTANTS
) -> float:
    """
    Starting temperature T = (C |V_origin - V_vacuum|)^(1/4).

    A thermal correction of order C^-1 T^4 lifts a vacuum by about the
    potential difference, so the critical temperature is near this value.
    A degenerate difference falls back to 1 GeV.
    """
    difference = abs(potential_difference)
    if difference == 0.0 or not math.isfinite(difference):
        return 1.0
    return (constants.thermal_mass_coefficient * difference) ** 0.25


def deeper_than_origin_criterion(
    potential: PotentialFunction,
    vacuum: PotentialMinimum
) -> Callable[[float], bool]:
    """
    Predicate "the vacuum fields are still deeper than the origin at T".
    """
    fields = np.array(vacuum.field_configuration, dtype=float)
    origin = potential.field_origin

    def is_below_critical(temperature: float) -> bool:
        return potential(fields, temperature) < potential(origin, temperature)

    return is_below_critical


def find_max_temperature_bracket(
    is_below_critical: Callable[[float], bool],
    initial_guess: float,
    accuracy_bits: int,
    constants: PhysicalConstants = DEFAULT_CONSTANTS
) -> TemperatureBracket:
    """
    Bracket the highest temperature at which is_below_critical holds.

    The guess is doubled until the predicate fails (capped at the maximum
    temperature), then halved until it holds again, which gives a bracket
    [T, 2T]. That bracket is narrowed by accuracy_bits geometric bisections,
    each halving ln(high / low).

    Args:
        is_below_critical: Predicate on temperature in GeV
        initial_guess: Starting temperature in GeV
        accuracy_bits: Number of bisection steps
        constants: Supplies the maximum temperature

    Returns:
        TemperatureBracket
    """
    if accuracy_bits < 0:
        raise ConfigurationError("accuracy_bits must be non-negative")
    if not initial_guess > 0.0:
        raise ConfigurationError(
            f"Initial temperature guess must be positive, got {initial_guess}"
        )

    maximum_temperature = constants.maximum_temperature
    guess = min(initial_guess, maximum_temperature)

    while is_below_critical(guess):
        guess *= 2.0
        if guess >= maximum_temperature:
            guess = maximum_temperature
            if is_below_critical(guess):
                logger.info(
                    f"Vacuum is still below critical at the maximum temperature "
                    f"{maximum_temperature:.4g} GeV"
                )
                return TemperatureBracket(low=guess, high=guess, persists_to_cutoff=True)
            break

    guess *= 0.5
    halvings = 0
    while not is_below_critical(guess):
        guess *= 0.5
        halvings += 1
        if halvings >= MAX_HALVINGS:
            logger.warning(
                f"Vacuum is not below critical at any temperature down to "
                f"{guess:.4g} GeV; using a bracket starting at zero"
            )
            return TemperatureBracket(low=0.0, high=2.0 * guess)

    bracket = TemperatureBracket(low=guess, high=2.0 * guess)
    for _ in range(accuracy_bits):
        midpoint = bracket.geometric_midpoint
        if is_below_critical(midpoint):
            bracket = TemperatureBracket(low=midpoint, high=bracket.high)
        else:
            bracket = TemperatureBracket(low=bracket.low, high=midpoint)

    logger.debug(
        f"Critical temperature bracket: [{bracket.low:.6g}, {bracket.high:.6g}] GeV"
    )
    return bracket


def bracket_for_vacuum(
    potential: PotentialFunction,
    vacuum: PotentialMinimum,
    accuracy_bits: int,
    constants: PhysicalConstants = DEFAULT_CONSTANTS,
    is_below_critical: Optional[Callable[[float], bool]] = None
) -> TemperatureBracket:
    """
    Critical temperature bracket of a vacuum relative to the field origin.

    The initial guess comes from the zero-temperature depth of the vacuum
    below the origin.
    """
    if is_below_critical is None:
        is_below_critical = deeper_than_origin_criterion(potential, vacuum)
    depth = potential(potential.field_origin) - vacuum.function_value
    return find_max_temperature_bracket(
        is_below_critical,
        initial_temperature_guess(depth, constants),
        accuracy_bits,
        constants,
    )
