"""
Survival probabilities from bounce actions.

Both quantum and thermal calculations work with ln(-ln P), where P is the
probability that the false vacuum has survived. Keeping the intermediate
quantities in the log domain means that actions of order several hundred
never overflow; the exponentials are only taken once the argument is known
to be representable, and saturate to 0 or 1 otherwise.
"""

from dataclasses import dataclass
from typing import Optional
import logging
import math

from ..core.constants import (
    DEFAULT_CONSTANTS,
    PhysicalConstants,
    SATURATED_LONG_LIFETIME,
    SATURATED_SHORT_LIFETIME,
)
from ..core.exceptions import ConfigurationError, BounceActionError

logger = logging.getLogger(__name__)


@dataclass
class SurvivalEstimate:
    """
    Survival probability with its log-domain intermediate.

    Attributes:
        probability: Survival probability in [0, 1]
        log_minus_log_probability: ln(-ln P); infinite when saturated
        lifetime_seconds: Quantum lifetime in seconds (None for thermal)
        warning: Message describing any saturation that occurred
    """
    probability: float
    log_minus_log_probability: float
    lifetime_seconds: Optional[float] = None
    warning: Optional[str] = None


class SurvivalProbabilityCalculator:
    """
    Converts bounce actions into survival probabilities.

    Example:
        calculator = SurvivalProbabilityCalculator()
        estimate = calculator.quantum_survival(action=400.0, scale_squared=1.0e4)
        print(estimate.probability, estimate.lifetime_seconds)
    """

    def __init__(self, constants: PhysicalConstants = DEFAULT_CONSTANTS):
        self.constants = constants

    @property
    def maximum_power_of_exponent(self) -> float:
        return self.constants.maximum_power_of_exponent

    def survival_from_log_minus_log(self, log_minus_log: float):
        """
        P = exp(-exp(log_minus_log)), saturating instead of overflowing.

        Returns:
            Tuple of (probability, warning message or None)
        """
        max_exp = self.maximum_power_of_exponent
        if math.isnan(log_minus_log):
            raise BounceActionError("ln(-ln(survival probability)) is NaN")
        if log_minus_log >= max_exp:
            return 0.0, (
                "Exponent of the decay width is so large that the survival "
                "probability is set to 0"
            )
        if log_minus_log <= -max_exp:
            return 1.0, (
                "Exponent of the decay width is so negative that the survival "
                "probability is set to 1"
            )
        decay_exponent = math.exp(log_minus_log)
        if decay_exponent >= max_exp:
            return 0.0, (
                f"Integrated decay width {decay_exponent:.6g} is too large to "
                "exponentiate; the survival probability is set to 0"
            )
        return math.exp(-decay_exponent), None

    def quantum_survival(self, action: float, scale_squared: float) -> SurvivalEstimate:
        """
        Survival probability against zero-temperature tunneling.

        The lifetime is tau = exp(S4) hbar / (t_U^3 Q^4) for the age of the
        Universe t_U in GeV^-1 and the tunneling scale Q, and the survival
        probability is exp(-t_U / tau).

        Args:
            action: Bounce action S4 (dimensionless)
            scale_squared: Q^2 in GeV^2

        Returns:
            SurvivalEstimate with lifetime_seconds set
        """
        if math.isnan(action):
            raise BounceActionError("Bounce action is NaN", temperature=0.0)
        if not scale_squared > 0.0:
            raise ConfigurationError(
                f"Tunneling scale squared must be positive, got {scale_squared}"
            )

        constants = self.constants
        max_exp = self.maximum_power_of_exponent

        if action >= max_exp:
            return SurvivalEstimate(
                probability=1.0,
                log_minus_log_probability=-math.inf,
                lifetime_seconds=SATURATED_LONG_LIFETIME,
                warning=(
                    f"Bounce action {action:.6g} is so large that the lifetime "
                    f"is set to {SATURATED_LONG_LIFETIME:.1e} s and the "
                    "survival probability to 1"
                ),
            )
        if action <= -max_exp:
            return SurvivalEstimate(
                probability=0.0,
                log_minus_log_probability=math.inf,
                lifetime_seconds=SATURATED_SHORT_LIFETIME,
                warning=(
                    f"Bounce action {action:.6g} is so negative that the "
                    f"lifetime is set to {SATURATED_SHORT_LIFETIME} s and the "
                    "survival probability to 0"
                ),
            )

        log_lifetime_seconds = (
            action
            + math.log(constants.hbar_gev_seconds)
            - 3.0 * math.log(constants.age_of_universe_inverse_gev)
            - 2.0 * math.log(scale_squared)
        )
        if log_lifetime_seconds >= max_exp:
            lifetime_seconds = SATURATED_LONG_LIFETIME
        else:
            lifetime_seconds = math.exp(log_lifetime_seconds)

        log_minus_log = (math.log(constants.age_of_universe_seconds)
                         - log_lifetime_seconds)
        probability, warning = self.survival_from_log_minus_log(log_minus_log)

        logger.debug(
            f"S4 = {action:.6g}, ln(lifetime / s) = {log_lifetime_seconds:.6g}, "
            f"ln(-ln P) = {log_minus_log:.6g}"
        )

        return SurvivalEstimate(
            probability=probability,
            log_minus_log_probability=log_minus_log,
            lifetime_seconds=lifetime_seconds,
            warning=warning,
        )

    def thermal_log_minus_log(self, action_over_temperature: float,
                              temperature: float) -> float:
        """
        ln(-ln P) for thermal tunneling dominated by a single temperature.

        Uses ln(-ln P) = ln(I) - S3(T)/T - ln(T), where I is the prefactor
        of the integral of the decay width over the cooling history.
        """
        if not temperature > 0.0:
            raise ConfigurationError(
                f"Dominant tunneling temperature must be positive, got {temperature}"
            )
        return (self.constants.ln_thermal_integration_factor
                - action_over_temperature
                - math.log(temperature))

    def thermal_survival(self, action_over_temperature: float,
                         temperature: float) -> SurvivalEstimate:
        """Survival probability against thermal tunneling."""
        if math.isnan(action_over_temperature):
            raise BounceActionError("Thermal bounce action is NaN",
                                    temperature=temperature)
        log_minus_log = self.thermal_log_minus_log(action_over_temperature, temperature)
        probability, warning = self.survival_from_log_minus_log(log_minus_log)
        return SurvivalEstimate(
            probability=probability,
            log_minus_log_probability=log_minus_log,
            warning=warning,
        )

    def partial_decay_width(self, log_minus_log: float) -> float:
        """
        Integrated thermal decay width exp(ln(-ln P)) with sentinels.

        Returns -1 when the argument is above the exponent limit, 0 when it is
        below the negative limit, and 1e100 when the width itself overflows.
        """
        max_exp = self.maximum_power_of_exponent
        if log_minus_log >= max_exp:
            return -1.0
        if log_minus_log <= -max_exp:
            return 0.0
        width = math.exp(log_minus_log)
        if width >= max_exp:
            return SATURATED_LONG_LIFETIME
        return width
