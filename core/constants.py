"""Physical constants and numerical limits used in tunneling calculations."""

import math
import sys
from dataclasses import dataclass

# Reduced Planck mass in GeV, used as the maximum allowed temperature
REDUCED_PLANCK_MASS = 2.435e18  # GeV

# Planck constant
HBAR_GEV_SECONDS = 6.58211928e-25  # GeV·s

# Age of the known Universe
AGE_OF_UNIVERSE_SECONDS = 4.3e17  # s

# ln of the prefactor of the thermal decay-width integral (GeV),
# exp(244.53) ~= 1.581e106 GeV for g_star = 105.75
LN_THERMAL_INTEGRATION_FACTOR = 244.53

# Largest x for which exp(x) is still safely representable
MAXIMUM_POWER_OF_EXPONENT = math.log(0.5 * sys.float_info.max)

# Coefficient of T^4 in the one-loop thermal correction estimate:
# ~100 degrees of freedom with J ~ 2 gives 100 / (2 pi^2) ~= 5, so T^4 ~ 0.2 dV
THERMAL_MASS_COEFFICIENT = 0.2

# Lifetime sentinels used when the action saturates
SATURATED_LONG_LIFETIME = 1.0e100  # s
SATURATED_SHORT_LIFETIME = 0.1  # s


@dataclass(frozen=True)
class PhysicalConstants:
    """
    Immutable bundle of the constants entering lifetime estimates.

    Attributes:
        hbar_gev_seconds: Reduced Planck constant in GeV·s
        age_of_universe_seconds: Age of the known Universe in seconds
        maximum_temperature: Cap on any temperature search in GeV
        ln_thermal_integration_factor: ln of the thermal width prefactor
        maximum_power_of_exponent: Largest safe argument for exp()
        thermal_mass_coefficient: C in the initial guess T = (C dV)^(1/4)
    """
    hbar_gev_seconds: float = HBAR_GEV_SECONDS
    age_of_universe_seconds: float = AGE_OF_UNIVERSE_SECONDS
    maximum_temperature: float = REDUCED_PLANCK_MASS
    ln_thermal_integration_factor: float = LN_THERMAL_INTEGRATION_FACTOR
    maximum_power_of_exponent: float = MAXIMUM_POWER_OF_EXPONENT
    thermal_mass_coefficient: float = THERMAL_MASS_COEFFICIENT

    @property
    def age_of_universe_inverse_gev(self) -> float:
        """Age of the Universe in GeV^-1."""
        return self.age_of_universe_seconds / self.hbar_gev_seconds


DEFAULT_CONSTANTS = PhysicalConstants()


def seconds_to_inverse_gev(time_seconds: float) -> float:
    """Convert a time from seconds to GeV^-1."""
    return time_seconds / HBAR_GEV_SECONDS


def inverse_gev_to_seconds(time_inverse_gev: float) -> float:
    """Convert a time from GeV^-1 to seconds."""
    return time_inverse_gev * HBAR_GEV_SECONDS
