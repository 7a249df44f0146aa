"""Core infrastructure: configuration, constants, and exceptions."""

from .config import (
    TunnelingStrategy,
    TunnelingConfig,
    PathConfig,
    MinimizerConfig,
    WorkflowConfig,
)
from .constants import (
    PhysicalConstants,
    DEFAULT_CONSTANTS,
    HBAR_GEV_SECONDS,
    AGE_OF_UNIVERSE_SECONDS,
    REDUCED_PLANCK_MASS,
    MAXIMUM_POWER_OF_EXPONENT,
)
from .exceptions import (
    VacuumTunnelError,
    ConfigurationError,
    TunnelingDirectionError,
    NumericalFailure,
    ConvergenceError,
    BounceActionError,
    WorkflowError,
)

__all__ = [
    "TunnelingStrategy",
    "TunnelingConfig",
    "PathConfig",
    "MinimizerConfig",
    "WorkflowConfig",
    "PhysicalConstants",
    "DEFAULT_CONSTANTS",
    "HBAR_GEV_SECONDS",
    "AGE_OF_UNIVERSE_SECONDS",
    "REDUCED_PLANCK_MASS",
    "MAXIMUM_POWER_OF_EXPONENT",
    "VacuumTunnelError",
    "ConfigurationError",
    "TunnelingDirectionError",
    "NumericalFailure",
    "ConvergenceError",
    "BounceActionError",
    "WorkflowError",
]
