"""Quantum and thermal tunneling: bounce actions and survival probabilities."""

from .base import (
    BounceActionSolver,
    TunnelingResult,
    TunnelingState,
    TunnelingStrategy,
    NOT_CALCULATED,
)
from .survival import SurvivalEstimate, SurvivalProbabilityCalculator
from .temperature import (
    TemperatureBracket,
    find_max_temperature_bracket,
    bracket_for_vacuum,
    deeper_than_origin_criterion,
    initial_temperature_guess,
)
from .bounce import OneDimensionalBounce, PathBounceActionSolver
from .tunneler import BounceActionTunneler

__all__ = [
    "BounceActionSolver",
    "TunnelingResult",
    "TunnelingState",
    "TunnelingStrategy",
    "NOT_CALCULATED",
    "SurvivalEstimate",
    "SurvivalProbabilityCalculator",
    "TemperatureBracket",
    "find_max_temperature_bracket",
    "bracket_for_vacuum",
    "deeper_than_origin_criterion",
    "initial_temperature_guess",
    "OneDimensionalBounce",
    "PathBounceActionSolver",
    "BounceActionTunneler",
]
