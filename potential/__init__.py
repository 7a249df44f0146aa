"""Scalar potentials, their minima, and minimization."""

from .minimum import PotentialMinimum
from .function import PotentialFunction, CallablePotential
from .minimizer import GradientMinimizer, VacuumSearch, VacuumSearchResult

__all__ = [
    "PotentialMinimum",
    "PotentialFunction",
    "CallablePotential",
    "GradientMinimizer",
    "VacuumSearch",
    "VacuumSearchResult",
]
