"""Dataclass-based configuration for all tunneling parameters."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union
from pathlib import Path

from .exceptions import ConfigurationError


class TunnelingStrategy(Enum):
    """
    Which tunneling calculations to run, and in which order.

    The "Then" strategies only run the second calculation if the survival
    probability from the first exceeds the configured threshold.
    """
    NO_TUNNELING = "NoTunneling"
    JUST_QUANTUM = "JustQuantum"
    JUST_THERMAL = "JustThermal"
    QUANTUM_THEN_THERMAL = "QuantumThenThermal"
    THERMAL_THEN_QUANTUM = "ThermalThenQuantum"

    @classmethod
    def from_name(cls, name: Union[str, "TunnelingStrategy"]) -> "TunnelingStrategy":
        """Look up a strategy by value ("JustQuantum") or member name ("JUST_QUANTUM")."""
        if isinstance(name, cls):
            return name
        for strategy in cls:
            if name in (strategy.value, strategy.name):
                return strategy
        raise ConfigurationError(f"Unknown tunneling strategy: {name!r}")


@dataclass
class TunnelingConfig:
    """
    Configuration for the tunneling calculation of a single parameter point.

    Attributes:
        strategy: Which of quantum/thermal tunneling to calculate
        survival_probability_threshold: Probability above which the second
            calculation of a "Then" strategy is performed
        temperature_accuracy: Number of geometric bisection steps used when
            bracketing critical temperatures
        vacuum_separation_fraction: Fraction of the zero-temperature vacuum
            separation below which two vacua are considered merged
        thermal_grid_points: Number of temperatures in the coarse scan for
            the dominant tunneling temperature
        dominant_temperature_tolerance: Relative tolerance on the dominant
            tunneling temperature
        max_thermal_evaluations: Cap on bounded-minimization iterations when
            refining the dominant tunneling temperature
    """
    strategy: TunnelingStrategy = TunnelingStrategy.JUST_QUANTUM
    survival_probability_threshold: float = 0.01
    temperature_accuracy: int = 7
    vacuum_separation_fraction: float = 0.2
    thermal_grid_points: int = 8
    dominant_temperature_tolerance: float = 1e-2
    max_thermal_evaluations: int = 30

    def __post_init__(self):
        self.strategy = TunnelingStrategy.from_name(self.strategy)
        if not 0.0 <= self.survival_probability_threshold <= 1.0:
            raise ConfigurationError(
                "survival_probability_threshold must lie in [0, 1], got "
                f"{self.survival_probability_threshold}"
            )
        if self.temperature_accuracy < 1:
            raise ConfigurationError("temperature_accuracy must be at least 1")
        if self.vacuum_separation_fraction <= 0.0:
            raise ConfigurationError("vacuum_separation_fraction must be positive")
        if self.thermal_grid_points < 2:
            raise ConfigurationError("thermal_grid_points must be at least 2")


@dataclass
class PathConfig:
    """
    Configuration for path parameterization and the bounce-action solver.

    Attributes:
        minimum_intermediate_nodes: Lower bound on the number of path nodes
            between the vacua (rounded up to 2^k - 1)
        reference_field: Index of the field whose axis is rotated onto the
            direction between neighboring nodes
        max_path_iterations: Iteration cap for the path-deformation minimizer
        path_tolerance: Relative tolerance on the action for path deformation
        bounce_max_shots: Cap on overshoot/undershoot trial integrations
        bounce_xtol: Bracket width on the shooting parameter at which the
            one-dimensional bounce is accepted
    """
    minimum_intermediate_nodes: int = 3
    reference_field: int = 0
    max_path_iterations: int = 200
    path_tolerance: float = 1e-3
    bounce_max_shots: int = 80
    bounce_xtol: float = 1e-6

    def __post_init__(self):
        if self.minimum_intermediate_nodes < 1:
            raise ConfigurationError(
                "At least one intermediate path node must be requested"
            )
        if self.reference_field < 0:
            raise ConfigurationError("reference_field must be non-negative")


@dataclass
class MinimizerConfig:
    """
    Configuration for the gradient minimizer and the vacuum search.

    Attributes:
        method: scipy.optimize.minimize method name
        tolerance: Convergence tolerance passed to scipy
        max_retries: Number of scaled restarts after a non-finite result
        retry_scaling_factor: Factor applied to the starting point per retry
        extremum_separation_fraction: Fraction of the DSB vacuum length within
            which two minima are considered the same
        non_dsb_rolling_scaling_factor: Factor applied to a starting point that
            unexpectedly rolled to the DSB vacuum before re-rolling it
        global_is_panic: Use the deepest rather than the nearest deeper minimum
    """
    method: str = "BFGS"
    tolerance: float = 1e-10
    max_retries: int = 5
    retry_scaling_factor: float = 0.8
    extremum_separation_fraction: float = 0.1
    non_dsb_rolling_scaling_factor: float = 4.0
    global_is_panic: bool = False

    def __post_init__(self):
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be non-negative")


@dataclass
class WorkflowConfig:
    """
    Master configuration combining all sub-configurations.

    Attributes:
        tunneling: Tunneling strategy and thermal search settings
        path: Path parameterization and bounce solver settings
        minimizer: Minimizer and vacuum search settings
        output_file: Optional JSON file for scan results
    """
    tunneling: TunnelingConfig = field(default_factory=TunnelingConfig)
    path: PathConfig = field(default_factory=PathConfig)
    minimizer: MinimizerConfig = field(default_factory=MinimizerConfig)
    output_file: Optional[Path] = None

    def __post_init__(self):
        """Ensure output_file is a Path object."""
        if self.output_file and isinstance(self.output_file, str):
            self.output_file = Path(self.output_file)
