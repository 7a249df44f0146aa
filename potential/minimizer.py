"""Gradient-based minimization of the potential and the search for vacua."""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging
import numpy as np
from scipy import optimize

from .function import PotentialFunction
from .minimum import PotentialMinimum
from ..core.config import MinimizerConfig
from ..core.exceptions import ConfigurationError, NumericalFailure, ConvergenceError

logger = logging.getLogger(__name__)


class GradientMinimizer:
    """
    Rolls a starting point to the nearest local minimum of the potential.

    Each attempt is a pure function of the starting point and a scale factor.
    Attempts giving non-finite results are retried from the starting point
    scaled by successive powers of retry_scaling_factor, up to max_retries
    times.
    """

    def __init__(
        self,
        potential: PotentialFunction,
        config: Optional[MinimizerConfig] = None,
        temperature: float = 0.0
    ):
        """
        Initialize minimizer.

        Args:
            potential: Potential to minimize
            config: Minimizer settings (defaults if None)
            temperature: Temperature in GeV at which to minimize
        """
        self.potential = potential
        self.config = config or MinimizerConfig()
        self.temperature = temperature

    def set_temperature(self, temperature: float) -> None:
        """Set the temperature (GeV) used for subsequent minimizations."""
        self.temperature = temperature

    def attempt_minimize(
        self,
        starting_point: Sequence[float],
        scale_factor: float = 1.0,
        temperature: Optional[float] = None
    ) -> PotentialMinimum:
        """
        Single minimization attempt from scale_factor * starting_point.

        Args:
            starting_point: Field values in GeV
            scale_factor: Multiplier applied to the starting point
            temperature: Temperature override (GeV)

        Returns:
            PotentialMinimum found

        Raises:
            NumericalFailure: If the minimizer produced non-finite values
        """
        if temperature is None:
            temperature = self.temperature
        x0 = scale_factor * np.asarray(starting_point, dtype=float)

        def objective(x):
            return self.potential(x, temperature)

        with np.errstate(invalid="ignore", over="ignore"):
            result = optimize.minimize(
                objective,
                x0,
                method=self.config.method,
                tol=self.config.tolerance,
            )

        function_value = float(result.fun)
        function_error = self.config.tolerance * max(1.0, abs(function_value))
        minimum = PotentialMinimum(
            field_configuration=result.x,
            function_value=function_value,
            function_error=function_error,
        )
        if not minimum.is_finite():
            raise NumericalFailure(
                f"Minimization from {x0.tolist()} gave non-finite result",
                starting_point=x0,
                scale_factor=scale_factor,
            )
        return minimum

    def __call__(
        self,
        starting_point: Sequence[float],
        temperature: Optional[float] = None
    ) -> PotentialMinimum:
        """
        Minimize from starting_point, retrying from scaled points on failure.

        Raises:
            ConvergenceError: If every attempt gave non-finite values
        """
        scale_factor = 1.0
        attempts = self.config.max_retries + 1
        for attempt in range(attempts):
            try:
                return self.attempt_minimize(starting_point, scale_factor, temperature)
            except NumericalFailure as e:
                logger.warning(
                    f"Minimizer encountered numerical issues ({e}); "
                    f"trying from a scaled starting point"
                )
                scale_factor *= self.config.retry_scaling_factor

        raise ConvergenceError(
            f"Minimization from {list(starting_point)} failed after {attempts} attempts",
            iterations=attempts,
        )


@dataclass
class VacuumSearchResult:
    """
    Results of rolling a set of starting points to minima.

    Attributes:
        dsb_vacuum: Minimum reached from the DSB input
        panic_vacuum: Deeper minimum used for tunneling (None if stable)
        panic_vacua: All minima deeper than the DSB vacuum
        found_minima: Every minimum reached
        global_minimum: Deepest panic vacuum
        nearest_panic_vacuum: Panic vacuum nearest to the DSB vacuum
        dsb_rolled_to_origin: Whether the DSB input rolled to the field origin
    """
    dsb_vacuum: PotentialMinimum
    panic_vacuum: Optional[PotentialMinimum] = None
    panic_vacua: List[PotentialMinimum] = field(default_factory=list)
    found_minima: List[PotentialMinimum] = field(default_factory=list)
    global_minimum: Optional[PotentialMinimum] = None
    nearest_panic_vacuum: Optional[PotentialMinimum] = None
    dsb_rolled_to_origin: bool = False

    @property
    def is_stable(self) -> bool:
        """True if no minimum deeper than the DSB vacuum was found."""
        return self.panic_vacuum is None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "dsb_vacuum": self.dsb_vacuum.to_dict(),
            "panic_vacuum": self.panic_vacuum.to_dict() if self.panic_vacuum else None,
            "n_panic_vacua": len(self.panic_vacua),
            "n_found_minima": len(self.found_minima),
            "dsb_rolled_to_origin": self.dsb_rolled_to_origin,
        }


class VacuumSearch:
    """
    Finds the DSB vacuum and any deeper ("panic") vacua of a potential.

    The DSB input is rolled first. Every starting point is then rolled; a
    starting point far from the DSB vacuum that nevertheless rolls to it (or
    to a sign-flipped copy of it) is scaled up and rolled again, since loop
    corrections can make the DSB basin of attraction swallow other minima.
    """

    def __init__(
        self,
        potential: PotentialFunction,
        minimizer: Optional[GradientMinimizer] = None,
        config: Optional[MinimizerConfig] = None
    ):
        self.potential = potential
        self.config = config or MinimizerConfig()
        self.minimizer = minimizer or GradientMinimizer(potential, self.config)

    def find_minima(
        self,
        starting_points: Sequence[Sequence[float]],
        temperature: float = 0.0
    ) -> VacuumSearchResult:
        """
        Roll the DSB input and all starting points to minima.

        Args:
            starting_points: Field configurations to roll
            temperature: Temperature in GeV

        Returns:
            VacuumSearchResult

        Raises:
            ConfigurationError: If a starting point has the wrong number of fields
        """
        config = self.config
        number_of_fields = self.potential.number_of_fields
        starting_points = [np.asarray(point, dtype=float) for point in starting_points]
        for starting_point in starting_points:
            if starting_point.shape != (number_of_fields,):
                raise ConfigurationError(
                    f"Starting point {starting_point.tolist()} does not have "
                    f"{number_of_fields} field values"
                )

        self.minimizer.set_temperature(temperature)

        dsb_input = self.potential.dsb_field_values
        logger.info(
            "DSB vacuum input: "
            f"{self.potential.field_configuration_as_mathematica(dsb_input)}"
        )
        dsb_vacuum = self.minimizer(dsb_input)
        logger.info(f"Rolled to: {dsb_vacuum.as_mathematica(self.potential.field_names)}")

        # The +1 GeV^2 keeps the threshold finite when the DSB vacuum is at the origin
        threshold_squared = (
            config.extremum_separation_fraction ** 2 * dsb_vacuum.length_squared + 1.0
        )
        threshold = np.sqrt(threshold_squared)

        result = VacuumSearchResult(
            dsb_vacuum=dsb_vacuum,
            dsb_rolled_to_origin=dsb_vacuum.length_squared < threshold_squared,
        )
        if result.dsb_rolled_to_origin:
            logger.info(
                "DSB vacuum input rolled to the origin; tunneling will be "
                "calculated from the origin to the panic vacuum"
            )

        def rolled_to_dsb(minimum: PotentialMinimum) -> bool:
            return (minimum.square_distance_to(dsb_vacuum) < threshold_squared
                    or self._is_phase_rotation(minimum, dsb_vacuum, threshold))

        for starting_point in starting_points:
            logger.debug(
                "Starting point: "
                f"{self.potential.field_configuration_as_mathematica(starting_point)}"
            )
            found = self.minimizer(starting_point)
            to_dsb = rolled_to_dsb(found)

            if to_dsb and dsb_vacuum.square_distance_to(starting_point) > threshold_squared:
                if np.dot(starting_point, starting_point) > threshold_squared:
                    scaled_point = config.non_dsb_rolling_scaling_factor * starting_point
                    logger.info(
                        "Non-DSB starting point rolled to the DSB vacuum or a phase "
                        "rotation of it; trying a scaled starting point "
                        f"{self.potential.field_configuration_as_mathematica(scaled_point)}"
                    )
                    found = self.minimizer(scaled_point)
                    to_dsb = rolled_to_dsb(found)

            logger.debug(f"Rolled to: {found.as_mathematica(self.potential.field_names)}")
            result.found_minima.append(found)

            if (found.function_value + found.function_error
                    < dsb_vacuum.function_value) and not to_dsb:
                if (result.global_minimum is None
                        or found.function_value < result.global_minimum.function_value):
                    result.global_minimum = found
                if (result.nearest_panic_vacuum is None
                        or found.square_distance_to(dsb_vacuum)
                        < result.nearest_panic_vacuum.square_distance_to(dsb_vacuum)):
                    result.nearest_panic_vacuum = found
                result.panic_vacua.append(found)

        if result.panic_vacua:
            result.panic_vacuum = (result.global_minimum if config.global_is_panic
                                   else result.nearest_panic_vacuum)
            logger.info(
                f"There are {len(result.panic_vacua)} panic vacua; using "
                f"{result.panic_vacuum.as_mathematica(self.potential.field_names)}"
            )
        else:
            logger.info("DSB vacuum is stable as far as the starting points allow")

        return result

    @staticmethod
    def _is_phase_rotation(
        minimum: PotentialMinimum,
        dsb_vacuum: PotentialMinimum,
        threshold: float
    ) -> bool:
        """True if minimum equals dsb_vacuum up to the signs of its fields."""
        difference = (np.abs(minimum.field_configuration)
                      - np.abs(dsb_vacuum.field_configuration))
        return float(np.dot(difference, difference)) < threshold * threshold
