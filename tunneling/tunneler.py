"""
Quantum and thermal tunneling from a false vacuum to a true vacuum.

BounceActionTunneler runs whichever calculations the configured strategy
asks for, with the conditional strategies only running the second
calculation while the first survival probability is above threshold.
"""

from typing import Callable, Dict, Optional, Tuple
import logging
import math
import numpy as np
from scipy import optimize

from .base import BounceActionSolver, TunnelingResult, NOT_CALCULATED
from .survival import SurvivalProbabilityCalculator
from .temperature import TemperatureBracket, bracket_for_vacuum
from ..core.config import MinimizerConfig, TunnelingConfig, TunnelingStrategy
from ..core.constants import DEFAULT_CONSTANTS, PhysicalConstants
from ..core.exceptions import (
    BounceActionError,
    ConvergenceError,
    TunnelingDirectionError,
)
from ..potential.function import PotentialFunction
from ..potential.minimizer import GradientMinimizer
from ..potential.minimum import PotentialMinimum

logger = logging.getLogger(__name__)

QUANTUM = "quantum"
THERMAL = "thermal"

# Calculations run for each strategy, in order
STRATEGY_STEPS: Dict[TunnelingStrategy, Tuple[str, ...]] = {
    TunnelingStrategy.NO_TUNNELING: (),
    TunnelingStrategy.JUST_QUANTUM: (QUANTUM,),
    TunnelingStrategy.JUST_THERMAL: (THERMAL,),
    TunnelingStrategy.QUANTUM_THEN_THERMAL: (QUANTUM, THERMAL),
    TunnelingStrategy.THERMAL_THEN_QUANTUM: (THERMAL, QUANTUM),
}

# Range of the coarse dominant-temperature scan as fractions of its upper bound
THERMAL_SCAN_LOWER_FRACTION = 1e-2
THERMAL_SCAN_UPPER_FRACTION = 0.999


class BounceActionTunneler:
    """
    Survival probabilities of a false vacuum from bounce actions.

    Example:
        tunneler = BounceActionTunneler(PathBounceActionSolver(), TunnelingConfig(
            strategy=TunnelingStrategy.QUANTUM_THEN_THERMAL))
        result = tunneler.calculate_tunneling(potential, false_vacuum, true_vacuum)
        print(result.quantum_survival_probability)
    """

    def __init__(
        self,
        action_solver: BounceActionSolver,
        config: Optional[TunnelingConfig] = None,
        constants: PhysicalConstants = DEFAULT_CONSTANTS,
        minimizer_factory: Optional[Callable[[PotentialFunction], GradientMinimizer]] = None
    ):
        """
        Args:
            action_solver: Evaluates bounce actions
            config: Strategy and thermal-search settings
            constants: Physical constants for the survival estimates
            minimizer_factory: Builds the minimizer used to follow vacua with
                temperature (GradientMinimizer with defaults if None)
        """
        self.action_solver = action_solver
        self.config = config or TunnelingConfig()
        self.constants = constants
        self.calculator = SurvivalProbabilityCalculator(constants)
        self.minimizer_factory = minimizer_factory or (
            lambda potential: GradientMinimizer(potential, MinimizerConfig())
        )

    @property
    def strategy(self) -> TunnelingStrategy:
        return self.config.strategy

    def calculate_tunneling(
        self,
        potential: PotentialFunction,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum
    ) -> TunnelingResult:
        """
        Run the configured strategy for one pair of vacua.

        Args:
            potential: Potential to tunnel through
            false_vacuum: Zero-temperature metastable vacuum
            true_vacuum: Zero-temperature deeper vacuum

        Returns:
            TunnelingResult with uncalculated fields left at NOT_CALCULATED

        Raises:
            TunnelingDirectionError: If the true vacuum is not deeper
        """
        # Stored minimum values may be stale, so compare the potential itself
        false_value = float(potential(false_vacuum.field_configuration))
        true_value = float(potential(true_vacuum.field_configuration))
        if not true_value < false_value:
            raise TunnelingDirectionError(
                f"Cannot tunnel from {false_vacuum} to the higher or degenerate "
                f"{true_vacuum}",
                false_value=false_value,
                true_value=true_value,
            )

        result = TunnelingResult(strategy=self.strategy)
        steps = STRATEGY_STEPS[self.strategy]
        if steps:
            self.action_solver.prepare(potential)

        threshold = self.config.survival_probability_threshold
        for position, step in enumerate(steps):
            if position > 0:
                previous = self._survival_of(steps[position - 1], result)
                if not previous > threshold:
                    logger.info(
                        f"{steps[position - 1].capitalize()} survival probability "
                        f"{previous:.6g} is not above {threshold}; skipping "
                        f"{step} tunneling"
                    )
                    break
            if step == QUANTUM:
                self.calculate_quantum_tunneling(potential, false_vacuum,
                                                 true_vacuum, result)
            else:
                self.calculate_thermal_tunneling(potential, false_vacuum,
                                                 true_vacuum, result)

        result.update_state()
        return result

    @staticmethod
    def _survival_of(step: str, result: TunnelingResult) -> float:
        if step == QUANTUM:
            return result.quantum_survival_probability
        return result.thermal_survival_probability

    def calculate_quantum_tunneling(
        self,
        potential: PotentialFunction,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum,
        result: Optional[TunnelingResult] = None
    ) -> TunnelingResult:
        """Zero-temperature survival probability and lifetime."""
        if result is None:
            result = TunnelingResult(strategy=self.strategy)

        action = self.action_solver.bounce_action(potential, false_vacuum,
                                                  true_vacuum, 0.0)
        scale_squared = potential.scale_squared_relevant_to_tunneling(false_vacuum,
                                                                      true_vacuum)
        estimate = self.calculator.quantum_survival(action, scale_squared)
        if estimate.warning:
            result.add_warning(estimate.warning)

        result.quantum_action = action
        result.quantum_survival_probability = estimate.probability
        result.quantum_lifetime_seconds = estimate.lifetime_seconds
        result.log_minus_log_quantum_probability = estimate.log_minus_log_probability

        logger.info(
            f"Quantum tunneling: S4 = {action:.6g}, lifetime = "
            f"{estimate.lifetime_seconds:.6g} s, survival probability = "
            f"{estimate.probability:.6g}"
        )
        result.update_state()
        return result

    def temperature_brackets(
        self,
        potential: PotentialFunction,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum,
        dsb_rolled_to_origin: bool
    ) -> Tuple[Optional[TemperatureBracket], TemperatureBracket]:
        """Critical temperature brackets of the false and true vacua."""
        accuracy = self.config.temperature_accuracy
        true_bracket = bracket_for_vacuum(potential, true_vacuum, accuracy, self.constants)
        if dsb_rolled_to_origin:
            return None, true_bracket
        false_bracket = bracket_for_vacuum(potential, false_vacuum, accuracy,
                                           self.constants)
        return false_bracket, true_bracket

    def calculate_thermal_tunneling(
        self,
        potential: PotentialFunction,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum,
        result: Optional[TunnelingResult] = None
    ) -> TunnelingResult:
        """
        Survival probability against thermal tunneling while cooling.

        The decay is assumed dominated by the temperature minimizing
        S3(T)/T, searched for below the lower of the critical temperatures
        of the two vacua. At each temperature both vacua are re-minimized;
        temperatures where they have merged or are no longer ordered do not
        contribute.
        """
        if result is None:
            result = TunnelingResult(strategy=self.strategy)

        separation_squared = (self.config.vacuum_separation_fraction ** 2
                              * false_vacuum.square_distance_to(true_vacuum))
        dsb_rolled_to_origin = false_vacuum.length_squared < separation_squared
        origin_value = potential(potential.field_origin)
        false_value = potential(false_vacuum.field_configuration)

        if false_value > origin_value and not dsb_rolled_to_origin:
            result.add_warning(
                "False vacuum is higher than the field origin, so the Universe "
                "would not have cooled into it; thermal survival probability set to 0"
            )
            result.thermal_survival_probability = 0.0
            result.dominant_temperature = 0.0
            result.log_minus_log_thermal_probability = math.inf
            result.update_state()
            return result

        false_bracket, true_bracket = self.temperature_brackets(
            potential, false_vacuum, true_vacuum, dsb_rolled_to_origin
        )
        upper_temperature = true_bracket.low
        if false_bracket is not None:
            upper_temperature = min(upper_temperature, false_bracket.low)
        result.diagnostics["temperature_brackets"] = {
            "false": (None if false_bracket is None
                      else (false_bracket.low, false_bracket.high)),
            "true": (true_bracket.low, true_bracket.high),
        }

        if not upper_temperature > 0.0:
            return self._no_thermal_tunneling(result, "no temperature range below "
                                                      "both critical temperatures")

        action_over_temperature = self._thermal_action_function(
            potential, false_vacuum, true_vacuum, separation_squared, result
        )
        dominant, minimum_value = self.find_dominant_temperature(
            action_over_temperature, upper_temperature
        )
        if not math.isfinite(minimum_value):
            return self._no_thermal_tunneling(
                result, f"no bounce exists below {upper_temperature:.6g} GeV"
            )

        estimate = self.calculator.thermal_survival(minimum_value, dominant)
        if estimate.warning:
            result.add_warning(estimate.warning)

        result.dominant_temperature = dominant
        result.thermal_action = minimum_value * dominant
        result.thermal_survival_probability = estimate.probability
        result.log_minus_log_thermal_probability = estimate.log_minus_log_probability
        result.partial_thermal_decay_width = self.calculator.partial_decay_width(
            estimate.log_minus_log_probability
        )

        logger.info(
            f"Thermal tunneling: dominant T = {dominant:.6g} GeV, S3/T = "
            f"{minimum_value:.6g}, survival probability = {estimate.probability:.6g}"
        )
        result.update_state()
        return result

    def _no_thermal_tunneling(self, result: TunnelingResult, reason: str) -> TunnelingResult:
        result.add_warning(f"Thermal tunneling impossible: {reason}; "
                           "thermal survival probability set to 1")
        result.thermal_survival_probability = 1.0
        result.partial_thermal_decay_width = 0.0
        result.log_minus_log_thermal_probability = -math.inf
        result.dominant_temperature = NOT_CALCULATED
        result.update_state()
        return result

    def _thermal_action_function(
        self,
        potential: PotentialFunction,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum,
        separation_squared: float,
        result: TunnelingResult
    ) -> Callable[[float], float]:
        """S3(T)/T with the vacua followed to T, infinite where no bounce exists."""
        minimizer = self.minimizer_factory(potential)
        cache: Dict[float, float] = {}
        scan = result.diagnostics.setdefault("thermal_scan", [])

        def action_over_temperature(temperature: float) -> float:
            temperature = float(temperature)
            if temperature in cache:
                return cache[temperature]
            value = math.inf
            try:
                false_at_t = minimizer(false_vacuum.field_configuration, temperature)
                true_at_t = minimizer(true_vacuum.field_configuration, temperature)
                if false_at_t.square_distance_to(true_at_t) < separation_squared:
                    logger.debug(f"Vacua have merged at T = {temperature:.6g} GeV")
                elif not true_at_t.function_value < false_at_t.function_value:
                    logger.debug(f"Vacua are not ordered at T = {temperature:.6g} GeV")
                else:
                    action = self.action_solver.bounce_action(
                        potential, false_at_t, true_at_t, temperature
                    )
                    value = action / temperature
            except (BounceActionError, ConvergenceError) as e:
                logger.debug(f"No thermal bounce at T = {temperature:.6g} GeV: {e}")
            cache[temperature] = value
            scan.append((temperature, value))
            return value

        return action_over_temperature

    def find_dominant_temperature(
        self,
        action_over_temperature: Callable[[float], float],
        upper_temperature: float
    ) -> Tuple[float, float]:
        """
        Temperature minimizing S3(T)/T below upper_temperature.

        A geometric grid locates the lowest value, which is then refined by
        bounded scalar minimization between its grid neighbors.

        Returns:
            Tuple of (temperature, S3/T there); S3/T is infinite if no
            grid temperature admits a bounce
        """
        grid = np.geomspace(THERMAL_SCAN_LOWER_FRACTION * upper_temperature,
                            THERMAL_SCAN_UPPER_FRACTION * upper_temperature,
                            self.config.thermal_grid_points)
        values = np.array([action_over_temperature(t) for t in grid])
        best_index = int(np.argmin(values))
        best_temperature = float(grid[best_index])
        best_value = float(values[best_index])
        if not math.isfinite(best_value):
            return best_temperature, best_value

        low = float(grid[max(best_index - 1, 0)])
        high = float(grid[min(best_index + 1, len(grid) - 1)])
        refined = optimize.minimize_scalar(
            action_over_temperature,
            bounds=(low, high),
            method="bounded",
            options={
                "xatol": self.config.dominant_temperature_tolerance * best_temperature,
                "maxiter": self.config.max_thermal_evaluations,
            },
        )
        if math.isfinite(refined.fun) and refined.fun < best_value:
            best_temperature = float(refined.x)
            best_value = float(refined.fun)

        logger.debug(
            f"Dominant tunneling temperature {best_temperature:.6g} GeV "
            f"(S3/T = {best_value:.6g})"
        )
        return best_temperature, best_value
