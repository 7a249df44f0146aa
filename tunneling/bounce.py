"""
Bounce actions by path deformation and overshoot/undershoot shooting.

The multi-field problem is reduced to one dimension along a path through
field space: the path is parameterized by NodesOnBisectingPlanes, the
potential along it by arc length s, and the O(alpha + 1)-symmetric bounce
equation

    s'' + (alpha / r) s' = dV/ds

is solved by shooting. The path itself is then deformed to minimize the
resulting action, since the bounce is the minimum-action escape path.
"""

from dataclasses import dataclass
from typing import Callable, Optional
import logging
import math
import numpy as np
from scipy import integrate, interpolate, optimize, special

from .base import BounceActionSolver
from ..core.config import PathConfig
from ..core.exceptions import BounceActionError
from ..path.bisecting_planes import NodesOnBisectingPlanes
from ..potential.function import PotentialFunction
from ..potential.minimum import PotentialMinimum

logger = logging.getLogger(__name__)

OVERSHOOT = "overshoot"
UNDERSHOOT = "undershoot"

# Grid used to locate the top of the barrier along the path
BARRIER_SCAN_POINTS = 201

# Samples of the profile used for the action integral
ACTION_SAMPLE_POINTS = 2001


def sphere_area(alpha: int) -> float:
    """Area of the unit sphere bounding an (alpha + 1)-dimensional ball."""
    dimension = alpha + 1
    return 2.0 * math.pi ** (0.5 * dimension) / special.gamma(0.5 * dimension)


def ball_volume(alpha: int, radius: float) -> float:
    """Volume of an (alpha + 1)-dimensional ball."""
    dimension = alpha + 1
    return (math.pi ** (0.5 * dimension) * radius ** dimension
            / special.gamma(0.5 * dimension + 1.0))


@dataclass
class BounceProfile:
    """
    Solution of the one-dimensional bounce equation.

    Attributes:
        radii: Radial coordinate samples
        values: s(r), arc length along the path
        derivatives: ds/dr
        initial_value: s at the center of the bubble
        shots: Number of trial integrations used
    """
    radii: np.ndarray
    values: np.ndarray
    derivatives: np.ndarray
    initial_value: float
    shots: int


class OneDimensionalBounce:
    """
    Overshoot/undershoot solution of the bounce along a fixed path.

    The false vacuum is at s = 0 and the true vacuum at s = path_length.
    Starting points are parameterized as

        s0 = L - (L - s_barrier) exp(-x),

    so x = 0 starts at the top of the barrier (certain undershoot) and large
    x starts ever closer to the true vacuum (eventual overshoot).
    """

    def __init__(
        self,
        potential_along_path: Callable[[float], float],
        path_length: float,
        alpha: int = 3,
        max_shots: int = 80,
        xtol: float = 1e-6,
        temperature: float = 0.0
    ):
        """
        Args:
            potential_along_path: V(s) in GeV^4
            path_length: Arc length L between the vacua in GeV
            alpha: 3 for O(4) (zero temperature), 2 for O(3) (thermal)
            max_shots: Cap on trial integrations
            xtol: Width in x at which shooting stops
            temperature: Only used in error messages
        """
        if not path_length > 0.0:
            raise BounceActionError(
                f"Path length must be positive, got {path_length}",
                temperature=temperature,
            )
        self.potential_along_path = potential_along_path
        self.path_length = path_length
        self.alpha = alpha
        self.max_shots = max_shots
        self.xtol = xtol
        self.temperature = temperature

        self.false_value = potential_along_path(0.0)
        true_difference = potential_along_path(path_length) - self.false_value
        if not true_difference < 0.0:
            raise BounceActionError(
                f"True vacuum is not deeper than the false vacuum along the path "
                f"(difference {true_difference:.6g})",
                temperature=temperature,
            )

        grid = np.linspace(0.0, path_length, BARRIER_SCAN_POINTS)
        heights = np.array([self.relative_potential(s) for s in grid])
        top = int(np.argmax(heights))
        self.barrier_position = float(grid[top])
        self.barrier_height = float(heights[top])
        if not self.barrier_height > 0.0 or top == 0:
            raise BounceActionError(
                "No potential barrier between the vacua along the path",
                temperature=temperature,
            )
        self.radius_scale = self.barrier_position / math.sqrt(2.0 * self.barrier_height)

    def relative_potential(self, s: float) -> float:
        """V(s) - V(false vacuum)."""
        return self.potential_along_path(s) - self.false_value

    def potential_derivative(self, s: float) -> float:
        h = 1e-6 * self.path_length
        return (self.potential_along_path(s + h)
                - self.potential_along_path(s - h)) / (2.0 * h)

    def starting_value(self, x: float) -> float:
        return (self.path_length
                - (self.path_length - self.barrier_position) * math.exp(-x))

    def _shoot(self, x: float):
        """Integrate outward from s0(x); return (kind, solution, r0)."""
        alpha = self.alpha
        s0 = self.starting_value(x)
        slope = self.potential_derivative(s0)
        r0 = 1e-6 * self.radius_scale
        y0 = [s0 + slope * r0 * r0 / (2.0 * (alpha + 1)),
              slope * r0 / (alpha + 1)]
        if slope >= 0.0:
            return UNDERSHOOT, None, r0

        def equations(r, y):
            return [y[1], self.potential_derivative(y[0]) - alpha / r * y[1]]

        def crossed_false_vacuum(r, y):
            return y[0]
        crossed_false_vacuum.terminal = True
        crossed_false_vacuum.direction = -1

        def turned_around(r, y):
            return y[1]
        turned_around.terminal = True
        turned_around.direction = 1

        r_max = 1e4 * self.radius_scale
        scale = self.path_length
        solution = integrate.solve_ivp(
            equations,
            (r0, r_max),
            y0,
            method="DOP853",
            rtol=1e-9,
            atol=[1e-12 * scale, 1e-12 * scale / self.radius_scale],
            events=(crossed_false_vacuum, turned_around),
            dense_output=True,
        )
        if solution.status == -1:
            raise BounceActionError(
                f"Bounce integration failed: {solution.message}",
                temperature=self.temperature,
            )
        if len(solution.t_events[0]) > 0:
            return OVERSHOOT, solution, r0
        return UNDERSHOOT, solution, r0

    def find_profile(self) -> BounceProfile:
        """
        Bisect on the starting point between undershoot and overshoot.

        Raises:
            BounceActionError: If no overshoot is found within max_shots
        """
        x_min, x_max = 0.0, math.inf
        x = 1.0
        best = None
        last_event = None
        shots = 0
        for shots in range(1, self.max_shots + 1):
            kind, solution, r0 = self._shoot(x)
            last_event = kind
            if kind == OVERSHOOT:
                x_max = x
                best = (x, solution, r0)
            else:
                x_min = x

            if math.isinf(x_max):
                x *= 5.0
            else:
                if x_max - x_min < self.xtol:
                    break
                x = 0.5 * (x_min + x_max)
        else:
            if best is None:
                raise BounceActionError(
                    f"No overshoot found in {self.max_shots} shots",
                    temperature=self.temperature,
                    last_event=last_event,
                )
            logger.warning(
                f"Shooting stopped after {self.max_shots} shots with x bracket "
                f"[{x_min:.6g}, {x_max:.6g}]"
            )

        x, solution, r0 = best
        r_end = float(solution.t_events[0][0])
        radii = np.linspace(r0, r_end, ACTION_SAMPLE_POINTS)
        values, derivatives = solution.sol(radii)
        logger.debug(
            f"Bounce found after {shots} shots: s0 = {self.starting_value(x):.6g}, "
            f"wall radius ~ {r_end:.6g}"
        )
        return BounceProfile(
            radii=radii,
            values=values,
            derivatives=derivatives,
            initial_value=self.starting_value(x),
            shots=shots,
        )

    def action(self, profile: Optional[BounceProfile] = None) -> float:
        """
        Euclidean action of the bounce.

        S = Omega_alpha * integral r^alpha (s'^2 / 2 + V(s) - V_false) dr,
        plus the interior ball of radius r0 treated as homogeneous.
        """
        if profile is None:
            profile = self.find_profile()
        radii = profile.radii
        potential_terms = np.array([self.relative_potential(s) for s in profile.values])
        integrand = radii ** self.alpha * (0.5 * profile.derivatives ** 2
                                           + potential_terms)
        action = sphere_area(self.alpha) * integrate.simpson(integrand, x=radii)
        action += (ball_volume(self.alpha, radii[0])
                   * self.relative_potential(profile.initial_value))
        if not math.isfinite(action):
            raise BounceActionError("Bounce action is not finite",
                                    temperature=self.temperature)
        return float(action)


class PathBounceActionSolver(BounceActionSolver):
    """
    Bounce action minimized over deformations of the tunneling path.

    The path starts straight between the vacua; the reduced coordinates of
    every intermediate node are then varied by Nelder-Mead to minimize the
    one-dimensional bounce action along the interpolated path.

    Example:
        solver = PathBounceActionSolver(PathConfig(minimum_intermediate_nodes=3))
        s4 = solver.bounce_action(potential, false_vacuum, true_vacuum)
    """

    name = "path_deformation"

    def __init__(self, config: Optional[PathConfig] = None):
        self.config = config or PathConfig()
        self.last_path_nodes: Optional[np.ndarray] = None

    def path_action(
        self,
        potential: PotentialFunction,
        path_nodes: np.ndarray,
        temperature: float = 0.0
    ) -> float:
        """Bounce action along a fixed path through the given nodes."""
        segment_lengths = np.linalg.norm(np.diff(path_nodes, axis=0), axis=1)
        if np.any(segment_lengths <= 0.0):
            raise BounceActionError("Path has coincident nodes",
                                    temperature=temperature)
        arc_lengths = np.concatenate([[0.0], np.cumsum(segment_lengths)])
        curve = interpolate.PchipInterpolator(arc_lengths, path_nodes, axis=0)

        def potential_along_path(s: float) -> float:
            return potential(curve(s), temperature)

        bounce = OneDimensionalBounce(
            potential_along_path,
            float(arc_lengths[-1]),
            alpha=3 if temperature == 0.0 else 2,
            max_shots=self.config.bounce_max_shots,
            xtol=self.config.bounce_xtol,
            temperature=temperature,
        )
        return bounce.action()

    def bounce_action(
        self,
        potential: PotentialFunction,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum,
        temperature: float = 0.0
    ) -> float:
        path = NodesOnBisectingPlanes(
            potential.number_of_fields,
            self.config.minimum_intermediate_nodes,
            self.config.reference_field,
        )
        path.set_vacua(false_vacuum, true_vacuum)
        straight_action = self.path_action(potential, path.path_nodes, temperature)
        self.last_path_nodes = path.path_nodes.copy()

        if path.reduced_dimension == 0:
            return straight_action

        n_parameters = path.number_of_intermediate_nodes * path.reduced_dimension
        step = 0.1 * math.sqrt(false_vacuum.square_distance_to(true_vacuum))
        initial = np.zeros(n_parameters)
        simplex = np.vstack([initial, initial + step * np.eye(n_parameters)])

        def objective(parameters):
            nodes = path.build_path(parameters)
            try:
                return self.path_action(potential, nodes, temperature)
            except BounceActionError as e:
                logger.debug(f"Rejected path deformation: {e}")
                return math.inf

        result = optimize.minimize(
            objective,
            initial,
            method="Nelder-Mead",
            options={
                "initial_simplex": simplex,
                "maxiter": self.config.max_path_iterations,
                "xatol": 1e-6 * step,
                "fatol": self.config.path_tolerance * abs(straight_action),
            },
        )

        if result.fun < straight_action:
            best_action = float(result.fun)
            self.last_path_nodes = path.build_path(result.x)
        else:
            best_action = straight_action
            self.last_path_nodes = path.build_path(initial)

        logger.info(
            f"Bounce action at T = {temperature:.6g} GeV: {best_action:.6g} "
            f"(straight path {straight_action:.6g}, {result.nit} deformation steps)"
        )
        return best_action
