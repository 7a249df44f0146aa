"""Per-point pipeline and batch scans of vacuum stability."""

import json
import logging
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..core.config import WorkflowConfig
from ..core.constants import DEFAULT_CONSTANTS, PhysicalConstants
from ..core.exceptions import VacuumTunnelError, WorkflowError
from ..potential.function import PotentialFunction
from ..potential.minimizer import GradientMinimizer, VacuumSearch
from ..potential.minimum import PotentialMinimum
from ..tunneling.base import BounceActionSolver
from ..tunneling.bounce import PathBounceActionSolver
from ..tunneling.tunneler import BounceActionTunneler

logger = logging.getLogger(__name__)


class PointStatus(Enum):
    """Outcome of processing one parameter point."""
    STABLE = "stable"
    METASTABLE = "metastable"
    FAILED = "failed"


@dataclass
class ParameterPoint:
    """
    One potential to test, with the points to roll when searching for vacua.

    Attributes:
        name: Label used in logs and results
        potential: The potential
        starting_points: Field configurations rolled to find panic vacua
        false_vacuum: Skip the vacuum search and use this false vacuum
        true_vacuum: Skip the vacuum search and use this true vacuum
    """
    name: str
    potential: PotentialFunction
    starting_points: List[Sequence[float]] = field(default_factory=list)
    false_vacuum: Optional[PotentialMinimum] = None
    true_vacuum: Optional[PotentialMinimum] = None


@dataclass
class PointResult:
    """Serializable outcome of one parameter point."""
    name: str
    status: str
    vacuum_search: Optional[Dict[str, Any]] = None
    tunneling: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    elapsed_seconds: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PointResult":
        return cls(**data)


@dataclass
class ScanState:
    """
    Serializable state of a batch scan.

    Stores one PointResult dictionary per processed point.
    """
    results: List[Dict[str, Any]] = field(default_factory=list)
    timing: Dict[str, float] = field(default_factory=dict)
    config: Optional[Dict] = None

    @property
    def completed_points(self) -> List[str]:
        return [result["name"] for result in self.results]

    def save(self, filepath: Path) -> None:
        """Save state to JSON file."""
        filepath = Path(filepath)
        with open(filepath, 'w') as f:
            json.dump(asdict(self), f, indent=2, default=_json_default)
        logger.info(f"Saved scan state to {filepath}")

    @classmethod
    def load(cls, filepath: Path) -> "ScanState":
        """Load state from JSON file."""
        filepath = Path(filepath)
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls(**data)


def _json_default(value):
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, Enum):
        return value.value
    return str(value)


class VacuumStabilityWorkflow:
    """
    Vacuum search followed by tunneling for parameter points.

    Example:
        workflow = VacuumStabilityWorkflow(WorkflowConfig(output_file="scan.json"))
        state = workflow.run_scan(points)
    """

    def __init__(
        self,
        config: Optional[WorkflowConfig] = None,
        action_solver: Optional[BounceActionSolver] = None,
        constants: PhysicalConstants = DEFAULT_CONSTANTS
    ):
        """
        Args:
            config: Workflow configuration (default if None)
            action_solver: Bounce solver (path deformation if None)
            constants: Physical constants for survival estimates
        """
        self.config = config or WorkflowConfig()
        self.action_solver = action_solver or PathBounceActionSolver(self.config.path)
        self.constants = constants
        self.state = ScanState()

    def _make_minimizer(self, potential: PotentialFunction) -> GradientMinimizer:
        return GradientMinimizer(potential, self.config.minimizer)

    def run(self, point: ParameterPoint, raise_on_error: bool = False) -> PointResult:
        """
        Process one parameter point.

        Failures are recorded in the returned PointResult rather than raised,
        unless raise_on_error is set.

        Raises:
            WorkflowError: If raise_on_error and the point failed
        """
        start_time = datetime.now()
        logger.info(f"--- Parameter point: {point.name} ---")
        result = PointResult(name=point.name, status=PointStatus.FAILED.value)

        try:
            false_vacuum, true_vacuum = point.false_vacuum, point.true_vacuum
            if false_vacuum is None or true_vacuum is None:
                search = VacuumSearch(point.potential,
                                      self._make_minimizer(point.potential),
                                      self.config.minimizer)
                search_result = search.find_minima(point.starting_points)
                result.vacuum_search = search_result.to_dict()
                if search_result.is_stable:
                    result.status = PointStatus.STABLE.value
                    return result
                false_vacuum = search_result.dsb_vacuum
                true_vacuum = search_result.panic_vacuum

            tunneler = BounceActionTunneler(
                self.action_solver,
                self.config.tunneling,
                self.constants,
                minimizer_factory=self._make_minimizer,
            )
            tunneling_result = tunneler.calculate_tunneling(point.potential,
                                                            false_vacuum, true_vacuum)
            result.tunneling = tunneling_result.to_dict()
            result.status = PointStatus.METASTABLE.value

        except VacuumTunnelError as e:
            logger.error(f"Parameter point {point.name} failed: {e}")
            result.error = str(e)
            if raise_on_error:
                raise WorkflowError(f"Parameter point failed: {e}", point=point.name) from e

        except Exception as e:
            logger.exception(f"Parameter point {point.name} raised {type(e).__name__}")
            result.error = f"{type(e).__name__}: {e}"
            if raise_on_error:
                raise WorkflowError(f"Parameter point failed: {e}", point=point.name) from e

        finally:
            result.elapsed_seconds = (datetime.now() - start_time).total_seconds()

        return result

    def run_scan(
        self,
        points: Sequence[ParameterPoint],
        max_workers: Optional[int] = None
    ) -> ScanState:
        """
        Process every point, optionally in worker processes.

        With max_workers > 1 the points and solver must be picklable. Results
        keep the order of the input points.

        Args:
            points: Parameter points to process
            max_workers: Number of worker processes (serial if None or 1)

        Returns:
            ScanState with one result per point
        """
        start_time = datetime.now()
        logger.info(f"Starting scan of {len(points)} parameter points")
        self.state = ScanState(config=asdict(self.config))

        if max_workers is not None and max_workers > 1:
            with ProcessPoolExecutor(max_workers=max_workers) as executor:
                point_results = list(executor.map(self.run, points))
        else:
            point_results = [self.run(point) for point in points]

        for point_result in point_results:
            self.state.results.append(point_result.to_dict())

        n_failed = sum(1 for r in point_results if r.status == PointStatus.FAILED.value)
        total_time = (datetime.now() - start_time).total_seconds()
        self.state.timing["total"] = total_time
        logger.info(
            f"Scan completed in {total_time:.1f}s: {len(point_results) - n_failed} "
            f"points processed, {n_failed} failed"
        )

        if self.config.output_file:
            self.state.save(self.config.output_file)

        return self.state
