"""Result container and solver interface for vacuum tunneling."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional
import logging

from ..core.config import TunnelingStrategy
from ..potential.function import PotentialFunction
from ..potential.minimum import PotentialMinimum

logger = logging.getLogger(__name__)

# Value of every result field that the chosen strategy did not calculate
NOT_CALCULATED = -1.0


class TunnelingState(Enum):
    """Which calculations have been completed for a parameter point."""
    NOT_STARTED = auto()
    NONE = auto()
    QUANTUM_DONE = auto()
    THERMAL_DONE = auto()
    BOTH = auto()


@dataclass
class TunnelingResult:
    """
    Results from a tunneling calculation.

    Every probability, lifetime, and temperature starts at NOT_CALCULATED
    (negative) and is only overwritten by the calculation that produces it.

    Attributes:
        strategy: Strategy that produced the result
        quantum_survival_probability: Probability of surviving quantum
            tunneling for the age of the Universe
        quantum_lifetime_seconds: Quantum tunneling lifetime in seconds
        thermal_survival_probability: Probability of surviving thermal
            tunneling while the Universe cooled
        dominant_temperature: Temperature (GeV) dominating thermal decay
        partial_thermal_decay_width: Integrated thermal decay width
        quantum_action: Zero-temperature bounce action S4
        thermal_action: Bounce action S3 at the dominant temperature (GeV)
        log_minus_log_quantum_probability: ln(-ln P_quantum)
        log_minus_log_thermal_probability: ln(-ln P_thermal)
        state: Which calculations have completed
        warnings: Non-fatal numerical degradations, in order
        diagnostics: Additional diagnostic information
    """
    strategy: TunnelingStrategy = TunnelingStrategy.NO_TUNNELING
    quantum_survival_probability: float = NOT_CALCULATED
    quantum_lifetime_seconds: float = NOT_CALCULATED
    thermal_survival_probability: float = NOT_CALCULATED
    dominant_temperature: float = NOT_CALCULATED
    partial_thermal_decay_width: float = NOT_CALCULATED
    quantum_action: Optional[float] = None
    thermal_action: Optional[float] = None
    log_minus_log_quantum_probability: Optional[float] = None
    log_minus_log_thermal_probability: Optional[float] = None
    state: TunnelingState = TunnelingState.NOT_STARTED
    warnings: List[str] = field(default_factory=list)
    diagnostics: Dict[str, Any] = field(default_factory=dict)

    @property
    def quantum_calculated(self) -> bool:
        return self.quantum_survival_probability >= 0.0

    @property
    def thermal_calculated(self) -> bool:
        return self.thermal_survival_probability >= 0.0

    @property
    def survival_probability(self) -> float:
        """
        Product of the calculated survival probabilities.

        Returns NOT_CALCULATED if neither probability was calculated.
        """
        probabilities = [
            p for p in (self.quantum_survival_probability,
                        self.thermal_survival_probability)
            if p >= 0.0
        ]
        if not probabilities:
            return NOT_CALCULATED
        product = 1.0
        for p in probabilities:
            product *= p
        return product

    def add_warning(self, message: str) -> None:
        """Record a non-fatal warning and pass it to the log."""
        logger.warning(message)
        self.warnings.append(message)

    def update_state(self) -> None:
        """Set state from which probabilities have been calculated."""
        if self.quantum_calculated and self.thermal_calculated:
            self.state = TunnelingState.BOTH
        elif self.quantum_calculated:
            self.state = TunnelingState.QUANTUM_DONE
        elif self.thermal_calculated:
            self.state = TunnelingState.THERMAL_DONE
        else:
            self.state = TunnelingState.NONE

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "strategy": self.strategy.value,
            "quantum_survival_probability": self.quantum_survival_probability,
            "quantum_lifetime_seconds": self.quantum_lifetime_seconds,
            "thermal_survival_probability": self.thermal_survival_probability,
            "dominant_temperature": self.dominant_temperature,
            "partial_thermal_decay_width": self.partial_thermal_decay_width,
            "quantum_action": self.quantum_action,
            "thermal_action": self.thermal_action,
            "log_minus_log_quantum_probability": self.log_minus_log_quantum_probability,
            "log_minus_log_thermal_probability": self.log_minus_log_thermal_probability,
            "state": self.state.name,
            "warnings": list(self.warnings),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TunnelingResult":
        """Create from dictionary."""
        return cls(
            strategy=TunnelingStrategy.from_name(data["strategy"]),
            quantum_survival_probability=data["quantum_survival_probability"],
            quantum_lifetime_seconds=data["quantum_lifetime_seconds"],
            thermal_survival_probability=data["thermal_survival_probability"],
            dominant_temperature=data["dominant_temperature"],
            partial_thermal_decay_width=data["partial_thermal_decay_width"],
            quantum_action=data.get("quantum_action"),
            thermal_action=data.get("thermal_action"),
            log_minus_log_quantum_probability=data.get("log_minus_log_quantum_probability"),
            log_minus_log_thermal_probability=data.get("log_minus_log_thermal_probability"),
            state=TunnelingState[data.get("state", "NOT_STARTED")],
            warnings=list(data.get("warnings", [])),
        )


class BounceActionSolver(ABC):
    """
    Abstract interface for bounce-action evaluation.

    Implementations return the dimensionless O(4)-symmetric action S4 at
    zero temperature, or the O(3)-symmetric action S3 in GeV at non-zero
    temperature, for tunneling between vacua that are already minima at
    that temperature.
    """

    name: str = "base"

    def prepare(self, potential: PotentialFunction) -> None:
        """Hook called once per parameter point before any action evaluation."""
        pass

    @abstractmethod
    def bounce_action(
        self,
        potential: PotentialFunction,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum,
        temperature: float = 0.0
    ) -> float:
        """
        Bounce action for tunneling from false_vacuum to true_vacuum.

        Args:
            potential: Potential to tunnel through
            false_vacuum: Metastable minimum at this temperature
            true_vacuum: Deeper minimum at this temperature
            temperature: Temperature in GeV

        Returns:
            S4 (temperature == 0) or S3 in GeV (temperature > 0)
        """
        pass

    def __call__(self, potential, false_vacuum, true_vacuum, temperature=0.0) -> float:
        return self.bounce_action(potential, false_vacuum, true_vacuum, temperature)
