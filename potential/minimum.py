"""Local minima of the scalar potential."""

from dataclasses import dataclass
from typing import Optional, Sequence
import numpy as np


@dataclass(frozen=True, eq=False)
class PotentialMinimum:
    """
    A field configuration at which the potential has a local minimum.

    The field values are stored as a read-only array, so a minimum can be
    shared between calculations without being altered.

    Attributes:
        field_configuration: Field values in GeV
        function_value: Potential energy density at the minimum (GeV^4)
        function_error: Numerical error estimate on function_value
    """
    field_configuration: np.ndarray
    function_value: float
    function_error: float = 0.0

    def __post_init__(self):
        fields = np.array(self.field_configuration, dtype=float).reshape(-1)
        fields.setflags(write=False)
        object.__setattr__(self, "field_configuration", fields)
        object.__setattr__(self, "function_value", float(self.function_value))
        object.__setattr__(self, "function_error", float(self.function_error))

    @property
    def number_of_fields(self) -> int:
        """Number of field amplitudes."""
        return len(self.field_configuration)

    @property
    def length_squared(self) -> float:
        """Squared Euclidean distance from the field origin."""
        return float(np.dot(self.field_configuration, self.field_configuration))

    def square_distance_to(self, other) -> float:
        """
        Squared Euclidean distance to another minimum or field configuration.

        Args:
            other: PotentialMinimum or array-like of field values

        Returns:
            Squared distance in GeV^2
        """
        if isinstance(other, PotentialMinimum):
            other = other.field_configuration
        difference = self.field_configuration - np.asarray(other, dtype=float)
        return float(np.dot(difference, difference))

    def is_finite(self) -> bool:
        """True if the value, error, and all field values are finite."""
        return bool(
            np.isfinite(self.function_value)
            and np.isfinite(self.function_error)
            and np.all(np.isfinite(self.field_configuration))
        )

    def as_mathematica(self, field_names: Optional[Sequence[str]] = None) -> str:
        """Format as a Mathematica-style replacement list."""
        if field_names is None:
            field_names = [f"f{i}" for i in range(self.number_of_fields)]
        rules = ", ".join(
            f"{name} -> {value:.6g}"
            for name, value in zip(field_names, self.field_configuration)
        )
        return f"{{ {rules} }}, {{ V -> {self.function_value:.6g} }}"

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "field_configuration": self.field_configuration.tolist(),
            "function_value": self.function_value,
            "function_error": self.function_error,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PotentialMinimum":
        """Create from dictionary."""
        return cls(
            field_configuration=np.array(data["field_configuration"]),
            function_value=data["function_value"],
            function_error=data.get("function_error", 0.0),
        )

    def __repr__(self) -> str:
        return (
            f"PotentialMinimum(fields={self.field_configuration.tolist()}, "
            f"V={self.function_value:.6g})"
        )
