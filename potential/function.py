"""Abstract interface for the scalar potential being tested for stability."""

from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence
import numpy as np

from .minimum import PotentialMinimum
from ..core.exceptions import ConfigurationError


class PotentialFunction(ABC):
    """
    Abstract base class for (possibly temperature-dependent) potentials.

    Implementations must be pure: evaluating the potential must not change
    any state that affects later evaluations.
    """

    def __init__(
        self,
        field_names: Sequence[str],
        dsb_field_values: Optional[Sequence[float]] = None
    ):
        """
        Initialize potential.

        Args:
            field_names: Names of the scalar fields, one per field-space axis
            dsb_field_values: Field values of the expected (DSB) vacuum,
                used as the starting point of the vacuum search
        """
        self._field_names = list(field_names)
        if not self._field_names:
            raise ConfigurationError("A potential needs at least one field")
        self._origin = np.zeros(len(self._field_names))
        if dsb_field_values is None:
            dsb_field_values = self._origin
        self._dsb_field_values = np.array(dsb_field_values, dtype=float)
        if self._dsb_field_values.shape != self._origin.shape:
            raise ConfigurationError(
                f"DSB field values have {self._dsb_field_values.size} entries "
                f"but the potential has {self.number_of_fields} fields"
            )

    @abstractmethod
    def __call__(self, field_configuration: np.ndarray,
                 temperature: float = 0.0) -> float:
        """
        Energy density in GeV^4.

        Args:
            field_configuration: Field values in GeV
            temperature: Temperature in GeV

        Returns:
            Potential value
        """
        pass

    @property
    def number_of_fields(self) -> int:
        """Number of field-space dimensions."""
        return len(self._field_names)

    @property
    def field_names(self) -> List[str]:
        """Field names."""
        return list(self._field_names)

    @property
    def field_origin(self) -> np.ndarray:
        """The field configuration with all fields zero."""
        return self._origin.copy()

    @property
    def dsb_field_values(self) -> np.ndarray:
        """Input field values for the DSB vacuum."""
        return self._dsb_field_values.copy()

    def field_index(self, field_name: str) -> int:
        """Index of a field by name, or -1 if not found."""
        try:
            return self._field_names.index(field_name)
        except ValueError:
            return -1

    def gradient(self, field_configuration: np.ndarray,
                 temperature: float = 0.0, step: float = 1e-6) -> np.ndarray:
        """
        Central-difference gradient of the potential.

        The step is relative to the field magnitude, with an absolute floor.
        """
        fields = np.asarray(field_configuration, dtype=float)
        grad = np.zeros_like(fields)
        for i in range(len(fields)):
            h = step * max(1.0, abs(fields[i]))
            shifted_up = fields.copy()
            shifted_down = fields.copy()
            shifted_up[i] += h
            shifted_down[i] -= h
            grad[i] = (self(shifted_up, temperature)
                       - self(shifted_down, temperature)) / (2.0 * h)
        return grad

    def scale_squared_relevant_to_tunneling(
        self,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum
    ) -> float:
        """
        Square of the energy scale (GeV^2) setting the tunneling prefactor.

        Default is the largest of the squared lengths of the two vacua and
        their squared separation. Potentials with a renormalization scale
        should override this.
        """
        return max(
            false_vacuum.length_squared,
            true_vacuum.length_squared,
            false_vacuum.square_distance_to(true_vacuum),
        )

    def field_configuration_as_mathematica(self, field_configuration) -> str:
        """Format field values as a Mathematica-style replacement list."""
        rules = ", ".join(
            f"{name} -> {value:.6g}"
            for name, value in zip(self._field_names, field_configuration)
        )
        return f"{{ {rules} }}"


class CallablePotential(PotentialFunction):
    """
    Adapts a plain callable V(fields, T) to the PotentialFunction interface.

    Example:
        V = CallablePotential(lambda x, T: x[0]**2 * (x[0] - 1.0)**2, ["h"])
    """

    def __init__(
        self,
        function: Callable[[np.ndarray, float], float],
        field_names: Sequence[str],
        dsb_field_values: Optional[Sequence[float]] = None,
        scale_squared: Optional[float] = None
    ):
        """
        Args:
            function: V(fields, temperature) in GeV^4
            field_names: Names of the fields
            dsb_field_values: Expected vacuum for the vacuum search
            scale_squared: Fixed tunneling scale squared (GeV^2), overriding
                the default estimate if given
        """
        super().__init__(field_names, dsb_field_values)
        self._function = function
        self._scale_squared = scale_squared

    def __call__(self, field_configuration: np.ndarray,
                 temperature: float = 0.0) -> float:
        return float(self._function(np.asarray(field_configuration, dtype=float),
                                    temperature))

    def scale_squared_relevant_to_tunneling(
        self,
        false_vacuum: PotentialMinimum,
        true_vacuum: PotentialMinimum
    ) -> float:
        if self._scale_squared is not None:
            return self._scale_squared
        return super().scale_squared_relevant_to_tunneling(false_vacuum, true_vacuum)
