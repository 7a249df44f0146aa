"""Custom exception hierarchy for vacuum_tunnel."""


class VacuumTunnelError(Exception):
    """Base exception for all vacuum_tunnel errors."""
    pass


class ConfigurationError(VacuumTunnelError):
    """Raised when configuration is invalid or inconsistent."""
    pass


class TunnelingDirectionError(ConfigurationError):
    """Raised when the supposed true vacuum is not deeper than the false vacuum."""

    def __init__(self, message: str, false_value: float = None,
                 true_value: float = None):
        super().__init__(message)
        self.false_value = false_value
        self.true_value = true_value


class NumericalFailure(VacuumTunnelError):
    """Raised when a single minimization attempt gives non-finite values."""

    def __init__(self, message: str, starting_point=None,
                 scale_factor: float = None):
        super().__init__(message)
        self.starting_point = starting_point
        self.scale_factor = scale_factor


class ConvergenceError(VacuumTunnelError):
    """Raised when an iterative procedure fails to converge."""

    def __init__(self, message: str, iterations: int = None,
                 final_value: float = None, threshold: float = None):
        super().__init__(message)
        self.iterations = iterations
        self.final_value = final_value
        self.threshold = threshold


class BounceActionError(VacuumTunnelError):
    """Raised when a bounce solution cannot be found."""

    def __init__(self, message: str, temperature: float = None,
                 last_event: str = None):
        super().__init__(message)
        self.temperature = temperature
        self.last_event = last_event


class WorkflowError(VacuumTunnelError):
    """Raised when processing a parameter point fails."""

    def __init__(self, message: str, point: str = None):
        super().__init__(message)
        self.point = point
