"""Workflow orchestration for parameter points and scans."""

from .runner import (
    ParameterPoint,
    PointResult,
    PointStatus,
    ScanState,
    VacuumStabilityWorkflow,
)

__all__ = [
    "ParameterPoint",
    "PointResult",
    "PointStatus",
    "ScanState",
    "VacuumStabilityWorkflow",
]
