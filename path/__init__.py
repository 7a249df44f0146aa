"""Tunneling path parameterization between two vacua."""

from .ordering import NodeOrderingPlan, plan_node_ordering
from .bisecting_planes import NodesOnBisectingPlanes, rotation_matrix_to_direction

__all__ = [
    "NodeOrderingPlan",
    "plan_node_ordering",
    "NodesOnBisectingPlanes",
    "rotation_matrix_to_direction",
]
