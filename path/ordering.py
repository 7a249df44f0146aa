"""Order in which intermediate path nodes are placed by recursive bisection."""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeOrderingPlan:
    """
    Visitation order for placing the intermediate nodes of a path.

    Path positions run from 0 (false vacuum) to number_of_intermediate_nodes + 1
    (true vacuum). The middle node is placed first, based on the two
    endpoints; then the midpoints of each half, and so on. For seven
    intermediate nodes the order is 4, 2, 6, 1, 3, 5, 7, where node 4 sits
    between 0 and 8, node 2 between 0 and 4, node 6 between 4 and 8, and so on.

    Attributes:
        number_of_intermediate_nodes: 2^k - 1 for k = number_of_splits
        number_of_splits: Number of bisection levels
        adjustment_order: Node indices in the order they are placed
        side_nodes: For each path position, the (false side, true side) pair
            of node indices it is placed between, or None for the endpoints
    """
    number_of_intermediate_nodes: int
    number_of_splits: int
    adjustment_order: Tuple[int, ...]
    side_nodes: Tuple[Optional[Tuple[int, int]], ...]

    @property
    def number_of_path_nodes(self) -> int:
        """Total number of nodes including both endpoints."""
        return self.number_of_intermediate_nodes + 2

    @property
    def levels(self) -> Tuple[Tuple[int, ...], ...]:
        """Adjustment order split into bisection levels of 1, 2, 4, ... nodes."""
        levels = []
        start = 0
        for split in range(self.number_of_splits):
            size = 2 ** split
            levels.append(self.adjustment_order[start:start + size])
            start += size
        return tuple(levels)

    def neighbors(self, node_index: int) -> Tuple[int, int]:
        """(false side, true side) node indices for an intermediate node."""
        pair = self.side_nodes[node_index]
        if pair is None:
            raise IndexError(f"Node {node_index} is an endpoint and has no side nodes")
        return pair


def plan_node_ordering(minimum_intermediate_nodes: int) -> NodeOrderingPlan:
    """
    Build the bisection ordering for at least the requested number of nodes.

    The number of intermediate nodes is the smallest 2^k - 1 that is not
    less than minimum_intermediate_nodes, so that every level of bisection
    splits each segment exactly in half.

    Args:
        minimum_intermediate_nodes: Lower bound on intermediate nodes

    Returns:
        NodeOrderingPlan

    Raises:
        ConfigurationError: If fewer than one node is requested
    """
    if minimum_intermediate_nodes < 1:
        raise ConfigurationError(
            f"Cannot parameterize a path with {minimum_intermediate_nodes} "
            f"intermediate nodes; at least one is needed"
        )

    number_of_nodes = 1
    number_of_splits = 0
    while number_of_nodes <= minimum_intermediate_nodes:
        number_of_nodes *= 2
        number_of_splits += 1
    number_of_nodes -= 1

    side_nodes = [None] * (number_of_nodes + 2)
    adjustment_order = []

    segment_size = number_of_nodes + 1
    new_segments = 1
    for _ in range(number_of_splits):
        segment_size //= 2
        for segment in range(new_segments):
            node_index = segment_size * (1 + 2 * segment)
            adjustment_order.append(node_index)
            side_nodes[node_index] = (node_index - segment_size,
                                      node_index + segment_size)
        new_segments *= 2

    logger.debug(
        f"Planned {number_of_nodes} intermediate nodes in {number_of_splits} "
        f"levels: order {adjustment_order}"
    )

    return NodeOrderingPlan(
        number_of_intermediate_nodes=number_of_nodes,
        number_of_splits=number_of_splits,
        adjustment_order=tuple(adjustment_order),
        side_nodes=tuple(side_nodes),
    )
