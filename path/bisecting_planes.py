"""Path parameterization with nodes on planes bisecting their neighbors.

Each intermediate node lies on the hyperplane that perpendicularly bisects
the segment between its two side nodes (see ordering.py). The position on
that plane is given by numberOfFields - 1 reduced coordinates, which are
rotated from the plane perpendicular to the reference-field axis into the
plane perpendicular to (true side node - false side node).
"""

from typing import List, Optional, Sequence, Tuple, Union
import logging
import numpy as np

from .ordering import NodeOrderingPlan, plan_node_ordering
from ..potential.minimum import PotentialMinimum
from ..core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Components smaller than this fraction of the vector length count as zero pivots
ZERO_PIVOT_TOLERANCE = 1e-12


def rotation_matrix_to_direction(
    direction: np.ndarray,
    reference_field: int = 0
) -> Tuple[np.ndarray, bool]:
    """
    Orthonormal matrix taking the reference-field axis onto a direction.

    Column reference_field is direction / |direction|. The remaining columns
    are built one at a time: column c (skipping the reference column) is
    proportional to (d_0, ..., d_c, -S_c / d_(c+1), 0, ..., 0) with
    S_c = d_0^2 + ... + d_c^2, which is orthogonal to the direction and to
    every earlier column. This is not the unique such matrix for more than
    two fields, but it is cheap and consistent.

    If any component of the direction is zero the construction divides by
    zero, so a Householder QR completion of the direction is used instead.

    Args:
        direction: Vector to align with (length = number of fields)
        reference_field: Axis mapped onto the direction

    Returns:
        Tuple of (matrix, used_fallback)
    """
    d = np.asarray(direction, dtype=float)
    n_fields = len(d)
    norm = float(np.linalg.norm(d))

    if norm == 0.0 or not np.isfinite(norm):
        return np.eye(n_fields), True

    if np.any(np.abs(d) <= ZERO_PIVOT_TOLERANCE * norm):
        return _qr_rotation_matrix(d, reference_field), True

    matrix = np.zeros((n_fields, n_fields))
    sum_of_squares = 0.0
    for column in range(n_fields - 1):
        insertion = column if column < reference_field else column + 1
        sum_of_squares += d[column] * d[column]
        next_pivot = d[column + 1]
        vector = np.zeros(n_fields)
        vector[:column + 1] = d[:column + 1]
        vector[column + 1] = -sum_of_squares / next_pivot
        matrix[:, insertion] = vector / np.sqrt(
            sum_of_squares * (1.0 + sum_of_squares / (next_pivot * next_pivot))
        )
    matrix[:, reference_field] = d / norm
    return matrix, False


def _qr_rotation_matrix(d: np.ndarray, reference_field: int) -> np.ndarray:
    """Complete d / |d| to an orthonormal basis by Householder QR."""
    n_fields = len(d)
    q, r = np.linalg.qr(np.column_stack([d, np.eye(n_fields)]))
    if r[0, 0] < 0.0:
        q[:, 0] = -q[:, 0]
    matrix = np.empty((n_fields, n_fields))
    other_columns = [i for i in range(n_fields) if i != reference_field]
    matrix[:, reference_field] = q[:, 0]
    matrix[:, other_columns] = q[:, 1:]
    return matrix


class NodesOnBisectingPlanes:
    """
    Ordered path nodes between a false and a true vacuum.

    Node 0 is the false vacuum and the last node is the true vacuum; the
    intermediate nodes are placed in the order given by a NodeOrderingPlan.
    Rotation matrices exist only for intermediate nodes and are recomputed
    whenever the path is rebuilt, since they depend on the side nodes.

    Example:
        path = NodesOnBisectingPlanes(number_of_fields=2, minimum_intermediate_nodes=3)
        path.set_vacua(false_vacuum, true_vacuum)
        nodes = path.build_path(np.zeros((path.number_of_intermediate_nodes, 1)))
    """

    def __init__(
        self,
        number_of_fields: int,
        minimum_intermediate_nodes: int = 3,
        reference_field: int = 0
    ):
        """
        Args:
            number_of_fields: Dimension of field space
            minimum_intermediate_nodes: Lower bound on intermediate nodes
            reference_field: Field whose axis is rotated onto each node's
                side-node direction

        Raises:
            ConfigurationError: For zero nodes or an invalid reference field
        """
        if number_of_fields < 1:
            raise ConfigurationError("number_of_fields must be at least 1")
        if not 0 <= reference_field < number_of_fields:
            raise ConfigurationError(
                f"reference_field {reference_field} is not one of the "
                f"{number_of_fields} fields"
            )
        self.number_of_fields = number_of_fields
        self.reference_field = reference_field
        self.plan: NodeOrderingPlan = plan_node_ordering(minimum_intermediate_nodes)

        n_path = self.plan.number_of_path_nodes
        self.path_nodes = np.zeros((n_path, number_of_fields))
        self.rotation_matrices: List[Optional[np.ndarray]] = [None] * n_path
        self.anchors = np.zeros((n_path, number_of_fields))
        self.degenerate_nodes: List[int] = []

    @property
    def number_of_intermediate_nodes(self) -> int:
        """Number of nodes between the vacua."""
        return self.plan.number_of_intermediate_nodes

    @property
    def reduced_dimension(self) -> int:
        """Number of reduced coordinates per node."""
        return self.number_of_fields - 1

    @property
    def parameter_shape(self) -> Tuple[int, int]:
        """Shape of a full path parameterization array."""
        return (self.number_of_intermediate_nodes, self.reduced_dimension)

    @property
    def false_vacuum(self) -> np.ndarray:
        return self.path_nodes[0].copy()

    @property
    def true_vacuum(self) -> np.ndarray:
        return self.path_nodes[-1].copy()

    def set_vacua(
        self,
        false_vacuum: Union[PotentialMinimum, Sequence[float]],
        true_vacuum: Union[PotentialMinimum, Sequence[float]]
    ) -> None:
        """
        Fix the endpoints and reset the path to the straight line between them.
        """
        start = self._as_fields(false_vacuum)
        end = self._as_fields(true_vacuum)
        n_path = self.plan.number_of_path_nodes
        fractions = np.linspace(0.0, 1.0, n_path)[:, np.newaxis]
        self.path_nodes = start + fractions * (end - start)
        self.build_path(np.zeros(self.parameter_shape))

    def false_side_node(self, node_index: int) -> np.ndarray:
        """Already-placed neighbor on the false-vacuum side."""
        return self.path_nodes[self.plan.neighbors(node_index)[0]]

    def true_side_node(self, node_index: int) -> np.ndarray:
        """Already-placed neighbor on the true-vacuum side."""
        return self.path_nodes[self.plan.neighbors(node_index)[1]]

    def update_rotation_matrix(self, node_index: int) -> np.ndarray:
        """
        Recompute the rotation matrix and anchor of an intermediate node.

        The anchor is the midpoint of the side nodes and the matrix takes the
        reference-field axis onto (true side node - false side node).
        """
        start = self.false_side_node(node_index)
        end = self.true_side_node(node_index)
        matrix, used_fallback = rotation_matrix_to_direction(
            end - start, self.reference_field
        )
        if used_fallback:
            message = (
                f"Side-node difference for path node {node_index} has a zero "
                f"component; using QR orthogonalization for its rotation matrix"
            )
            if node_index in self.degenerate_nodes:
                logger.debug(message)
            else:
                self.degenerate_nodes.append(node_index)
                logger.warning(message)
        self.rotation_matrices[node_index] = matrix
        self.anchors[node_index] = 0.5 * (start + end)
        return matrix

    def embed_reduced_coordinates(self, reduced_coordinates: Sequence[float]) -> np.ndarray:
        """Full-dimension vector with zero in the reference-field slot."""
        reduced = np.asarray(reduced_coordinates, dtype=float)
        if reduced.shape != (self.reduced_dimension,):
            raise ValueError(
                f"Expected {self.reduced_dimension} reduced coordinates, "
                f"got shape {reduced.shape}"
            )
        return np.insert(reduced, self.reference_field, 0.0)

    def project_node(self, node_index: int,
                     reduced_coordinates: Sequence[float]) -> np.ndarray:
        """
        Field configuration of a node from its reduced coordinates.

        Uses the precomputed rotation matrix, so this is a single
        matrix-vector product plus the anchor offset.

        Args:
            node_index: Intermediate node index
            reduced_coordinates: number_of_fields - 1 in-plane coordinates

        Returns:
            Field values in GeV
        """
        matrix = self.rotation_matrices[node_index]
        if matrix is None:
            raise IndexError(f"Node {node_index} is an endpoint and cannot be moved")
        return self.anchors[node_index] + matrix @ self.embed_reduced_coordinates(
            reduced_coordinates
        )

    def build_path(self, parameterization: np.ndarray) -> np.ndarray:
        """
        Place every intermediate node from a full parameterization.

        Nodes are placed in bisection order, so each node's side nodes are
        already in their final positions when its rotation matrix is built.

        Args:
            parameterization: Array of shape parameter_shape, row i giving
                the reduced coordinates of path node i + 1 (flat arrays are
                reshaped)

        Returns:
            Copy of the path nodes, shape (number_of_path_nodes, number_of_fields)
        """
        params = np.asarray(parameterization, dtype=float).reshape(self.parameter_shape)
        for node_index in self.plan.adjustment_order:
            self.update_rotation_matrix(node_index)
            self.path_nodes[node_index] = self.project_node(
                node_index, params[node_index - 1]
            )
        return self.path_nodes.copy()

    def path_length(self) -> float:
        """Sum of Euclidean segment lengths along the current path."""
        return float(np.sum(np.linalg.norm(np.diff(self.path_nodes, axis=0), axis=1)))

    def _as_fields(self, vacuum) -> np.ndarray:
        if isinstance(vacuum, PotentialMinimum):
            fields = np.array(vacuum.field_configuration, dtype=float)
        else:
            fields = np.array(vacuum, dtype=float).reshape(-1)
        if fields.shape != (self.number_of_fields,):
            raise ConfigurationError(
                f"Vacuum has {fields.size} fields, expected {self.number_of_fields}"
            )
        return fields
