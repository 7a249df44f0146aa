"""Plotting of tunneling paths through field space."""

import numpy as np
from typing import Optional, Tuple
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from ..potential.function import PotentialFunction


def plot_tunneling_path(
    path_nodes: np.ndarray,
    potential: Optional[PotentialFunction] = None,
    temperature: float = 0.0,
    field_indices: Tuple[int, int] = (0, 1),
    grid_points: int = 60,
    margin: float = 0.2,
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (8, 6),
    title: Optional[str] = None,
    color: str = "crimson",
    **kwargs
) -> Tuple[Figure, Axes]:
    """
    Plot path nodes projected onto two field axes.

    With a potential, the potential is drawn as filled contours in the
    plane of the two fields, with all other fields held at their values at
    the false vacuum. Single-field paths are drawn as V along the field.

    Args:
        path_nodes: Array of shape (n_nodes, n_fields), false vacuum first
        potential: Optional potential for contours
        temperature: Temperature (GeV) at which to evaluate the potential
        field_indices: The two fields to plot against each other
        grid_points: Contour grid resolution per axis
        margin: Fractional padding of the contour region around the path
        ax: Existing axes to plot on (creates new figure if None)
        figsize: Figure size if creating new figure
        title: Plot title
        color: Path color
        **kwargs: Additional arguments passed to ax.plot()

    Returns:
        Tuple of (Figure, Axes)
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    nodes = np.atleast_2d(np.asarray(path_nodes, dtype=float))
    n_fields = nodes.shape[1]

    if n_fields == 1:
        x = nodes[:, 0]
        if potential is not None:
            span = x.max() - x.min()
            fields = np.linspace(x.min() - margin * span, x.max() + margin * span,
                                 grid_points * 4)
            values = [potential(np.array([f]), temperature) for f in fields]
            ax.plot(fields, values, color="steelblue", linewidth=2)
            node_values = [potential(node, temperature) for node in nodes]
        else:
            node_values = np.zeros(len(x))
        ax.plot(x, node_values, marker="o", color=color, linestyle="none", **kwargs)
        ax.set_xlabel(_field_label(potential, 0), fontsize=12)
        ax.set_ylabel(r'$V$ (GeV$^4$)', fontsize=12)
    else:
        i, j = field_indices
        x, y = nodes[:, i], nodes[:, j]

        if potential is not None:
            x_span = max(x.max() - x.min(), 1e-12)
            y_span = max(y.max() - y.min(), x_span)
            xs = np.linspace(x.min() - margin * x_span, x.max() + margin * x_span,
                             grid_points)
            ys = np.linspace(y.min() - margin * y_span, y.max() + margin * y_span,
                             grid_points)
            X, Y = np.meshgrid(xs, ys)
            base = nodes[0].copy()
            Z = np.empty_like(X)
            for row in range(grid_points):
                for col in range(grid_points):
                    point = base.copy()
                    point[i] = X[row, col]
                    point[j] = Y[row, col]
                    Z[row, col] = potential(point, temperature)
            contours = ax.contourf(X, Y, Z, levels=30, cmap="viridis", alpha=0.8)
            fig.colorbar(contours, ax=ax, label=r'$V$ (GeV$^4$)')

        ax.plot(x, y, marker="o", color=color, linewidth=2, markersize=5, **kwargs)
        ax.scatter([x[0]], [y[0]], color="orange", s=120, zorder=5, marker="s",
                   label="False vacuum")
        ax.scatter([x[-1]], [y[-1]], color="black", s=120, zorder=5, marker="*",
                   label="True vacuum")
        ax.set_xlabel(_field_label(potential, i), fontsize=12)
        ax.set_ylabel(_field_label(potential, j), fontsize=12)
        ax.legend(loc="best")

    ax.set_title(title or "Tunneling path", fontsize=14)
    ax.grid(True, alpha=0.3)

    return fig, ax


def _field_label(potential: Optional[PotentialFunction], index: int) -> str:
    if potential is None:
        return f"Field {index} (GeV)"
    return f"{potential.field_names[index]} (GeV)"
