"""Plotting of the thermal action S3(T)/T."""

import numpy as np
from typing import Optional, Sequence, Tuple
import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.axes import Axes

from ..tunneling.base import TunnelingResult


def plot_thermal_action(
    temperatures: Sequence[float],
    action_over_temperature: Sequence[float],
    dominant_temperature: Optional[float] = None,
    ax: Optional[Axes] = None,
    figsize: Tuple[float, float] = (8, 6),
    title: Optional[str] = None,
    color: str = "steelblue",
    **kwargs
) -> Tuple[Figure, Axes]:
    """
    Plot S3(T)/T against temperature on logarithmic axes.

    Temperatures where no bounce exists (infinite S3/T) are dropped.

    Args:
        temperatures: Temperatures in GeV
        action_over_temperature: S3(T)/T at each temperature
        dominant_temperature: Temperature to mark (skipped if None or negative)
        ax: Existing axes to plot on (creates new figure if None)
        figsize: Figure size if creating new figure
        title: Plot title
        color: Line/marker color
        **kwargs: Additional arguments passed to ax.plot()

    Returns:
        Tuple of (Figure, Axes)
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()

    T = np.asarray(temperatures, dtype=float)
    values = np.asarray(action_over_temperature, dtype=float)
    order = np.argsort(T)
    T, values = T[order], values[order]
    finite = np.isfinite(values)

    ax.plot(T[finite], values[finite], marker="o", color=color,
            linewidth=2, markersize=5, **kwargs)

    if dominant_temperature is not None and dominant_temperature > 0:
        ax.axvline(dominant_temperature, color="red", linestyle="--",
                   alpha=0.7, linewidth=1.5,
                   label=f"Dominant T = {dominant_temperature:.3g} GeV")
        ax.legend(loc="best")

    ax.set_xscale("log")
    if np.any(finite) and np.all(values[finite] > 0):
        ax.set_yscale("log")
    ax.set_xlabel("Temperature (GeV)", fontsize=12)
    ax.set_ylabel(r'$S_3(T)/T$', fontsize=12)
    ax.set_title(title or "Thermal bounce action", fontsize=14)
    ax.grid(True, alpha=0.3, which="both")

    return fig, ax


def plot_thermal_scan(
    result: TunnelingResult,
    **kwargs
) -> Tuple[Figure, Axes]:
    """
    Plot the S3(T)/T evaluations recorded during a thermal calculation.

    Raises:
        ValueError: If the result holds no thermal scan
    """
    scan = result.diagnostics.get("thermal_scan")
    if not scan:
        raise ValueError("Tunneling result has no thermal scan to plot")
    temperatures, values = zip(*scan)
    return plot_thermal_action(temperatures, values,
                               dominant_temperature=result.dominant_temperature,
                               **kwargs)
