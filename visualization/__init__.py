"""Visualization module for vacuum tunneling calculations.

Provides plotting functions for:
- Tunneling paths through field space
- The thermal bounce action S3(T)/T
"""

from .path_plot import plot_tunneling_path
from .thermal_plot import plot_thermal_action, plot_thermal_scan

__all__ = [
    "plot_tunneling_path",
    "plot_thermal_action",
    "plot_thermal_scan",
]
