"""Tests for visualization module."""

import pytest
import numpy as np
import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for testing
import matplotlib.pyplot as plt

from vacuum_tunnel.visualization import (
    plot_tunneling_path,
    plot_thermal_action,
    plot_thermal_scan,
)
from vacuum_tunnel.tunneling.base import TunnelingResult


@pytest.fixture(autouse=True)
def close_figures():
    yield
    plt.close('all')


@pytest.fixture
def two_field_path():
    return np.column_stack([np.linspace(10.0, 0.0, 5), np.linspace(0.0, 11.0, 5)])


class TestPathPlot:
    """Tests for tunneling path plots."""

    def test_path_only(self, two_field_path):
        fig, ax = plot_tunneling_path(two_field_path)
        assert fig is not None
        assert len(ax.lines) >= 1
        assert ax.get_title() == "Tunneling path"

    def test_with_contours(self, two_field_path, two_field_potential):
        fig, ax = plot_tunneling_path(two_field_path, two_field_potential,
                                      grid_points=10, title="Decay")
        assert ax.get_xlabel() == "h (GeV)"
        assert ax.get_ylabel() == "s (GeV)"
        assert ax.get_title() == "Decay"

    def test_single_field(self, quartic_potential):
        nodes = np.linspace(0.0, 2.1, 5)[:, np.newaxis]
        fig, ax = plot_tunneling_path(nodes, quartic_potential, grid_points=10)
        assert len(ax.lines) == 2

    def test_existing_axes(self, two_field_path):
        fig, ax = plt.subplots()
        fig2, ax2 = plot_tunneling_path(two_field_path, ax=ax)
        assert ax2 is ax
        assert fig2 is fig


class TestThermalPlot:
    """Tests for S3(T)/T plots."""

    def test_thermal_action(self):
        temperatures = [10.0, 20.0, 40.0, 80.0]
        values = [300.0, 200.0, 150.0, np.inf]
        fig, ax = plot_thermal_action(temperatures, values, dominant_temperature=40.0)
        x, y = ax.lines[0].get_data()
        assert len(x) == 3
        assert np.all(np.isfinite(y))
        assert ax.get_xscale() == "log"

    def test_thermal_scan(self):
        result = TunnelingResult(dominant_temperature=0.5)
        result.diagnostics["thermal_scan"] = [(0.1, 2100.0), (0.5, 500.0), (0.9, 322.0)]
        fig, ax = plot_thermal_scan(result)
        assert len(ax.lines[0].get_xdata()) == 3

    def test_thermal_scan_missing(self):
        with pytest.raises(ValueError):
            plot_thermal_scan(TunnelingResult())
