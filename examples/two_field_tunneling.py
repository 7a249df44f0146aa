#!/usr/bin/env python3
"""
Example: Decay of a Two-Field Vacuum

This script demonstrates the vacuum_tunnel package on a toy potential with
two competing minima, one on each field axis:

    V(h, s, T) = -m^2 h^2 / 2 + h^4 / 4 - m^2 s^2 / 2 + 0.8 s^4 / 4
                 + h^2 s^2 + 0.1 T^2 (h^2 + s^2)

The expected (DSB) vacuum is on the h axis; the vacuum on the s axis is
deeper, so the DSB vacuum is metastable.

Key features demonstrated:
- Vacuum search from starting points
- Path-deformation bounce action
- Quantum then thermal survival probabilities
- Plotting the tunneling path
"""

import logging

from vacuum_tunnel.core.config import (
    WorkflowConfig,
    TunnelingConfig,
    PathConfig,
    TunnelingStrategy,
)
from vacuum_tunnel.potential.function import CallablePotential
from vacuum_tunnel.workflow.runner import ParameterPoint, VacuumStabilityWorkflow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

MASS = 100.0  # GeV


def two_field_potential(fields, temperature=0.0):
    h, s = fields
    m2 = MASS * MASS
    return (-0.5 * m2 * h * h + 0.25 * h ** 4
            - 0.5 * m2 * s * s + 0.2 * s ** 4
            + h * h * s * s
            + 0.1 * temperature * temperature * (h * h + s * s))


def run_two_field_example(strategy: str = "QuantumThenThermal",
                          nodes: int = 3,
                          output: str = None,
                          plot: bool = False):
    """
    Run the vacuum search and tunneling calculation for the toy potential.

    Args:
        strategy: Tunneling strategy name
        nodes: Minimum number of intermediate path nodes
        output: Optional JSON file for the results
        plot: Save a plot of the tunneling path
    """
    print("=" * 70)
    print("Two-Field Vacuum Decay")
    print("=" * 70)

    config = WorkflowConfig(
        tunneling=TunnelingConfig(strategy=TunnelingStrategy.from_name(strategy)),
        path=PathConfig(minimum_intermediate_nodes=nodes),
        output_file=output,
    )

    potential = CallablePotential(two_field_potential, ["h", "s"],
                                  dsb_field_values=[MASS, 0.0])
    point = ParameterPoint(
        name="toy",
        potential=potential,
        starting_points=[[0.0, MASS], [0.0, -MASS], [0.5 * MASS, 0.5 * MASS]],
    )

    workflow = VacuumStabilityWorkflow(config)
    state = workflow.run_scan([point])
    result = state.results[0]

    print(f"\nStatus: {result['status']}")
    if result["tunneling"]:
        tunneling = result["tunneling"]
        print(f"Quantum survival probability: {tunneling['quantum_survival_probability']:.4g}")
        print(f"Quantum lifetime: {tunneling['quantum_lifetime_seconds']:.4g} s")
        print(f"Thermal survival probability: {tunneling['thermal_survival_probability']:.4g}")
        print(f"Dominant temperature: {tunneling['dominant_temperature']:.4g} GeV")
        for message in tunneling["warnings"]:
            print(f"Warning: {message}")
    if result["error"]:
        print(f"Error: {result['error']}")

    if (plot and result["tunneling"]
            and workflow.action_solver.last_path_nodes is not None):
        import matplotlib
        matplotlib.use("Agg")
        from vacuum_tunnel.visualization import plot_tunneling_path

        fig, ax = plot_tunneling_path(workflow.action_solver.last_path_nodes,
                                      potential,
                                      temperature=max(0.0, result["tunneling"]
                                                      ["dominant_temperature"]))
        fig.savefig("two_field_path.png", dpi=150)
        print("\nSaved path plot to two_field_path.png")

    return state


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Two-field vacuum decay")
    parser.add_argument(
        "--strategy",
        default="QuantumThenThermal",
        choices=[s.value for s in TunnelingStrategy],
        help="Which tunneling calculations to run"
    )
    parser.add_argument(
        "--nodes",
        type=int,
        default=3,
        help="Minimum number of intermediate path nodes"
    )
    parser.add_argument(
        "--output",
        default=None,
        help="JSON file for the scan results"
    )
    parser.add_argument(
        "--plot",
        action="store_true",
        help="Save a plot of the last tunneling path"
    )

    args = parser.parse_args()
    run_two_field_example(args.strategy, args.nodes, args.output, args.plot)
