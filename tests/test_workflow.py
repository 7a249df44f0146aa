"""Integration tests for parameter points and batch scans."""

import json

import pytest

from vacuum_tunnel.workflow.runner import (
    ParameterPoint,
    PointResult,
    PointStatus,
    ScanState,
    VacuumStabilityWorkflow,
)
from vacuum_tunnel.core.config import WorkflowConfig, TunnelingConfig, TunnelingStrategy
from vacuum_tunnel.core.exceptions import ConfigurationError, WorkflowError
from vacuum_tunnel.potential.function import CallablePotential
from vacuum_tunnel.potential.minimizer import VacuumSearch
from vacuum_tunnel.potential.minimum import PotentialMinimum
from vacuum_tunnel.tunneling.bounce import PathBounceActionSolver

from conftest import StubActionSolver, two_field_value


def quantum_workflow(solver=None, **config_kwargs):
    config = WorkflowConfig(
        tunneling=TunnelingConfig(strategy=TunnelingStrategy.JUST_QUANTUM),
        **config_kwargs
    )
    return VacuumStabilityWorkflow(config, action_solver=solver or StubActionSolver(400.0))


class TestScanState:
    """Tests for ScanState serialization."""

    def test_state_creation(self):
        state = ScanState()
        assert state.results == []
        assert state.completed_points == []

    def test_state_save_load(self, tmp_path):
        state = ScanState()
        state.results = [PointResult(name="a", status="stable").to_dict()]
        state.timing = {"total": 1.5}
        filepath = tmp_path / "state.json"

        state.save(filepath)
        loaded = ScanState.load(filepath)

        assert loaded.results == state.results
        assert loaded.timing == state.timing
        assert loaded.completed_points == ["a"]

    def test_point_result_round_trip(self):
        result = PointResult(name="p", status="failed", error="bad")
        assert PointResult.from_dict(result.to_dict()) == result


class TestVacuumStabilityWorkflow:
    """Tests for processing parameter points."""

    def test_default_solver(self):
        workflow = VacuumStabilityWorkflow()
        assert isinstance(workflow.action_solver, PathBounceActionSolver)

    def test_metastable_point(self, two_field_potential):
        workflow = quantum_workflow()
        point = ParameterPoint("toy", two_field_potential,
                               starting_points=[[0.0, 10.0]])
        result = workflow.run(point)

        assert result.status == PointStatus.METASTABLE.value
        assert result.error is None
        assert result.vacuum_search["n_panic_vacua"] == 1
        tunneling = result.tunneling
        assert tunneling["quantum_action"] == 400.0
        assert 0.0 <= tunneling["quantum_survival_probability"] <= 1.0
        assert tunneling["thermal_survival_probability"] == -1.0

    def test_stable_point(self, two_field_potential):
        workflow = quantum_workflow()
        point = ParameterPoint("stable", two_field_potential,
                               starting_points=[[-10.0, 0.0]])
        result = workflow.run(point)

        assert result.status == PointStatus.STABLE.value
        assert result.tunneling is None

    def test_explicit_vacua(self, quartic_potential, quartic_vacua):
        false_vacuum, true_vacuum = quartic_vacua
        workflow = quantum_workflow()
        point = ParameterPoint("explicit", quartic_potential,
                               false_vacuum=false_vacuum, true_vacuum=true_vacuum)
        result = workflow.run(point)

        assert result.status == PointStatus.METASTABLE.value
        assert result.vacuum_search is None

    def test_failed_point_recorded(self, quartic_potential, quartic_vacua):
        """Reversed vacua fail the point without raising."""
        false_vacuum, true_vacuum = quartic_vacua
        workflow = quantum_workflow()
        point = ParameterPoint("reversed", quartic_potential,
                               false_vacuum=true_vacuum, true_vacuum=false_vacuum)
        result = workflow.run(point)

        assert result.status == PointStatus.FAILED.value
        assert "higher or degenerate" in result.error

    def test_failed_point_raises_on_request(self, quartic_potential, quartic_vacua):
        false_vacuum, true_vacuum = quartic_vacua
        workflow = quantum_workflow()
        point = ParameterPoint("reversed", quartic_potential,
                               false_vacuum=true_vacuum, true_vacuum=false_vacuum)
        with pytest.raises(WorkflowError) as exc_info:
            workflow.run(point, raise_on_error=True)
        assert exc_info.value.point == "reversed"

    def test_scan_continues_after_failure(self, quartic_potential, quartic_vacua,
                                          tmp_path):
        false_vacuum, true_vacuum = quartic_vacua
        output = tmp_path / "scan.json"
        workflow = quantum_workflow(output_file=output)
        points = [
            ParameterPoint("reversed", quartic_potential,
                           false_vacuum=true_vacuum, true_vacuum=false_vacuum),
            ParameterPoint("good", quartic_potential,
                           false_vacuum=false_vacuum, true_vacuum=true_vacuum),
        ]
        state = workflow.run_scan(points)

        assert state.completed_points == ["reversed", "good"]
        assert state.results[0]["status"] == PointStatus.FAILED.value
        assert state.results[1]["status"] == PointStatus.METASTABLE.value
        assert "total" in state.timing

        with open(output) as f:
            saved = json.load(f)
        assert len(saved["results"]) == 2
        assert ScanState.load(output).completed_points == ["reversed", "good"]

    def test_scan_reproducible(self, two_field_potential):
        point = ParameterPoint("toy", two_field_potential,
                               starting_points=[[0.0, 10.0]])
        first = quantum_workflow().run(point).tunneling
        second = quantum_workflow().run(point).tunneling
        assert first == second


def scan_points():
    """Metastable, stable and mis-sized points of a picklable two-field potential."""
    potential = CallablePotential(two_field_value, ["h", "s"],
                                  dsb_field_values=[10.0, 0.0])
    return [
        ParameterPoint("toy", potential, starting_points=[[0.0, 10.0]]),
        ParameterPoint("stable", potential, starting_points=[[-10.0, 0.0]]),
        ParameterPoint("bad", potential, starting_points=[[1.0]]),
    ]


def without_timing(results):
    return [{key: value for key, value in result.items() if key != "elapsed_seconds"}
            for result in results]


class TestScanRobustness:
    """Tests that one bad parameter point never aborts a scan."""

    def test_missized_starting_point_rejected(self, two_field_potential):
        search = VacuumSearch(two_field_potential)
        with pytest.raises(ConfigurationError):
            search.find_minima([[0.0, 10.0], [1.0]])

    def test_bad_point_does_not_abort_scan(self, two_field_potential):
        points = [
            ParameterPoint("bad", two_field_potential, starting_points=[[1.0]]),
            ParameterPoint("good", two_field_potential, starting_points=[[0.0, 10.0]]),
        ]
        state = quantum_workflow().run_scan(points)

        assert state.completed_points == ["bad", "good"]
        assert state.results[0]["status"] == PointStatus.FAILED.value
        assert "field values" in state.results[0]["error"]
        assert state.results[1]["status"] == PointStatus.METASTABLE.value

    def test_unexpected_error_recorded(self, quartic_vacua):
        def broken(fields, temperature):
            raise ZeroDivisionError("division by zero in potential")

        potential = CallablePotential(broken, ["phi"])
        false_vacuum, true_vacuum = quartic_vacua
        point = ParameterPoint("broken", potential,
                               false_vacuum=false_vacuum, true_vacuum=true_vacuum)
        result = quantum_workflow().run(point)

        assert result.status == PointStatus.FAILED.value
        assert result.error.startswith("ZeroDivisionError")

    def test_unexpected_error_raises_on_request(self, quartic_vacua):
        def broken(fields, temperature):
            raise ZeroDivisionError("division by zero in potential")

        potential = CallablePotential(broken, ["phi"])
        false_vacuum, true_vacuum = quartic_vacua
        point = ParameterPoint("broken", potential,
                               false_vacuum=false_vacuum, true_vacuum=true_vacuum)
        with pytest.raises(WorkflowError) as exc_info:
            quantum_workflow().run(point, raise_on_error=True)
        assert exc_info.value.point == "broken"
        assert isinstance(exc_info.value.__cause__, ZeroDivisionError)

    def test_parallel_scan_matches_serial(self):
        serial = quantum_workflow().run_scan(scan_points())
        parallel = quantum_workflow().run_scan(scan_points(), max_workers=2)

        assert parallel.completed_points == ["toy", "stable", "bad"]
        assert [r["status"] for r in parallel.results] == [
            PointStatus.METASTABLE.value,
            PointStatus.STABLE.value,
            PointStatus.FAILED.value,
        ]
        assert without_timing(parallel.results) == without_timing(serial.results)

    def test_saved_config_strategy_readable(self, tmp_path):
        output = tmp_path / "scan.json"
        quantum_workflow(output_file=output).run_scan([])

        loaded = ScanState.load(output)
        strategy = loaded.config["tunneling"]["strategy"]
        assert strategy == "JustQuantum"
        assert TunnelingStrategy.from_name(strategy) == TunnelingStrategy.JUST_QUANTUM
