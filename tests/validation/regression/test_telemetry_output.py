"""
Regression Test: Telemetry Output
=================================

Locks down the telemetry file format and the end-to-end run output:
1. CSV header and row formatting
2. Paused frames produce no rows; running ticks produce one row each
3. Metadata JSON written next to the CSV
4. Offline plots generated from a finished run
"""

import json
import pytest
import numpy as np
import pandas as pd
import matplotlib
matplotlib.use('Agg')
import sys
from pathlib import Path

ROOT = Path(__file__).parent.parent.parent.parent

# Add src and visualization to path
sys.path.append(str(ROOT / "src"))
sys.path.append(str(ROOT / "visualization"))

from subsim.control.scripted_pilot import PilotCommand, ScriptedPilot
from subsim.data_types.types import TelemetryRecord
from subsim.exceptions import ConfigurationError
from subsim.simulation_runner import SubmarineSimulation
from subsim.utils.logging_config import TelemetryLogger
from plot_results import TelemetryPlotter, find_latest_telemetry, plot_latest_results


def test_csv_header_and_rows(tmp_path):
    with TelemetryLogger(log_dir=tmp_path, filename="sub_test.csv") as telemetry:
        telemetry.log(TelemetryRecord(0.0, 0.07, 0.0, 0.0))
        telemetry.log(TelemetryRecord(0.01, 0.14, -0.5, 370.25))
        assert telemetry.rows_written == 2

    lines = (tmp_path / "sub_test.csv").read_text().splitlines()
    assert lines[0] == "Time,X,Y,Angle"
    assert lines[1] == "0.000000,0.070000,0.000000,0.000000"
    assert lines[2] == "0.010000,0.140000,-0.500000,370.250000"


def test_log_after_close_fails(tmp_path):
    telemetry = TelemetryLogger(log_dir=tmp_path, filename="sub_closed.csv")
    telemetry.close()
    telemetry.close()

    with pytest.raises(ValueError):
        telemetry.log(TelemetryRecord(0.0, 0.0, 0.0, 0.0))


def test_metadata_file_name(tmp_path):
    telemetry = TelemetryLogger(log_dir=tmp_path, filename="sub_meta.csv")
    telemetry.save_metadata({'simulation': {'vehicle': 'submarine'}}, {'ticks': 0})
    telemetry.close()

    metadata = json.loads((tmp_path / "sub_meta_metadata.json").read_text())
    assert metadata['data_file'] == "sub_meta.csv"
    assert metadata['scenario']['ticks'] == 0


@pytest.fixture
def finished_run(tmp_path):
    """Short run: 5 paused frames with throttle pre-staged, then 0.1 s running."""
    sim = SubmarineSimulation(scenario_name="regression", results_root=tmp_path)
    pilot = ScriptedPilot([PilotCommand(0.0, held=('throttle_up',))])
    final_state, info = sim.run_scenario(pilot, duration=0.1, pause_schedule=[5])
    return sim, final_state, info


def test_run_writes_one_row_per_running_tick(finished_run):
    sim, final_state, info = finished_run

    data = pd.read_csv(sim.telemetry.csv_file)
    assert list(data.columns) == ["Time", "X", "Y", "Angle"]
    assert len(data) == 10
    assert info['ticks'] == 10
    assert info['frames'] == 15

    np.testing.assert_allclose(data['Time'].values, np.arange(10) * 0.01, atol=1e-6)
    assert data['X'].iloc[-1] == pytest.approx(final_state.position[0], abs=1e-6)

    # 5 paused + 10 running throttle-up ticks
    assert info['final_throttle'] == 15.0


def test_run_writes_metadata(finished_run):
    sim, _, info = finished_run

    metadata = json.loads(sim.telemetry.json_metadata.read_text())
    assert metadata['rows'] == 10
    assert metadata['scenario']['vehicle'] == 'submarine'
    assert metadata['config']['simulation']['fixed_timestep'] == 0.01
    assert sim.run_dir.parent == sim.telemetry.csv_file.parent.parent.parent


def test_run_stops_when_left_paused(tmp_path):
    sim = SubmarineSimulation(scenario_name="pause_stop", results_root=tmp_path)
    _, info = sim.run_scenario(ScriptedPilot([]), duration=1.0, pause_schedule=[2, 5])

    assert info['ticks'] == 3
    assert sim.stepper.paused


def test_plots_from_finished_run(finished_run):
    sim, _, _ = finished_run

    plotter = TelemetryPlotter(str(sim.telemetry.csv_file), str(sim.telemetry.json_metadata))
    figures = plotter.create_all_plots(show=False)

    assert len(figures) == 3
    for name in ('trajectory.png', 'heading_speed.png', 'run_summary.png'):
        assert (sim.run_dir / "plots" / name).exists()

    stats = plotter.compute_statistics()
    assert stats['duration'] == pytest.approx(0.09)
    assert stats['distance'] > 0.0
    assert find_latest_telemetry(str(sim.run_dir.parent)) == sim.telemetry.csv_file

    latest = plot_latest_results(str(sim.run_dir.parent))
    assert latest.metadata['scenario']['ticks'] == 10
    assert plot_latest_results(str(sim.run_dir / "empty")) is None


def test_plotter_rejects_bad_file(tmp_path):
    bad = tmp_path / "sub_bad.csv"
    bad.write_text("Time,X\n0.0,1.0\n")

    with pytest.raises(ValueError):
        TelemetryPlotter(str(bad), output_dir=str(tmp_path / "plots"))
    with pytest.raises(FileNotFoundError):
        TelemetryPlotter(str(tmp_path / "missing.csv"))


class FailingPilot:
    """Pilot whose input device dies after a few frames."""

    def __init__(self, frames_before_failure: int):
        self.remaining = frames_before_failure

    def sample(self, current_time):
        if self.remaining == 0:
            raise RuntimeError("input device disconnected")
        self.remaining -= 1
        return ScriptedPilot([]).sample(current_time)


def test_failed_setup_leaves_no_telemetry(tmp_path):
    with pytest.raises(ConfigurationError):
        SubmarineSimulation(scenario_name="bad_vehicle", vehicle_name="nope", results_root=tmp_path)

    assert list(tmp_path.rglob("sub_*.csv")) == []


def test_aborted_run_closes_telemetry(tmp_path):
    sim = SubmarineSimulation(scenario_name="aborted", results_root=tmp_path)

    with pytest.raises(RuntimeError):
        sim.run_scenario(FailingPilot(4), duration=1.0)

    # Rows written before the failure are on disk and the file is closed
    data = pd.read_csv(sim.telemetry.csv_file)
    assert len(data) == 4
    with pytest.raises(ValueError):
        sim.telemetry.log(TelemetryRecord(0.0, 0.0, 0.0, 0.0))
    assert not sim.telemetry.json_metadata.exists()
