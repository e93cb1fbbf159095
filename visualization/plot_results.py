"""
Submarine Telemetry Visualization
=================================

This module provides plotting tools for the telemetry CSV written by the
simulation (columns Time,X,Y,Angle). It works offline on finished runs.

Features:
- 2D trajectory colored by time
- Heading and speed vs time
- Run summary with distance and turn statistics
"""

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
import matplotlib.gridspec as gridspec
from pathlib import Path
from typing import Dict, Any, Optional, List
import json

REQUIRED_COLUMNS = ('Time', 'X', 'Y', 'Angle')


class TelemetryPlotter:
    """
    Plotting class for submarine telemetry files.

    Loads the telemetry CSV (and optional JSON metadata) of one run and
    writes figures into the run's plots directory.
    """

    def __init__(self, data_file: str, metadata_file: Optional[str] = None,
                 output_dir: Optional[str] = None):
        """
        Initialize results plotter.

        Args:
            data_file: Path to telemetry CSV file
            metadata_file: Path to JSON metadata file (optional)
            output_dir: Where to save plots (``<run>/plots`` next to ``<run>/logs`` if None)
        """
        self.data_file = Path(data_file)
        self.metadata_file = Path(metadata_file) if metadata_file else None

        self.data = self._load_data()
        self.metadata = self._load_metadata() if self.metadata_file else {}

        # Expecting data_file like results/<run_id>/logs/sub_<ts>.csv
        if output_dir is None:
            output_dir = self.data_file.parent.parent / "plots"
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self._setup_plot_style()

        print(f"Telemetry plotter initialized")
        print(f"Data file: {self.data_file}")
        print(f"Data points: {len(self.data):,}")

    def _load_data(self) -> pd.DataFrame:
        """Load telemetry from CSV file."""
        if not self.data_file.exists():
            raise FileNotFoundError(f"Telemetry file not found: {self.data_file}")

        data = pd.read_csv(self.data_file)
        missing = [c for c in REQUIRED_COLUMNS if c not in data.columns]
        if missing:
            raise ValueError(f"Telemetry file {self.data_file.name} is missing columns {missing}")
        return data

    def _load_metadata(self) -> Dict[str, Any]:
        """Load run metadata from JSON file."""
        if not self.metadata_file.exists():
            print(f"Warning: metadata file not found: {self.metadata_file}")
            return {}
        with open(self.metadata_file, 'r') as f:
            return json.load(f)

    def _setup_plot_style(self):
        """Setup matplotlib plotting style."""
        plt.style.use('default')
        plt.rcParams['figure.figsize'] = (12, 8)
        plt.rcParams['font.size'] = 10
        plt.rcParams['axes.grid'] = True
        plt.rcParams['grid.alpha'] = 0.3
        plt.rcParams['lines.linewidth'] = 1.5

    def compute_speed(self) -> np.ndarray:
        """Speed [m/s] from finite differences of the trajectory."""
        time = self.data['Time'].values
        if len(time) < 2:
            return np.zeros(len(time))
        vx = np.gradient(self.data['X'].values, time)
        vy = np.gradient(self.data['Y'].values, time)
        return np.sqrt(vx**2 + vy**2)

    def compute_statistics(self) -> Dict[str, float]:
        """Distance travelled, duration and heading change of the run."""
        x, y = self.data['X'].values, self.data['Y'].values
        angle = self.data['Angle'].values
        return {
            'duration': float(self.data['Time'].iloc[-1]) if len(self.data) else 0.0,
            'distance': float(np.sum(np.hypot(np.diff(x), np.diff(y)))),
            'net_displacement': float(np.hypot(x[-1] - x[0], y[-1] - y[0])) if len(x) else 0.0,
            'heading_change': float(angle[-1] - angle[0]) if len(angle) else 0.0,
            'max_speed': float(self.compute_speed().max()) if len(x) else 0.0
        }

    def plot_trajectory(self, ax=None, save: bool = True) -> plt.Figure:
        """
        Plot the X/Y trajectory colored by time.

        Args:
            ax: Existing axes to draw on (new figure if None)
            save: Whether to save the plot
        """
        if ax is None:
            fig, ax = plt.subplots(figsize=(10, 8))
        else:
            fig = ax.figure

        x = self.data['X'].values
        y = self.data['Y'].values
        time = self.data['Time'].values

        points = np.array([x, y]).T.reshape(-1, 1, 2)
        segments = np.concatenate([points[:-1], points[1:]], axis=1)
        lc = LineCollection(segments, cmap='viridis', linewidths=2)
        lc.set_array(time[:-1])
        line = ax.add_collection(lc)

        margin = 1.0
        ax.set_xlim(x.min() - margin, x.max() + margin)
        ax.set_ylim(y.min() - margin, y.max() + margin)
        ax.plot(x[0], y[0], 'go', markersize=10, label='Start', markeredgecolor='darkgreen')
        ax.plot(x[-1], y[-1], 'ro', markersize=10, label='End', markeredgecolor='darkred')
        ax.set_xlabel('X [m]')
        ax.set_ylabel('Y [m]')
        ax.set_title('Submarine Trajectory (Colored by Time)')
        ax.set_aspect('equal')
        ax.legend()

        cbar = fig.colorbar(line, ax=ax, shrink=0.8)
        cbar.set_label('Time [s]')

        if save:
            fig.savefig(self.output_dir / 'trajectory.png', dpi=150, bbox_inches='tight')
            print(f"Saved trajectory plot: {self.output_dir / 'trajectory.png'}")

        return fig

    def plot_heading_and_speed(self, save: bool = True) -> plt.Figure:
        """Plot heading angle and speed vs time."""
        fig, (ax1, ax2) = plt.subplots(2, 1, figsize=(12, 8), sharex=True)
        time = self.data['Time'].values

        ax1.plot(time, self.data['Angle'], 'b-', linewidth=2, label='Heading')
        ax1.set_ylabel('Angle [deg]')
        ax1.set_title('Heading vs Time')
        ax1.legend()

        ax2.plot(time, self.compute_speed(), 'g-', linewidth=2, label='Speed')
        ax2.set_xlabel('Time [s]')
        ax2.set_ylabel('Speed [m/s]')
        ax2.set_title('Speed vs Time')
        ax2.legend()

        plt.tight_layout()

        if save:
            fig.savefig(self.output_dir / 'heading_speed.png', dpi=150, bbox_inches='tight')
            print(f"Saved heading/speed plot: {self.output_dir / 'heading_speed.png'}")

        return fig

    def plot_run_summary(self, save: bool = True) -> plt.Figure:
        """Trajectory, heading and a statistics panel in one figure."""
        fig = plt.figure(figsize=(16, 10))
        gs = gridspec.GridSpec(2, 2, hspace=0.3, wspace=0.3)

        self.plot_trajectory(ax=fig.add_subplot(gs[:, 0]), save=False)

        time = self.data['Time'].values
        ax_angle = fig.add_subplot(gs[0, 1])
        ax_angle.plot(time, self.data['Angle'], 'b-', linewidth=2)
        ax_angle.set_xlabel('Time [s]')
        ax_angle.set_ylabel('Angle [deg]')
        ax_angle.set_title('Heading')

        ax_stats = fig.add_subplot(gs[1, 1])
        ax_stats.axis('off')

        stats = self.compute_statistics()
        vehicle = self.metadata.get('scenario', {}).get('vehicle', 'unknown')
        stats_text = f"""
        RUN STATISTICS

        Vehicle: {vehicle}
        Duration: {stats['duration']:.2f} s
        Distance Travelled: {stats['distance']:.1f} m
        Net Displacement: {stats['net_displacement']:.1f} m
        Heading Change: {stats['heading_change']:.1f}°
        Maximum Speed: {stats['max_speed']:.2f} m/s
        """

        ax_stats.text(0.05, 0.95, stats_text, transform=ax_stats.transAxes,
                      fontsize=11, verticalalignment='top', fontfamily='monospace',
                      bbox=dict(boxstyle="round,pad=0.5", facecolor="lightgray", alpha=0.8))

        if save:
            fig.savefig(self.output_dir / 'run_summary.png', dpi=150, bbox_inches='tight')
            print(f"Saved run summary plot: {self.output_dir / 'run_summary.png'}")

        return fig

    def create_all_plots(self, show: bool = False) -> List[plt.Figure]:
        """
        Create all available plots.

        Args:
            show: Whether to display plots

        Returns:
            List of figure objects
        """
        if len(self.data) < 2:
            print("Not enough telemetry rows to plot")
            return []

        figures = [
            self.plot_run_summary(save=True),
            self.plot_trajectory(save=True),
            self.plot_heading_and_speed(save=True),
        ]

        print(f"\n✓ Generated {len(figures)} plots in {self.output_dir}")

        if show:
            plt.show()
        else:
            plt.close('all')

        return figures


def find_latest_telemetry(results_dir: str = "results") -> Optional[Path]:
    """Most recently modified telemetry CSV under ``results_dir``."""
    results_path = Path(results_dir)
    if not results_path.exists():
        return None
    csv_files = list(results_path.rglob("sub_*.csv"))
    if not csv_files:
        return None
    return max(csv_files, key=lambda p: p.stat().st_mtime)


def plot_latest_results(results_dir: str = "results", show: bool = False) -> Optional[TelemetryPlotter]:
    """
    Find and plot the most recent telemetry file.

    Args:
        results_dir: Directory containing results
        show: Whether to display plots

    Returns:
        TelemetryPlotter instance or None if no data found
    """
    latest_csv = find_latest_telemetry(results_dir)
    if latest_csv is None:
        print(f"No telemetry files found in {results_dir}")
        return None

    metadata_file = latest_csv.parent / f"{latest_csv.stem}_metadata.json"
    print(f"Found latest telemetry: {latest_csv.name}")

    plotter = TelemetryPlotter(str(latest_csv),
                               str(metadata_file) if metadata_file.exists() else None)
    plotter.create_all_plots(show=show)
    return plotter


if __name__ == "__main__":
    plot_latest_results(show=True)
