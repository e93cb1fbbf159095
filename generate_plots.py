#!/usr/bin/env python3
"""
Submarine Telemetry Plot Generator
==================================

Command-line front end for the offline telemetry plots.

Usage:
    python generate_plots.py                    # Plot latest run
    python generate_plots.py --show             # Plot and display
    python generate_plots.py --list             # List recorded runs
    python generate_plots.py --stats-only       # Print run statistics, no figures
    python generate_plots.py --data results/<run>/logs/sub_20240101_120000.csv
"""

import argparse
import sys
from pathlib import Path

# Add visualization to path
sys.path.append(str(Path(__file__).parent / "visualization"))

from plot_results import TelemetryPlotter, find_latest_telemetry


def list_runs(results_dir: str) -> int:
    """Print every telemetry file under ``results_dir`` with its row count."""
    csv_files = sorted(Path(results_dir).rglob("sub_*.csv"))
    if not csv_files:
        print(f"No telemetry files found in {results_dir}")
        return 1

    for csv_file in csv_files:
        with open(csv_file, 'r') as f:
            rows = max(sum(1 for _ in f) - 1, 0)
        print(f"{csv_file.parent.parent.name:40s} {csv_file.name:28s} {rows:8d} rows")
    return 0


def print_statistics(plotter: TelemetryPlotter) -> None:
    stats = plotter.compute_statistics()
    print(f"Duration:          {stats['duration']:.2f} s")
    print(f"Distance:          {stats['distance']:.2f} m")
    print(f"Net displacement:  {stats['net_displacement']:.2f} m")
    print(f"Heading change:    {stats['heading_change']:.1f}°")
    print(f"Maximum speed:     {stats['max_speed']:.2f} m/s")


def main():
    parser = argparse.ArgumentParser(description='Generate submarine telemetry plots')
    parser.add_argument('--data', type=str, help='Telemetry CSV file to plot (latest run if omitted)')
    parser.add_argument('--metadata', type=str, help='Run metadata JSON (looked up next to the CSV if omitted)')
    parser.add_argument('--show', action='store_true', help='Display plots after generation')
    parser.add_argument('--list', action='store_true', help='List recorded runs and exit')
    parser.add_argument('--stats-only', action='store_true', help='Print run statistics without plotting')
    parser.add_argument('--results-dir', type=str, default='results',
                        help='Directory containing results (default: results)')

    args = parser.parse_args()

    if args.list:
        return list_runs(args.results_dir)

    data_file = Path(args.data) if args.data else find_latest_telemetry(args.results_dir)
    if data_file is None:
        print(f"Error: No telemetry found in {args.results_dir}")
        return 1

    metadata_file = Path(args.metadata) if args.metadata else \
        data_file.parent / f"{data_file.stem}_metadata.json"

    try:
        plotter = TelemetryPlotter(str(data_file),
                                   str(metadata_file) if metadata_file.exists() else None)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: Failed to load telemetry: {e}")
        return 1

    print_statistics(plotter)
    if not args.stats_only:
        plotter.create_all_plots(show=args.show)

    return 0


if __name__ == "__main__":
    sys.exit(main())
