#!/usr/bin/env python3
"""
Bird Flight Range Simulator Launcher
====================================

Command-line launcher for the flight range simulation.

Reads a bird table (CSV, one bird per row), simulates every bird under
the constant muscle mass criterion and prints a range table.

Usage:
------
    python run_flight_simulator.py birds.csv
    python run_flight_simulator.py birds.csv --speed-control speed --breguet
    python run_flight_simulator.py birds.csv --output ranges.csv

Requirements:
------------
    - Python 3.8+
    - numpy
    - scipy
    - pandas
    - matplotlib
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))


SPEED_CONTROL_CHOICES = {
    "ratio": "CONSTANT_RATIO",
    "speed": "CONSTANT_SPEED",
}


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Estimate migratory flight range for a table of birds."
    )
    parser.add_argument("data", help="CSV file with one bird per row")
    parser.add_argument(
        "--speed-control", choices=sorted(SPEED_CONTROL_CHOICES), default="ratio",
        help="hold Vt/Vmp constant (ratio) or Vt constant (speed)"
    )
    parser.add_argument(
        "--breguet", action="store_true",
        help="add the Breguet Method 1 range for comparison"
    )
    parser.add_argument("--time-step", type=float, help="step length in seconds")
    parser.add_argument("--air-density", type=float, help="air density in kg/m³")
    parser.add_argument("--sep", default=",", help="CSV field separator")
    parser.add_argument("--output", help="write results to this CSV file")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv=None):
    """Run the simulation for a bird table."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    from birdrange.batch_analyzer import BatchSolver, BatchConfig
    from birdrange.bird_data import read_birds_csv
    from birdrange.flight_simulator import FlightConstants, SimulatorConfig, SpeedControl

    overrides = {}
    if args.time_step is not None:
        overrides["time_step_seconds"] = args.time_step
    if args.air_density is not None:
        overrides["air_density"] = args.air_density

    config = BatchConfig(
        simulator=SimulatorConfig(
            constants=FlightConstants().with_overrides(**overrides),
            speed_control=SpeedControl[SPEED_CONTROL_CHOICES[args.speed_control]],
        ),
        include_breguet=args.breguet,
    )

    print("=" * 60)
    print("  Bird Flight Range Simulator")
    print("=" * 60)
    print()

    birds = read_birds_csv(args.data, sep=args.sep)
    print(f"Loaded {len(birds)} birds from {args.data}")

    solver = BatchSolver(config)
    results = solver.run_batch(birds)

    frame = solver.results_to_frame(results)
    columns = ["name", "range_km", "step_count", "termination"]
    if args.breguet:
        columns.append("breguet_range_km")
    print()
    print(frame[columns].to_string(index=False))

    summary = solver.get_summary(results)
    print()
    print(f"{summary['exhausted']} of {summary['total']} birds completed a flight")
    if summary["invalid_input"]:
        print(f"{summary['invalid_input']} records rejected:")
        for r in results:
            if r.flight is None:
                print(f"  - {r.name or '#' + str(r.index)}: {r.error_message}")

    if args.output:
        solver.export_results_csv(results, args.output)
        print(f"\nResults written to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
