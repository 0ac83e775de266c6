"""
SpoolView — Two-Spool Turbofan Viewer
Main entry point.

Usage:
    python app.py                               # Geometry summary + short spool-up
    python app.py --geometry                    # Stage table and part counts
    python app.py --simulate --throttle 1.0     # Headless throttle run
    python app.py --simulate --csv run.csv      # ... and save the trajectory
    python app.py --export exports/stl          # Write STL meshes
    python app.py --serve --port 5000           # Browser viewer
"""

import argparse
import logging
import sys
import os

# Ensure UTF-8 output on Windows
if sys.stdout.encoding != 'utf-8':
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')
if sys.stderr.encoding != 'utf-8':
    sys.stderr.reconfigure(encoding='utf-8', errors='replace')

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from spoolview.logging_config import setup_logging


def run_geometry_demo():
    """Build the engine layout and print its stage table."""
    print("\n" + "="*60)
    print("  Engine Geometry")
    print("="*60)

    from spoolview.geometry.assembly import assemble_engine, print_engine_summary
    layout = assemble_engine()
    print_engine_summary(layout)
    return layout


def run_simulation_demo(throttle: float = 1.0, duration: float = 6.0,
                        dt: float = 1.0 / 60.0, csv_path: str = None):
    """Idle for one second, then step the throttle and let the spools settle."""
    print("\n" + "="*60)
    print(f"  Throttle Run (idle -> {throttle*100:.0f}%)")
    print("="*60)

    from spoolview.physics.simulation import run_throttle_schedule, print_run_summary
    df = run_throttle_schedule([(0.0, 0.0), (1.0, throttle)], duration_s=duration, dt=dt)
    print_run_summary(df)

    if csv_path:
        os.makedirs(os.path.dirname(os.path.abspath(csv_path)), exist_ok=True)
        df.to_csv(csv_path, index=False)
        print(f"  Trajectory saved: {csv_path}")
    return df


def run_export(output_dir: str):
    from spoolview.geometry.assembly import assemble_engine
    from spoolview.export.stl_export import export_engine
    return export_engine(assemble_engine(), output_dir=output_dir, verbose=True)


def run_server(host: str, port: int, materials_path: str = None):
    from ui import server
    server.run_server(host=host, port=port, materials_path=materials_path)


def main():
    parser = argparse.ArgumentParser(description='SpoolView — two-spool turbofan viewer')
    parser.add_argument('--geometry', action='store_true', help='Show engine geometry')
    parser.add_argument('--simulate', action='store_true', help='Run a headless throttle step')
    parser.add_argument('--throttle', type=float, default=1.0, help='Throttle after the step (0-1)')
    parser.add_argument('--duration', type=float, default=6.0, help='Run length (s)')
    parser.add_argument('--dt', type=float, default=1.0 / 60.0, help='Tick length (s)')
    parser.add_argument('--csv', type=str, metavar='PATH', help='Save the run as CSV')
    parser.add_argument('--export', type=str, metavar='DIR', help='Export STL meshes to DIR')
    parser.add_argument('--serve', action='store_true', help='Start the browser viewer')
    parser.add_argument('--host', type=str, default='127.0.0.1')
    parser.add_argument('--port', type=int, default=5000)
    parser.add_argument('--materials', type=str, metavar='YAML', help='Material overrides file')
    parser.add_argument('--log-level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])

    args = parser.parse_args()
    setup_logging(getattr(logging, args.log_level))

    if args.geometry:
        run_geometry_demo()
    elif args.simulate:
        try:
            run_simulation_demo(args.throttle, args.duration, args.dt, args.csv)
        except ValueError as e:
            parser.error(str(e))
    elif args.export:
        run_export(args.export)
    elif args.serve:
        from spoolview.geometry.materials import MaterialConfigError
        try:
            run_server(args.host, args.port, args.materials)
        except MaterialConfigError as e:
            parser.error(str(e))
    else:
        # Default: show geometry + a short spool-up
        run_geometry_demo()
        run_simulation_demo()
        print("\n  Use --serve for the 3D viewer, --help for all options.")


if __name__ == "__main__":
    main()
