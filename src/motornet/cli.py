"""
Command-line interface for motor transport simulation.

Usage:
    python -m motornet.cli --config configs/default.yaml --out output/
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from .config import load_config
from .export.export_manager import ExportManager
from .export.export_request_interpreter import ExportRequestInterpreter
from .export.metadata import export_metadata
from .exceptions import UnsupportedExportError
from .runner import run_simulation
from .utils.logger.logger import Logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Molecular motor transport over random microtubule networks"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        required=True,
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--out", "-o",
        type=Path,
        default=None,
        help="Output directory (overrides config)"
    )
    parser.add_argument(
        "--name", "-n",
        type=str,
        default=None,
        help="Run name (overrides config)"
    )
    parser.add_argument(
        "--seed", "-s",
        type=int,
        default=None,
        help="Random seed (overrides config)"
    )
    parser.add_argument(
        "--sinks",
        type=str,
        default=None,
        help="Comma-separated export sinks: csv, excel, png, plot (overrides config)"
    )
    parser.add_argument(
        "--log",
        action="store_true",
        help="Write a log file (path from MOTORNET_LOG_PATH)"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress output except errors"
    )
    return parser


def main(argv=None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.log:
        Logger.initialize()

    try:
        config = load_config(args.config)
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        sys.exit(1)

    if args.seed is not None:
        config.simulation = replace(config.simulation, seed=args.seed)

    out_dir = args.out or Path(config.output.out_dir)
    run_name = args.name or config.output.run_name
    sink_names = args.sinks.split(",") if args.sinks else config.output.sinks

    try:
        sinks = ExportRequestInterpreter().create_sinks(sink_names)
    except UnsupportedExportError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    net = config.network
    if not args.quiet:
        print("Running motor transport simulation...")
        print(f"  Seed: {config.simulation.seed}")
        print(f"  Tubes: {net.num_tubes} x {net.segments_per_tube} segments of {net.segment_length_nm:.2f} nm")
        print(f"  Persistence length: {net.persistence_length_nm:.2f} nm")

    result = run_simulation(config, sinks)

    root_folder, paths = ExportManager().save(sinks, str(out_dir))
    metadata_path = Path(root_folder) / f"{run_name}_metadata.json"
    export_metadata(result, metadata_path)

    if not args.quiet:
        summary = result.summary()
        print()
        print("=" * 50)
        print("SIMULATION COMPLETE")
        print("=" * 50)
        print(f"  Network entropy: {summary['entropy']:.4f} nats")
        print(f"  Overlaps: {summary['num_overlaps']}")
        print(f"  Outcome: {summary['outcome']}")
        print(f"  Elapsed: {summary['elapsed_time_s']:.4f} s over {summary['iterations']} iterations")
        print(f"  Captures: {summary['captures']}")
        if result.sweep:
            print("  Persistence sweep:")
            for lp, h in result.sweep:
                print(f"    Lp={lp:.1f} nm  H={h:.4f}")
        print()
        print("Output files:")
        for path in paths:
            print(f"  {path}")
        print(f"  Metadata: {metadata_path}")

    sys.exit(0)


if __name__ == "__main__":
    main()
