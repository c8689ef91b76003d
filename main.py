#!/usr/bin/env python3
# ride-dispatch/main.py
"""
Command-Line Interface for the ride assignment engine.

Loads drivers and rides from JSON files, runs the assignment and prints the
result as JSON.

Usage:
    python main.py                                   # drivers.json + rides.json
    python main.py --drivers d.json --rides r.json   # explicit inputs
    python main.py --output result.json              # also write the result
    python main.py --osrm-url http://localhost:5000  # local OSRM instance
    python main.py --verbose                         # per-ride decisions

Exit Codes:
    0: Success
    1: Data loading or validation error
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Any, List, Optional

from ride_dispatch import config
from ride_dispatch.dispatch import AssignmentEngine
from ride_dispatch.models import InvalidRecordError, load_drivers, load_rides
from ride_dispatch.routing import DistanceResolver, OSRMClient

logger = logging.getLogger("ride_dispatch.cli")


def load_json_records(path: str) -> List[Any]:
    """
    Read a JSON array of records.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is not a JSON array
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Input file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON array of records")
    return data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Assign daily rides to drivers at minimum operating cost",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --drivers drivers.json --rides rides.json
  python main.py --threshold 10 --workers 8
        """
    )
    parser.add_argument("--drivers", "-d", default="drivers.json", help="Driver records (JSON array)")
    parser.add_argument("--rides", "-r", default="rides.json", help="Ride records (JSON array)")
    parser.add_argument("--output", "-o", help="Optional file to write the result JSON to")
    parser.add_argument(
        "--threshold",
        type=float,
        default=config.ROUTED_DISTANCE_THRESHOLD_KM,
        help=f"Haversine km above which OSRM is skipped (default: {config.ROUTED_DISTANCE_THRESHOLD_KM})"
    )
    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=config.MAX_WORKERS,
        help=f"Threads used to evaluate drivers per ride (default: {config.MAX_WORKERS})"
    )
    parser.add_argument(
        "--osrm-url",
        default=config.OSRM_SERVER_URL,
        help=f"OSRM server URL (default: {config.OSRM_SERVER_URL})"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every dispatch decision")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        drivers = load_drivers(load_json_records(args.drivers))
        rides = load_rides(load_json_records(args.rides))
    except (OSError, ValueError) as e:
        # InvalidRecordError is a ValueError
        kind = "Invalid input" if isinstance(e, InvalidRecordError) else "Failed to load data"
        logger.error(f"{kind}: {e}")
        return 1

    logger.info(f"Loaded {len(drivers)} drivers and {len(rides)} rides")

    resolver = DistanceResolver(client=OSRMClient(base_url=args.osrm_url), threshold_km=args.threshold)
    engine = AssignmentEngine(resolver=resolver, max_workers=args.workers)
    output = engine.run(drivers, rides).to_dict()

    rendered = json.dumps(output, indent=2)
    print(rendered)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(rendered + "\n")
        logger.info(f"Wrote result to {args.output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
