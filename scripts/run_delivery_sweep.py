#!/usr/bin/env python3
"""
CLI entrypoint for the delivery reconciliation sweep.

Usage examples:
    python -m scripts.run_delivery_sweep
    python -m scripts.run_delivery_sweep --limit 500 --log-level DEBUG

Flags:
    --limit N             Repair at most N paused delivery items in this run
    --log-level LEVEL     Logging level (INFO, DEBUG, etc.)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from initiative_engine.config import setup_json_logging
from initiative_engine.db.session import SessionLocal
from initiative_engine.jobs.delivery_sweep_job import run_delivery_sweep


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Repair paused delivery initiatives.")
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Repair at most N paused delivery items in this run (defaults to SWEEP_LIMIT).",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    setup_json_logging(log_level=getattr(logging, args.log_level.upper(), logging.INFO))

    db = SessionLocal()
    try:
        report = run_delivery_sweep(db, limit=args.limit)
    finally:
        db.close()

    print(json.dumps(report.as_dict(), indent=2))
    return 0 if report.clean else 1


if __name__ == "__main__":
    sys.exit(main())
