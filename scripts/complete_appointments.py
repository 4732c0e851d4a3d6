#!/usr/bin/env python3
"""Run one appointment completion sweep.

Meant to be called by cron (or any scheduler) on a fixed interval, e.g.::

    */15 * * * * python scripts/complete_appointments.py

Exits non-zero when the sweep fails so the scheduler can retry next cycle.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure the project root is on sys.path so ``atlas`` can be imported when the script is executed directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from atlas import create_app
from atlas.engine import completion_sweeper
from atlas.errors import EngineError


def run_sweep(timezone: str | None = None) -> int:
    config = {"BUSINESS_TIMEZONE": timezone} if timezone else None
    app = create_app(config)

    with app.app_context():
        try:
            result = completion_sweeper().sweep()
        except EngineError as exc:
            print(f"Error completing appointments: {exc}", file=sys.stderr)
            return 1

    print(f"[{result.timestamp}] Completed {result.completed_count} past appointment(s).")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Complete appointments whose scheduled time has passed.")
    parser.add_argument("--timezone", help="Business timezone override, e.g. America/Sao_Paulo")
    args = parser.parse_args()
    sys.exit(run_sweep(args.timezone))
