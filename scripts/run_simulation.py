#!/usr/bin/env python
from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

sys.path.append(str(Path(__file__).resolve().parents[1]))

from payroll_engine.core.simulation import create_simulation_data, generate_simulation_report


def main() -> None:
    parser = argparse.ArgumentParser(description="Run the payroll range simulation and print its report")
    parser.add_argument("--year", type=int, required=True, help="Payroll year, e.g. 2025")
    parser.add_argument("--month", type=int, required=True, help="Payroll month 1-12")
    parser.add_argument("--from-day", type=int, default=1, help="First day of the range")
    parser.add_argument("--to-day", type=int, default=10, help="Last day of the range")
    parser.add_argument("--output", help="Optional path to also write the report to")
    args = parser.parse_args()

    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    run = create_simulation_data(args.year, args.month, args.from_day, args.to_day)
    report = generate_simulation_report(run)
    print(report)

    if args.output:
        output = Path(args.output)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(report, encoding="utf-8")
        print(f"Simulation report written to: {output}")


if __name__ == "__main__":
    main()
