"""Materialize auto-meals for cutoffs that were missed.

Run after downtime, for example:

    boarding-mess-backfill 2025-10-20 2025-10-24

Re-running over the same range is harmless: existing registrations are never
touched.
"""

from __future__ import annotations

import argparse
import sys
from datetime import date

from boarding_mess.core.logging import configure_logging
from boarding_mess.db.session import SessionLocal
from boarding_mess.services.clock import SystemClock
from boarding_mess.services.errors import BackfillRangeError
from boarding_mess.services.materializer import AutoMealMaterializer


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"not an ISO date: {value}") from err


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("start", type=_parse_date, help="first date (YYYY-MM-DD)")
    parser.add_argument(
        "end",
        type=_parse_date,
        nargs="?",
        default=None,
        help="last date (YYYY-MM-DD); defaults to today in the household timezone",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    configure_logging()
    args = build_parser().parse_args(argv)

    with SessionLocal() as db:
        materializer = AutoMealMaterializer(db, clock=SystemClock())
        try:
            results = materializer.backfill(args.start, args.end)
        except BackfillRangeError as err:
            print(f"[backfill] Backfill rejected: {err}", file=sys.stderr)
            return 2

    for result in results:
        print(f"{result.meal_date.isoformat()} {result.period.value:<7} {result.affected}")
    print(f"Created {sum(result.affected for result in results)} registrations")
    return 0


if __name__ == "__main__":
    sys.exit(main())
