"""
Crime Summary Script
Loads a crime record CSV, applies filters and prints the derived views
"""

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from crimemap.datasets.base import IngestionError
from crimemap.datasets.crime.models import CATEGORY_OPTIONS
from crimemap.datasets.crime.session import CrimeMapSession
from crimemap.shared.config import get_config

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Summarize crime records under a set of filters")
    parser.add_argument("source", nargs="?", help="CSV path or URL (defaults to config)")
    parser.add_argument("--category", choices=CATEGORY_OPTIONS)
    parser.add_argument("--station")
    parser.add_argument("--start-date")
    parser.add_argument("--end-date")
    parser.add_argument("--min-age", type=int)
    parser.add_argument("--max-age", type=int)
    parser.add_argument("--json", action="store_true", help="Print chart payloads as JSON")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    config = get_config()

    logging.basicConfig(level=config.logging.level, format=config.logging.format)

    session = CrimeMapSession(config)
    try:
        session.load(args.source)
    except IngestionError as e:
        logger.error(f"Could not load crime data: {e}")
        return 1

    changes = {
        "category": args.category,
        "station": args.station,
        "start_date": args.start_date,
        "end_date": args.end_date,
        "min_age": args.min_age,
        "max_age": args.max_age,
    }
    try:
        snapshot = session.update_filters(**{k: v for k, v in changes.items() if v is not None})
    except ValidationError as e:
        logger.error(f"Invalid filters: {e}")
        return 2

    views = snapshot.views

    if args.json:
        print(json.dumps(views.to_dict(), indent=2))
        return 0

    print(f"\n=== {snapshot.record_count} of {len(session.dataset)} records match ===")

    print("\nCategory distribution:")
    for label, count in views.category_distribution.as_mapping().items():
        print(f"  {label}: {count}")

    print("\nCases per year:")
    for year, count in views.yearly_trend.points:
        print(f"  {year}: {count}")

    print("\nAge distribution:")
    for label, count in views.age_histogram.as_mapping().items():
        print(f"  {label}: {count}")

    print("\nSummary:")
    for row in views.summary.rows:
        cells = row.display()
        print(f"  {cells['category']}: {cells['cases']} cases, {cells['percentage']}, avg age {cells['avg_age']}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
