"""
Run the multi-city listing scrape from CLI.
"""

from __future__ import annotations

import argparse
import json

from citycrawl.scraping.config import split_units
from citycrawl.scraping.logging_utils import configure_logging
from citycrawl.services.city_scrape_service import get_city_scrape_service


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scrape listings for several cities concurrently.")
    parser.add_argument(
        "--cities",
        dest="cities",
        default=None,
        help="Comma-separated city list. Defaults to CITY_SCRAPE_UNITS.",
    )
    parser.add_argument("--workers", dest="pool_size", type=int, default=None)
    parser.add_argument("--pages", dest="max_pages", type=int, default=None)
    parser.add_argument("--items-per-page", dest="max_items_per_page", type=int, default=None)
    parser.add_argument("--out", dest="out_file", default=None, help="JSON output path.")
    parser.add_argument("--csv-out", dest="csv_out_file", default=None, help="Optional CSV output path.")
    parser.add_argument(
        "--persist",
        dest="persist",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Upsert listings into PostgreSQL.",
    )
    parser.add_argument(
        "--headed",
        dest="headless",
        action="store_false",
        default=None,
        help="Show the browser window.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()

    units = split_units(args.cities or "") or None
    if args.pool_size is not None:
        args.pool_size = max(1, args.pool_size)

    service = get_city_scrape_service()
    outcome = service.run(
        units=units,
        pool_size=args.pool_size,
        max_pages=args.max_pages,
        max_items_per_page=args.max_items_per_page,
        out_file=args.out_file,
        csv_out_file=args.csv_out_file,
        persist=args.persist,
        headless=args.headless,
    )

    print(json.dumps(outcome.to_summary().model_dump(), indent=2))
    return 1 if outcome.report.deadline_exceeded else 0


if __name__ == "__main__":
    raise SystemExit(main())
