"""
Flat-file exports for scrape run results.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict
from pathlib import Path

from citycrawl.domain.listing import ScrapeRunReport

LISTING_FIELDS = ["title", "price", "location", "rating", "url", "description"]


def write_listings_json(path: str | Path, report: ScrapeRunReport) -> int:
    """
    Write every successful unit's listings, in unit order, as one JSON array.

    Returns the number of listings written.
    """

    listings = report.successful_listings()
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = [asdict(listing) for listing in listings]
    target.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return len(listings)


def write_listings_csv(path: str | Path, report: ScrapeRunReport) -> int:
    """
    Write the same rows as `write_listings_json` as CSV with a header row.
    """

    listings = report.successful_listings()
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=LISTING_FIELDS)
        writer.writeheader()
        for listing in listings:
            writer.writerow(asdict(listing))
    return len(listings)
