"""
tests/test_listing_schema.py

Raw detail fields to Listing normalization.
"""

from __future__ import annotations

import math

import pytest

from citycrawl.domain.listing import Listing, ScrapeRunReport, UnitResult
from citycrawl.schemas.listing import ListingPayload, parse_number


class TestParseNumber:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("$1,234 night", 1234.0),
            ("4.92 (120 reviews)", 4.92),
            ("€ 89", 89.0),
            (150, 150.0),
            (4.5, 4.5),
            (None, 0.0),
            (True, 0.0),
            ("no price", 0.0),
            (-3, 0.0),
            (math.nan, 0.0),
        ],
    )
    def test_parse_number(self, raw, expected) -> None:
        assert parse_number(raw) == pytest.approx(expected)


class TestListingPayload:
    def test_missing_fields_default(self) -> None:
        listing = ListingPayload.from_raw({}).to_listing()
        assert listing == Listing()

    def test_non_mapping_raw_becomes_defaults(self) -> None:
        assert ListingPayload.from_raw(None).to_listing() == Listing()
        assert ListingPayload.from_raw(["x"]).to_listing() == Listing()

    def test_unknown_keys_are_ignored(self) -> None:
        listing = ListingPayload.from_raw({"title": "Loft", "host": "Ann"}).to_listing()
        assert listing.title == "Loft"

    def test_override_wins_over_raw(self) -> None:
        payload = ListingPayload.from_raw({"url": "https://old"}, url="https://new")
        assert payload.url == "https://new"

    def test_none_override_is_ignored(self) -> None:
        payload = ListingPayload.from_raw({"url": "https://old"}, url=None)
        assert payload.url == "https://old"

    def test_text_whitespace_is_collapsed(self) -> None:
        payload = ListingPayload.from_raw({"location": "  Bondi \n Beach  ", "title": 42})
        assert payload.location == "Bondi Beach"
        assert payload.title == "42"

    def test_payload_is_frozen(self) -> None:
        payload = ListingPayload.from_raw({"title": "Loft"})
        with pytest.raises(Exception):
            payload.title = "Other"  # type: ignore[misc]


class TestDomainModels:
    def test_identity_requires_url_or_title(self) -> None:
        assert Listing(title="Loft").has_identity
        assert Listing(url="https://x").has_identity
        assert not Listing(title="  ", description="only text").has_identity

    def test_failed_unit_cannot_carry_records(self) -> None:
        with pytest.raises(ValueError):
            UnitResult(unit="Paris", index=0, records=(Listing(title="a"),), error="boom")

    def test_report_flattens_successful_units_in_order(self) -> None:
        report = ScrapeRunReport(
            results=(
                UnitResult(unit="Paris", index=0, records=(Listing(title="a"), Listing(title="b"))),
                UnitResult(unit="Sydney", index=1, error="no listings found"),
                UnitResult(unit="Lima", index=2, records=(Listing(title="c"),)),
            )
        )
        assert [listing.title for listing in report.successful_listings()] == ["a", "b", "c"]
        assert [result.unit for result in report.failed_units()] == ["Sydney"]
