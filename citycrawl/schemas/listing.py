"""
citycrawl/schemas/listing.py

Validated mapping from raw extracted detail fields to the Listing shape.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from citycrawl.domain.listing import Listing

_NUMBER_REGEX = re.compile(r"\d+(?:\.\d+)?")


def parse_number(value: Any) -> float:
    """
    Parse a number from a raw value such as 123, "4.92 (120)" or "$1,234 night".

    Absent or unparsable values map to 0.0.
    """

    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).replace(",", "")
        match = _NUMBER_REGEX.search(text)
        if match is None:
            return 0.0
        number = float(match.group(0))
    if number != number or number < 0:
        return 0.0
    return number


class ListingPayload(BaseModel):
    """
    Raw detail-page fields with defined defaults for anything missing.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    title: str = ""
    price: float = Field(default=0.0, ge=0.0)
    location: str = ""
    rating: float = Field(default=0.0, ge=0.0)
    url: str = ""
    description: str = ""

    @field_validator("title", "location", "url", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return " ".join(value.split())
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return ""

    @field_validator("price", "rating", mode="before")
    @classmethod
    def _coerce_number(cls, value: Any) -> float:
        return parse_number(value)

    def to_listing(self) -> Listing:
        return Listing(**self.model_dump())

    @classmethod
    def from_raw(cls, raw: Any, **overrides: Any) -> "ListingPayload":
        """
        Build a payload from an untyped mapping; non-mappings become defaults.
        """

        data = dict(raw) if isinstance(raw, dict) else {}
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)
