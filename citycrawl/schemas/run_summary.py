"""
citycrawl/schemas/run_summary.py

Serializable summary schemas for one scrape run.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class UnitSummary(BaseModel):
    """
    Summary model for one unit's outcome.
    """

    unit: str
    listings: int = Field(..., ge=0)
    status: str
    error: str | None = None
    duration_seconds: float = Field(default=0.0, ge=0.0)


class ScrapeRunSummary(BaseModel):
    """
    Summary model for a whole run, as printed by the CLI.
    """

    units: list[UnitSummary] = Field(default_factory=list)
    total_listings: int = Field(..., ge=0)
    json_written: int = Field(default=0, ge=0)
    csv_written: int = Field(default=0, ge=0)
    persisted: int = Field(default=0, ge=0)
    deadline_exceeded: bool = False
    average_price: float = 0.0
    minimum_price: float = 0.0
    maximum_price: float = 0.0
