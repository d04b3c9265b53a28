"""
Scraping-layer exceptions, grouped by the scope that recovers from them.
"""

from __future__ import annotations


class ScrapeError(Exception):
    """Base exception for listing scraping failures."""


class SessionOperationError(ScrapeError):
    """Raised when one automation session call fails."""


class SessionTimeoutError(SessionOperationError):
    """Raised when a session condition is not met within its timeout."""


class PageRequestError(ScrapeError):
    """Raised when a search results page cannot be loaded or enumerated."""


class DetailStepError(ScrapeError):
    """Raised when one listing detail page cannot be enriched."""


class UnitScrapeError(ScrapeError):
    """Base exception for failures that fail a whole unit."""


class NoListingsFoundError(UnitScrapeError):
    """Raised when a unit yields zero listings after all pages."""


class SessionAcquisitionError(UnitScrapeError):
    """Raised when a fresh automation session cannot be created for a unit."""


class RunCancelledError(ScrapeError):
    """Recorded for units abandoned because the run deadline elapsed."""


class ScrapeConfigurationError(ScrapeError):
    """Raised when run settings are invalid before any work starts."""
