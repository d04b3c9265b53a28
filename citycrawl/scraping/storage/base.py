"""
Storage layer interfaces for scraped listings.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from citycrawl.domain.listing import UnitResult


class ListingStorage(ABC):
    """
    Storage abstraction for listing writes.
    """

    @abstractmethod
    def store(self, results: Sequence[UnitResult]) -> int:
        """
        Persist the listings of successful units and return the written row count.
        """
