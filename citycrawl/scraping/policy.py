"""
Delay, timeout and skip-and-continue policy for listing scraping.
"""

from __future__ import annotations

import asyncio
import random
from enum import Enum

from citycrawl.scraping.config.models import ScrapeSettings
from citycrawl.scraping.errors import ScrapeConfigurationError


class OperationKind(str, Enum):
    PAGE = "page"
    DETAIL = "detail"
    READY = "ready"
    EVALUATE = "evaluate"


class FailureAction(str, Enum):
    SKIP_PAGE = "skip_page"
    SKIP_ITEM = "skip_item"


class RetryDelayPolicy:
    """
    Jittered pauses between requests and timeout budgets per operation.

    Delays are drawn independently per call so concurrent workers hitting
    the same source do not fall into lockstep.
    """

    def __init__(
        self,
        *,
        page_delay_range: tuple[float, float],
        item_delay_range: tuple[float, float],
        page_timeout_seconds: float,
        detail_timeout_seconds: float,
        run_timeout_seconds: float,
        rng: random.Random | None = None,
    ) -> None:
        self._page_delay_range = self._validate_range("page", page_delay_range)
        self._item_delay_range = self._validate_range("item", item_delay_range)
        self._timeouts = {
            OperationKind.PAGE: page_timeout_seconds,
            OperationKind.DETAIL: detail_timeout_seconds,
            # Single waits/evaluations share the budget of the step they run in.
            OperationKind.READY: min(page_timeout_seconds, detail_timeout_seconds),
            OperationKind.EVALUATE: min(page_timeout_seconds, detail_timeout_seconds),
        }
        for kind, timeout in self._timeouts.items():
            if timeout <= 0:
                raise ScrapeConfigurationError(f"Timeout for '{kind.value}' must be positive.")
            if timeout >= run_timeout_seconds:
                raise ScrapeConfigurationError(
                    f"Timeout for '{kind.value}' ({timeout}s) must be smaller than the "
                    f"run deadline ({run_timeout_seconds}s)."
                )
        self._rng = rng or random.Random()

    @classmethod
    def from_settings(
        cls,
        settings: ScrapeSettings,
        *,
        rng: random.Random | None = None,
    ) -> "RetryDelayPolicy":
        delay_range = (settings.delay_min_seconds, settings.delay_max_seconds)
        return cls(
            page_delay_range=delay_range,
            item_delay_range=delay_range,
            page_timeout_seconds=settings.page_timeout_seconds,
            detail_timeout_seconds=settings.detail_timeout_seconds,
            run_timeout_seconds=settings.run_timeout_seconds,
            rng=rng,
        )

    def inter_page_delay(self) -> float:
        return self._draw(self._page_delay_range)

    def inter_item_delay(self) -> float:
        return self._draw(self._item_delay_range)

    def operation_timeout(self, kind: OperationKind) -> float:
        return self._timeouts[kind]

    @staticmethod
    def on_failure(kind: OperationKind) -> FailureAction:
        if kind is OperationKind.PAGE:
            return FailureAction.SKIP_PAGE
        return FailureAction.SKIP_ITEM

    @staticmethod
    async def pause(seconds: float) -> None:
        """
        Scheduled, cancellable pause.
        """

        if seconds > 0:
            await asyncio.sleep(seconds)

    def _draw(self, bounds: tuple[float, float]) -> float:
        low, high = bounds
        if high == low:
            return low
        return self._rng.uniform(low, high)

    @staticmethod
    def _validate_range(name: str, bounds: tuple[float, float]) -> tuple[float, float]:
        low, high = bounds
        if low < 0 or high < low:
            raise ScrapeConfigurationError(
                f"Invalid {name} delay range ({low}, {high}): expected 0 <= min <= max."
            )
        return (float(low), float(high))
