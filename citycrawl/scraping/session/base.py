"""
Automation session interfaces consumed by the unit pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any


class AutomationSession(ABC):
    """
    One isolated, stateful browsing context owned by a single job.

    Every method raises SessionOperationError on failure and
    SessionTimeoutError when its condition is not met in time.
    """

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """
        Load `url` in the session.
        """

    @abstractmethod
    async def wait_until_ready(self, selector: str, timeout: float) -> None:
        """
        Block until an element matching `selector` is visible.
        """

    @abstractmethod
    async def evaluate(self, script: str) -> Any:
        """
        Evaluate a script in the page and return its JSON-compatible value.
        """

    @abstractmethod
    async def click(self, selector: str, timeout: float) -> None:
        """
        Click the first element matching `selector`.
        """

    @abstractmethod
    async def current_location(self) -> str:
        """
        Return the URL currently loaded in the session.
        """

    @abstractmethod
    async def close(self) -> None:
        """
        Release every resource held by the session.
        """


class SessionFactory(ABC):
    """
    Creates one fresh session per job and tears it down when the job ends.
    """

    @abstractmethod
    async def create(self, *, unit: str) -> AutomationSession:
        """
        Create a new isolated session. Raises SessionAcquisitionError on failure.
        """

    @asynccontextmanager
    async def session(self, *, unit: str) -> AsyncIterator[AutomationSession]:
        """
        Yield a fresh session and close it on every exit path.
        """

        session = await self.create(unit=unit)
        try:
            yield session
        finally:
            await session.close()
