"""Timeout helpers for the Codeur Prospection Bot.

Source fetches are awaitable units of work; this module bounds them in time
and turns an expiry into a domain error.
"""

import asyncio
from typing import Awaitable, TypeVar

from codeur_prospection.errors import ProspectionError

T = TypeVar('T')


class FetchTimeoutError(ProspectionError):
    """Exception raised when a fetch does not finish within its bound."""

    def __init__(self, label: str, timeout_sec: float):
        super().__init__(f"{label} timed out after {timeout_sec:g} seconds")
        self.label = label
        self.timeout_sec = timeout_sec


async def run_with_timeout(awaitable: Awaitable[T], timeout_sec: float, label: str = "operation") -> T:
    """Await ``awaitable`` and raise FetchTimeoutError if it takes longer than timeout_sec.

    Args:
        awaitable: Coroutine or future to wait for
        timeout_sec: Maximum execution time in seconds
        label: Name used in the error message

    Returns:
        Whatever the awaitable returns

    Example:
        projects = await run_with_timeout(fetcher.fetch(criteria), 30, "codeur fetch")
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_sec)
    except asyncio.TimeoutError as e:
        raise FetchTimeoutError(label, timeout_sec) from e
