# backend/fincatch/services/cancellation.py
"""
Last-request-wins execution of fetch cycles.

A chart asks for a new date range before the previous range has finished
loading. The old cycle's requests are now useless, and its result must not
overwrite the newer one or surface as an error. LatestRequestRunner runs
each cycle as an asyncio task and cancels the previous one when a new
cycle starts.

Usage:
    runner = LatestRequestRunner()

    series = await runner.run(lambda: history.build(entries, start, end, "USD"))
    if series is None:
        ...  # superseded by a newer request
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from fincatch.utils.context import fetch_cycle

logger = logging.getLogger(__name__)

T = TypeVar('T')


class LatestRequestRunner:
    """Runs one fetch cycle at a time; starting a cycle cancels the previous."""

    def __init__(self, name: str = "cycle") -> None:
        self.name = name
        self._current: asyncio.Task | None = None
        self._generation = 0

    @property
    def in_flight(self) -> bool:
        return self._current is not None and not self._current.done()

    async def run(self, factory: Callable[[], Awaitable[T]]) -> T | None:
        """
        Start a new cycle, cancelling the one in flight.

        Args:
            factory: Builds the cycle's awaitable; called once

        Returns:
            The cycle's result, or None when a newer cycle superseded it

        Raises:
            Whatever the cycle raises, unless it was superseded
        """
        self.cancel()
        self._generation += 1
        generation = self._generation

        with fetch_cycle(self.name):
            task = asyncio.ensure_future(factory())
        self._current = task

        try:
            return await task
        except asyncio.CancelledError:
            if generation != self._generation:
                logger.debug(f"{self.name} #{generation} superseded by #{self._generation}")
                return None
            raise
        finally:
            if self._current is task:
                self._current = None

    def cancel(self) -> None:
        """Cancel the in-flight cycle, if any."""
        if self.in_flight:
            self._current.cancel()
