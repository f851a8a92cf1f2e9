"""Minimum-display-time gate: keeps "searching…" visible for a while after a new query.

displayed_loading = loading OR time since the query text last changed < min_display_time.
Network selection and page changes do not restart the timer.
"""

import asyncio
import time
from collections.abc import Callable

from calamar.core.config import config


class MinimumDisplayGate:
    def __init__(
        self,
        min_display_time: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._min_display_time = (
            config.min_display_seconds if min_display_time is None else min_display_time
        )
        self._clock = clock
        self._text: str | None = None
        self._changed_at: float | None = None

    @property
    def min_display_time(self) -> float:
        return self._min_display_time

    def observe_query(self, text: str) -> bool:
        """Record the current query text. Returns True if the timer restarted."""
        if text == self._text:
            return False
        self._text = text
        self._changed_at = self._clock()
        return True

    def remaining(self) -> float:
        if self._changed_at is None:
            return 0.0
        elapsed = self._clock() - self._changed_at
        return max(0.0, self._min_display_time - elapsed)

    def is_holding(self) -> bool:
        return self.remaining() > 0

    def displayed_loading(self, loading: bool) -> bool:
        return loading or self.is_holding()

    async def wait(self) -> None:
        """Sleep until the minimum display time has elapsed."""
        remaining = self.remaining()
        if remaining > 0:
            await asyncio.sleep(remaining)
