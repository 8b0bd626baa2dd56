"""Debounced trigger for starting search rounds."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class DebounceScheduler:
    """Delays on_fire until the input has been quiet for delay_seconds.

    Each on_term_changed() cancels the previously armed trigger, so only the
    last term within the interval fires. A blank term cancels any pending
    trigger and calls on_clear synchronously instead of waiting.

    Must be driven from inside a running event loop.
    """

    def __init__(
        self,
        delay_seconds: float,
        on_fire: Callable[[str], None],
        on_clear: Callable[[], None],
    ) -> None:
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")
        self.delay_seconds = delay_seconds
        self._on_fire = on_fire
        self._on_clear = on_clear
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def on_term_changed(self, raw_term: str) -> bool:
        """Re-arm the trigger for raw_term.

        Returns:
            True if a trigger was armed, False if the term was blank and
            state was cleared immediately.
        """
        self.cancel()
        term = raw_term.strip()
        if not term:
            self._on_clear()
            return False
        self._task = asyncio.get_running_loop().create_task(
            self._fire_after_delay(term), name="search-debounce"
        )
        return True

    def cancel(self) -> None:
        """Drop the pending trigger, if any. It will never fire."""
        if self._task is not None:
            if not self._task.done():
                self._task.cancel()
            self._task = None

    async def wait(self) -> None:
        """Wait for the pending trigger (if any) to fire or be cancelled."""
        task = self._task
        if task is not None and not task.done():
            await asyncio.wait({task})

    async def _fire_after_delay(self, term: str) -> None:
        await asyncio.sleep(self.delay_seconds)
        if self._task is not asyncio.current_task():
            return
        self._task = None
        self._on_fire(term)
