"""
Timers for CampusPrep sessions

- PeriodicTask: asyncio task invoking a callback at a fixed interval
- QuestionCountdown: per-question countdown that fires TIME_UP once
- SessionClock: elapsed session time with pause/resume/reset
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Runs ``callback`` every ``interval`` seconds until cancelled.

    The callback may be sync or async. Errors raised by the callback are
    logged and the task keeps running.
    """

    def __init__(
        self,
        name: str,
        interval: float,
        callback: Callable[[], Any | Awaitable[Any]],
    ):
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self._callback = callback
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name=self.name)
        logger.debug(f"Started periodic task {self.name} every {self.interval}s")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                result = self._callback()
                if inspect.isawaitable(result):
                    await result
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Periodic task {self.name} failed: {e}")

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug(f"Cancelled periodic task {self.name}")
        self._task = None


class QuestionCountdown:
    """Countdown bound to the active question."""

    def __init__(self, limit_seconds: int = 300):
        if limit_seconds <= 0:
            raise ValueError(f"Time limit must be positive, got {limit_seconds}")
        self.limit_seconds = limit_seconds
        self.remaining_seconds = limit_seconds
        self._expired = False

    @property
    def expired(self) -> bool:
        return self._expired

    def reset(self) -> None:
        """Back to a full countdown, e.g. after moving to another question."""
        self.remaining_seconds = self.limit_seconds
        self._expired = False

    def tick(self, seconds: int = 1) -> bool:
        """
        Advance the countdown.

        Returns:
            True exactly once, on the tick that reaches zero
        """
        if self._expired:
            return False
        self.remaining_seconds = max(0, self.remaining_seconds - seconds)
        if self.remaining_seconds == 0:
            self._expired = True
            return True
        return False

    def format(self) -> str:
        """Remaining time as ``MM:SS``."""
        minutes, seconds = divmod(self.remaining_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"


class SessionClock:
    """Elapsed session seconds, advanced by ticks while running."""

    def __init__(self):
        self.elapsed_seconds = 0
        self.running = False

    def tick(self, seconds: int = 1) -> None:
        if self.running:
            self.elapsed_seconds += seconds

    def start(self) -> None:
        self.running = True

    def pause(self) -> None:
        self.running = False

    def toggle(self) -> bool:
        """Pause if running, resume otherwise. Returns the new running state."""
        self.running = not self.running
        return self.running

    def reset(self) -> None:
        """Zero the clock and stop it."""
        self.elapsed_seconds = 0
        self.running = False

    def format(self) -> str:
        minutes, seconds = divmod(self.elapsed_seconds, 60)
        return f"{minutes:02d}:{seconds:02d}"
