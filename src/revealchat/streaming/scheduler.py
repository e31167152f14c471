"""Timer abstraction for reveal sessions.

Hides where one-shot timers come from. The asyncio scheduler runs on the
current event loop; the manual scheduler keeps a virtual clock that tests
and dry runs advance explicitly.
"""

import asyncio
import heapq
import itertools
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    """A pending one-shot timer."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Source of one-shot timers."""

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop.

    The loop is looked up lazily so the scheduler can be created before the
    loop starts running.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_seconds, callback)


class ManualTimer:
    """Timer owned by a ManualScheduler."""

    def __init__(self, due_ms: float, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic scheduler driven by a virtual millisecond clock.

    Usage:
        scheduler = ManualScheduler()
        session = RevealSession("m1", "Hello world", scheduler=scheduler)
        session.start()
        scheduler.run_until_idle()
    """

    def __init__(self) -> None:
        self.now_ms = 0.0
        self._queue: list[tuple[float, int, ManualTimer]] = []
        self._counter = itertools.count()

    def call_later(self, delay_seconds: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(self.now_ms + delay_seconds * 1000, callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._counter), timer))
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing every timer that comes due.

        Returns:
            Number of callbacks fired
        """
        target = self.now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now_ms = due
            timer.callback()
            fired += 1
        self.now_ms = target
        return fired

    def run_until_idle(self, limit: int = 100_000) -> int:
        """Fire timers in due order until none are pending.

        Returns:
            Number of callbacks fired
        """
        fired = 0
        while self._queue and fired < limit:
            due, _, timer = heapq.heappop(self._queue)
            if timer.cancelled:
                continue
            self.now_ms = max(self.now_ms, due)
            timer.callback()
            fired += 1
        return fired
