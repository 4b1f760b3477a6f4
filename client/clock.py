"""
Warden - Timer Schedulers
===========================
One-shot timer sources for the alert queue.

The queue never sleeps itself; it asks a scheduler to call it back later.
Two implementations are provided:

    LoopScheduler   -> real time, backed by the running asyncio event loop
    ManualScheduler -> virtual time, advanced explicitly (tests, scripted runs)

Both expose call_later(delay, callback) with the argument order of
asyncio.AbstractEventLoop.call_later. Timers are never cancelled; the queue
ignores stale ones by sequence id.
"""

import asyncio
import heapq
import itertools
from typing import Callable


class LoopScheduler:
    """
    Schedule callbacks on an asyncio event loop.

    Attributes:
        loop: Fixed event loop to use. When None, the loop running at the
              time of each call_later() is used.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self.loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Raises RuntimeError when no loop is given and none is running."""
        loop = self.loop or asyncio.get_running_loop()
        loop.call_later(delay, callback)


class ManualScheduler:
    """
    Deterministic scheduler driven by advance().

    Callbacks fire in due-time order; ties fire in scheduling order.
    A callback that schedules another timer inside the advanced window
    sees it fire during the same advance() call.
    """

    def __init__(self):
        self.now = 0.0
        self._heap: list[tuple[float, int, Callable[[], None]]] = []
        self._counter = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        heapq.heappush(self._heap, (self.now + max(delay, 0.0), next(self._counter), callback))

    def advance(self, seconds: float) -> None:
        """Move virtual time forward, firing every timer that comes due."""
        target = self.now + seconds
        while self._heap and self._heap[0][0] <= target:
            when, _, callback = heapq.heappop(self._heap)
            self.now = when
            callback()
        self.now = target
