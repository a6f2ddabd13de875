"""Deferred-task schedulers used for debounce and settle timers."""
from __future__ import annotations

import heapq
import itertools
import threading
import time
from typing import Callable, List, Optional, Protocol, Tuple


class ScheduledHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    def call_later(self, delay_s: float, callback: Callable[[], None]) -> ScheduledHandle:
        ...

    def now(self) -> float:
        ...


class ThreadingScheduler:
    """Real timers; callbacks run on daemon timer threads."""

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0.0, delay_s), callback)
        timer.daemon = True
        timer.start()
        return timer

    def now(self) -> float:
        return time.monotonic()


class _ManualHandle:
    def __init__(self, due: float) -> None:
        self.due = due
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual clock for deterministic tests; time only moves on advance()."""

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._seq = itertools.count()
        self._queue: List[Tuple[float, int, _ManualHandle, Callable[[], None]]] = []

    def now(self) -> float:
        return self._now

    def call_later(self, delay_s: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle(self._now + max(0.0, delay_s))
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle, callback))
        return handle

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due callbacks in order. Returns how many fired."""
        deadline = self._now + seconds
        fired = 0
        while self._queue and self._queue[0][0] <= deadline:
            due, _, handle, callback = heapq.heappop(self._queue)
            self._now = max(self._now, due)
            if handle.cancelled:
                continue
            callback()
            fired += 1
        self._now = deadline
        return fired

    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def next_due(self) -> Optional[float]:
        live = [due for due, _, handle, _ in self._queue if not handle.cancelled]
        return min(live) if live else None
