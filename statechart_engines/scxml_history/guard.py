"""Suppresses history tracking while a history snapshot is being applied."""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Iterator, Optional

from statechart_engines.config import runtime_config
from statechart_engines.scxml_history.scheduler import ScheduledHandle, Scheduler, ThreadingScheduler

logger = logging.getLogger(__name__)


class GuardState(str, Enum):
    IDLE = "idle"
    APPLYING_HISTORY = "applying_history"


class HistoryApplyGuard:
    """Two-state guard: IDLE or APPLYING_HISTORY.

    ``enter()`` starts applying a snapshot. The guard returns to IDLE on the
    explicit ``release()`` signal or when the settle window elapses, whichever
    comes first.
    """

    def __init__(self, scheduler: Optional[Scheduler] = None, settle_ms: Optional[int] = None) -> None:
        self._scheduler = scheduler or ThreadingScheduler()
        self.settle_ms = settle_ms if settle_ms is not None else runtime_config.get_history_settle_ms()
        self._state = GuardState.IDLE
        self._timeout: Optional[ScheduledHandle] = None
        self._lock = threading.RLock()

    @property
    def state(self) -> GuardState:
        return self._state

    @property
    def active(self) -> bool:
        return self._state == GuardState.APPLYING_HISTORY

    def enter(self) -> None:
        with self._lock:
            self._cancel_timeout()
            self._state = GuardState.APPLYING_HISTORY
            self._timeout = self._scheduler.call_later(self.settle_ms / 1000.0, self._expire)

    def release(self) -> None:
        with self._lock:
            self._cancel_timeout()
            self._state = GuardState.IDLE

    def _expire(self) -> None:
        with self._lock:
            if self._state == GuardState.APPLYING_HISTORY:
                logger.debug("History apply guard released after %sms settle window", self.settle_ms)
            self._timeout = None
            self._state = GuardState.IDLE

    def _cancel_timeout(self) -> None:
        if self._timeout is not None:
            self._timeout.cancel()
            self._timeout = None

    @contextmanager
    def applying(self, release_on_exit: bool = False) -> Iterator["HistoryApplyGuard"]:
        """Hold the guard for the block; by default the settle window still runs afterwards."""
        self.enter()
        try:
            yield self
        finally:
            if release_on_exit:
                self.release()
