"""Bounded, cursor-addressed history log."""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from statechart_engines.config import runtime_config
from statechart_engines.scxml_history.models import ActionType, HistoryEntry, HistoryMetadata, HistoryState

logger = logging.getLogger(__name__)


class HistoryStore:
    """Linear undo log.

    ``entries[current_index]`` is the snapshot matching the live document.
    Pushing while the cursor is not at the end drops the redo branch; once the
    log exceeds ``max_size`` the oldest entries are evicted.
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.max_size = max(1, max_size if max_size is not None else runtime_config.get_history_max_size())
        self._clock = clock
        self._entries: List[HistoryEntry] = []
        self._current_index = -1
        self._enabled = True
        self._lock = threading.RLock()

    @property
    def entries(self) -> List[HistoryEntry]:
        with self._lock:
            return list(self._entries)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    def push_entry(
        self,
        action_type: ActionType,
        description: str,
        content: str,
        metadata: Optional[HistoryMetadata] = None,
    ) -> Optional[HistoryEntry]:
        with self._lock:
            if not self._enabled:
                logger.debug("History disabled; dropping %s entry", action_type)
                return None
            fields = {}
            if self._clock is not None:
                fields["timestamp"] = int(self._clock() * 1000)
            entry = HistoryEntry(
                action_type=ActionType(action_type),
                description=description,
                content=content,
                metadata=metadata,
                **fields,
            )
            entries = self._entries[: self._current_index + 1]
            entries.append(entry)
            overflow = len(entries) - self.max_size
            if overflow > 0:
                entries = entries[overflow:]
            self._entries = entries
            self._current_index = len(entries) - 1
            return entry

    def undo(self) -> Optional[HistoryEntry]:
        """Step back; the returned entry carries the action type of the step undone."""
        with self._lock:
            if not self.can_undo():
                return None
            undone = self._entries[self._current_index]
            self._current_index -= 1
            target = self._entries[self._current_index]
            return target.model_copy(update={"action_type": undone.action_type})

    def redo(self) -> Optional[HistoryEntry]:
        with self._lock:
            if not self.can_redo():
                return None
            self._current_index += 1
            return self._entries[self._current_index]

    def can_undo(self) -> bool:
        return self._current_index > 0

    def can_redo(self) -> bool:
        return self._current_index < len(self._entries) - 1

    def get_undo_description(self) -> Optional[str]:
        with self._lock:
            if not self.can_undo():
                return None
            return f"Undo {self._entries[self._current_index].description}"

    def get_redo_description(self) -> Optional[str]:
        with self._lock:
            if not self.can_redo():
                return None
            return f"Redo {self._entries[self._current_index + 1].description}"

    def clear(self) -> None:
        with self._lock:
            self._entries = []
            self._current_index = -1

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def snapshot(self) -> HistoryState:
        with self._lock:
            return HistoryState(
                entries=list(self._entries),
                current_index=self._current_index,
                max_size=self.max_size,
                is_enabled=self._enabled,
            )
