"""Coalescing facade over the history store.

Bursts of text edits and node drags are buffered on two independent debounce
channels and recorded as a single entry once the burst goes quiet. Structural
actions are recorded immediately and discard whatever the channels were
holding. Nothing is recorded while the applying-history guard is active.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from statechart_engines.config import runtime_config
from statechart_engines.scxml_document.accessor import round_half_up
from statechart_engines.scxml_history.guard import HistoryApplyGuard
from statechart_engines.scxml_history.models import ActionType, HistoryMetadata
from statechart_engines.scxml_history.scheduler import ScheduledHandle, Scheduler, ThreadingScheduler
from statechart_engines.scxml_history.store import HistoryStore

logger = logging.getLogger(__name__)

NODE_OPERATIONS = ("add", "delete", "move", "update")
EDGE_OPERATIONS = ("add", "delete", "update")


@dataclass
class _TextChannel:
    handle: Optional[ScheduledHandle] = None
    generation: int = 0
    started_at: float = 0.0
    contents: List[str] = field(default_factory=list)
    metadata: Optional[HistoryMetadata] = None


@dataclass
class _MoveChannel:
    handle: Optional[ScheduledHandle] = None
    generation: int = 0
    node_id: str = ""
    content: Optional[str] = None
    metadata: Optional[HistoryMetadata] = None


class HistoryManager:
    def __init__(
        self,
        store: Optional[HistoryStore] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Optional[Callable[[], float]] = None,
        text_debounce_ms: Optional[int] = None,
        move_debounce_ms: Optional[int] = None,
        guard: Optional[HistoryApplyGuard] = None,
    ) -> None:
        self.scheduler = scheduler or ThreadingScheduler()
        self._clock = clock or self.scheduler.now
        self.store = store or HistoryStore()
        self.guard = guard or HistoryApplyGuard(scheduler=self.scheduler)
        self.text_debounce_ms = (
            text_debounce_ms if text_debounce_ms is not None else runtime_config.get_text_debounce_ms()
        )
        self.move_debounce_ms = (
            move_debounce_ms if move_debounce_ms is not None else runtime_config.get_move_debounce_ms()
        )
        self._text = _TextChannel()
        self._move = _MoveChannel()
        self._lock = threading.RLock()
        self.last_content = ""

    # --- lifecycle ---

    def initialize(self, content: str, description: str = "Initial state") -> None:
        with self._lock:
            self._cancel_pending()
            self.store.clear()
            if content:
                self.store.push_entry(ActionType.FILE_LOAD, description, content)
            self.last_content = content

    def clear(self) -> None:
        with self._lock:
            self._cancel_pending()
            self.last_content = ""
            self.store.clear()

    def set_enabled(self, enabled: bool) -> None:
        self.store.set_enabled(enabled)

    # --- tracking ---

    def _suppressed(self, what: str) -> bool:
        if self.guard.active:
            logger.debug("Skipping %s while applying history", what)
            return True
        return False

    def track_text_edit(
        self,
        content: str,
        metadata: Optional[HistoryMetadata] = None,
        debounce_ms: Optional[int] = None,
    ) -> None:
        if self._suppressed("text edit"):
            return
        delay = self.text_debounce_ms if debounce_ms is None else debounce_ms
        with self._lock:
            channel = self._text
            if channel.handle is None:
                channel.started_at = self._clock()
            else:
                channel.handle.cancel()
            channel.contents.append(content)
            channel.metadata = metadata
            channel.generation += 1
            generation = channel.generation
            channel.handle = self.scheduler.call_later(delay / 1000.0, lambda: self._flush_text(generation))

    def track_node_move(
        self,
        node_id: str,
        content: str,
        metadata: Optional[HistoryMetadata] = None,
        debounce_ms: Optional[int] = None,
    ) -> None:
        if self._suppressed("node move"):
            return
        delay = self.move_debounce_ms if debounce_ms is None else debounce_ms
        with self._lock:
            channel = self._move
            if channel.handle is not None:
                channel.handle.cancel()
            channel.node_id = node_id
            channel.content = content
            channel.metadata = metadata
            channel.generation += 1
            generation = channel.generation
            channel.handle = self.scheduler.call_later(delay / 1000.0, lambda: self._flush_move(generation))

    def track_action(
        self,
        action_type: ActionType,
        content: str,
        description: str,
        metadata: Optional[HistoryMetadata] = None,
    ) -> None:
        if self._suppressed(f"{ActionType(action_type).value} action"):
            return
        with self._lock:
            dropped = self._cancel_pending()
            if dropped:
                logger.debug("Dropped %s pending edits in favour of %s", dropped, description)
            self.store.push_entry(action_type, description, content, metadata)
            self.last_content = content

    def track_diagram_change(
        self,
        content: str,
        metadata: Optional[HistoryMetadata] = None,
        hint: Optional[str] = None,
    ) -> None:
        if hint == "position":
            self.track_node_move("unknown", content, metadata)
            return
        if hint == "structure":
            description = "Diagram structure change"
        elif hint == "property":
            description = "Node property change"
        else:
            description = "Visual diagram change"
        self.track_action(ActionType.BULK_CHANGE, content, description, metadata)

    def track_node_operation(
        self,
        operation: str,
        node_id: str,
        content: str,
        metadata: Optional[HistoryMetadata] = None,
    ) -> None:
        if operation not in NODE_OPERATIONS:
            raise ValueError(f"unknown node operation: {operation}")
        if operation == "move":
            self.track_node_move(node_id, content, metadata)
            return
        self.track_action(
            ActionType(f"node-{operation}"),
            content,
            f"{operation.capitalize()} node {node_id}",
            metadata,
        )

    def track_edge_operation(
        self,
        operation: str,
        edge_id: str,
        content: str,
        metadata: Optional[HistoryMetadata] = None,
    ) -> None:
        if operation not in EDGE_OPERATIONS:
            raise ValueError(f"unknown edge operation: {operation}")
        self.track_action(
            ActionType(f"edge-{operation}"),
            content,
            f"{operation.capitalize()} transition {edge_id}",
            metadata,
        )

    # --- debounce channels ---

    def _flush_text(self, generation: Optional[int] = None) -> bool:
        with self._lock:
            channel = self._text
            if generation is not None and generation != channel.generation:
                return False
            if not channel.contents:
                return False
            count = len(channel.contents)
            if count > 10:
                seconds = round_half_up(self._clock() - channel.started_at)
                description = f"Multiple text edits ({seconds}s)"
            elif count > 1:
                description = "Text edits"
            else:
                description = "Text edit"
            content = channel.contents[-1]
            self.store.push_entry(ActionType.TEXT_EDIT, description, content, channel.metadata)
            logger.debug("Coalesced %s text edits into one entry", count)
            self.last_content = content
            self._text = _TextChannel(generation=channel.generation)
            return True

    def _flush_move(self, generation: Optional[int] = None) -> bool:
        with self._lock:
            channel = self._move
            if generation is not None and generation != channel.generation:
                return False
            if channel.content is None:
                return False
            self.store.push_entry(
                ActionType.NODE_MOVE, f"Move node {channel.node_id}", channel.content, channel.metadata
            )
            self.last_content = channel.content
            self._move = _MoveChannel(generation=channel.generation)
            return True

    def _cancel_pending(self) -> int:
        """Cancel both channels and drop their buffers. Returns the number of buffered edits dropped."""
        dropped = len(self._text.contents) + (1 if self._move.content is not None else 0)
        for channel in (self._text, self._move):
            if channel.handle is not None:
                channel.handle.cancel()
        self._text = _TextChannel(generation=self._text.generation + 1)
        self._move = _MoveChannel(generation=self._move.generation + 1)
        return dropped

    def flush(self) -> int:
        """Record whatever the channels hold right now. Returns the number of entries pushed."""
        with self._lock:
            for channel in (self._text, self._move):
                if channel.handle is not None:
                    channel.handle.cancel()
            pushed = int(self._flush_text()) + int(self._flush_move())
            return pushed

    def has_pending(self) -> bool:
        with self._lock:
            return bool(self._text.contents) or self._move.content is not None

    # --- undo / redo ---

    def undo(self) -> Optional[str]:
        entry = self.store.undo()
        if entry is None:
            return None
        self.last_content = entry.content
        return entry.content

    def redo(self) -> Optional[str]:
        entry = self.store.redo()
        if entry is None:
            return None
        self.last_content = entry.content
        return entry.content

    def can_undo(self) -> bool:
        return self.store.can_undo()

    def can_redo(self) -> bool:
        return self.store.can_redo()

    def get_undo_description(self) -> Optional[str]:
        return self.store.get_undo_description()

    def get_redo_description(self) -> Optional[str]:
        return self.store.get_redo_description()
