"""Undo/redo history for SCXML editing sessions."""

from statechart_engines.scxml_history.guard import GuardState, HistoryApplyGuard
from statechart_engines.scxml_history.manager import HistoryManager
from statechart_engines.scxml_history.models import (
    ActionType,
    HistoryEntry,
    HistoryMetadata,
    HistoryState,
    ViewportState,
)
from statechart_engines.scxml_history.scheduler import ManualScheduler, Scheduler, ThreadingScheduler
from statechart_engines.scxml_history.store import HistoryStore

__all__ = [
    "ActionType",
    "GuardState",
    "HistoryApplyGuard",
    "HistoryEntry",
    "HistoryManager",
    "HistoryMetadata",
    "HistoryState",
    "HistoryStore",
    "ManualScheduler",
    "Scheduler",
    "ThreadingScheduler",
    "ViewportState",
]
