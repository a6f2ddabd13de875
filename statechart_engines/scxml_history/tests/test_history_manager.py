from __future__ import annotations

import time

import pytest

from statechart_engines.scxml_history.guard import HistoryApplyGuard
from statechart_engines.scxml_history.manager import HistoryManager
from statechart_engines.scxml_history.models import ActionType
from statechart_engines.scxml_history.scheduler import ManualScheduler, ThreadingScheduler
from statechart_engines.scxml_history.store import HistoryStore


def _manager(scheduler: ManualScheduler) -> HistoryManager:
    return HistoryManager(
        store=HistoryStore(max_size=50),
        scheduler=scheduler,
        text_debounce_ms=500,
        move_debounce_ms=300,
        guard=HistoryApplyGuard(scheduler=scheduler, settle_ms=100),
    )


def test_initialize_seeds_file_load_entry():
    manager = _manager(ManualScheduler())
    manager.initialize("v0")
    entries = manager.store.entries
    assert len(entries) == 1
    assert entries[0].action_type == ActionType.FILE_LOAD
    assert entries[0].description == "Initial state"

    manager.initialize("")
    assert manager.store.entries == []


def test_text_burst_coalesces_into_one_entry_after_quiet_period():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)
    manager.initialize("v0")

    for i in range(1, 6):
        manager.track_text_edit(f"v{i}")
        scheduler.advance(0.04)

    # 40ms after the last call nothing has been recorded yet
    assert len(manager.store.entries) == 1
    scheduler.advance(0.45)
    assert len(manager.store.entries) == 1
    scheduler.advance(0.02)

    entries = manager.store.entries
    assert len(entries) == 2
    assert entries[-1].action_type == ActionType.TEXT_EDIT
    assert entries[-1].content == "v5"
    assert entries[-1].description == "Text edits"


def test_text_edit_descriptions():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)
    manager.track_text_edit("one")
    scheduler.advance(1)
    assert manager.store.entries[-1].description == "Text edit"

    for i in range(12):
        manager.track_text_edit(f"burst {i}")
        scheduler.advance(0.25)
    scheduler.advance(1)
    assert manager.store.entries[-1].description == "Multiple text edits (3s)"


def test_node_moves_debounce_on_their_own_channel():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)
    manager.initialize("v0")

    manager.track_text_edit("typed")
    manager.track_node_move("a", "moved-1")
    manager.track_node_move("a", "moved-2")
    scheduler.advance(0.31)

    entries = manager.store.entries
    assert entries[-1].action_type == ActionType.NODE_MOVE
    assert entries[-1].description == "Move node a"
    assert entries[-1].content == "moved-2"

    scheduler.advance(0.2)
    assert manager.store.entries[-1].content == "typed"


def test_immediate_action_drops_pending_channels():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)
    manager.initialize("v0")

    manager.track_text_edit("typing")
    manager.track_node_move("a", "dragging")
    manager.track_action(ActionType.NODE_DELETE, "deleted", "Delete state \"a\"")
    scheduler.advance(5)

    assert [e.content for e in manager.store.entries] == ["v0", "deleted"]
    assert manager.has_pending() is False


def test_diagram_change_hints():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)

    manager.track_diagram_change("s", hint="structure")
    manager.track_diagram_change("p", hint="property")
    manager.track_diagram_change("v")
    descriptions = [e.description for e in manager.store.entries]
    assert descriptions == ["Diagram structure change", "Node property change", "Visual diagram change"]
    assert {e.action_type for e in manager.store.entries} == {ActionType.BULK_CHANGE}

    manager.track_diagram_change("pos", hint="position")
    scheduler.advance(0.3)
    assert manager.store.entries[-1].description == "Move node unknown"


def test_node_and_edge_operations():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)

    manager.track_node_operation("add", "s1", "c1")
    manager.track_edge_operation("delete", "s1-s2", "c2")
    manager.track_node_operation("move", "s1", "c3")
    assert manager.has_pending() is True
    assert manager.flush() == 1

    entries = manager.store.entries
    assert [(e.action_type, e.description) for e in entries] == [
        (ActionType.NODE_ADD, "Add node s1"),
        (ActionType.EDGE_DELETE, "Delete transition s1-s2"),
        (ActionType.NODE_MOVE, "Move node s1"),
    ]
    # the cancelled timer must not push a second copy
    scheduler.advance(1)
    assert len(manager.store.entries) == 3

    with pytest.raises(ValueError):
        manager.track_node_operation("explode", "s1", "c4")


def test_undo_redo_return_contents():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)
    manager.initialize("v0")
    manager.track_action(ActionType.NODE_UPDATE, "v1", "Rename")

    assert manager.get_undo_description() == "Undo Rename"
    assert manager.undo() == "v0"
    assert manager.undo() is None
    assert manager.get_redo_description() == "Redo Rename"
    assert manager.redo() == "v1"
    assert manager.redo() is None


def test_tracking_is_suppressed_while_applying_history():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)
    manager.initialize("v0")
    manager.track_action(ActionType.NODE_UPDATE, "v1", "Rename")

    restored = manager.undo()
    manager.guard.enter()
    manager.track_text_edit(restored)
    manager.track_diagram_change(restored, hint="structure")
    manager.track_node_move("a", restored)
    scheduler.advance(1)

    assert len(manager.store.entries) == 2
    assert manager.can_redo() is True


def test_clear_cancels_pending_work():
    scheduler = ManualScheduler()
    manager = _manager(scheduler)
    manager.initialize("v0")
    manager.track_text_edit("v1")
    manager.clear()
    scheduler.advance(1)
    assert manager.store.entries == []


def test_real_timer_flushes_text_burst():
    scheduler = ThreadingScheduler()
    manager = HistoryManager(
        store=HistoryStore(max_size=10),
        scheduler=scheduler,
        text_debounce_ms=50,
        guard=HistoryApplyGuard(scheduler=scheduler, settle_ms=10),
    )
    manager.initialize("v0")
    manager.track_text_edit("v1")
    manager.track_text_edit("v2")

    deadline = time.monotonic() + 2
    while len(manager.store.entries) < 2 and time.monotonic() < deadline:
        time.sleep(0.01)
    assert [e.content for e in manager.store.entries] == ["v0", "v2"]
