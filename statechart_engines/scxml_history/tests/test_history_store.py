from __future__ import annotations

from statechart_engines.scxml_history.models import ActionType, HistoryMetadata
from statechart_engines.scxml_history.store import HistoryStore


def _seeded(count: int = 3, max_size: int = 50) -> HistoryStore:
    store = HistoryStore(max_size=max_size)
    store.push_entry(ActionType.FILE_LOAD, "Initial state", "v0")
    for i in range(1, count):
        store.push_entry(ActionType.NODE_UPDATE, f"edit {i}", f"v{i}")
    return store


def test_new_store_is_empty():
    store = HistoryStore(max_size=5)
    assert store.current_index == -1
    assert store.can_undo() is False
    assert store.can_redo() is False
    assert store.undo() is None
    assert store.redo() is None
    assert store.get_undo_description() is None


def test_undo_returns_previous_snapshot_with_undone_action_type():
    store = _seeded()
    assert store.get_undo_description() == "Undo edit 2"

    entry = store.undo()
    assert entry.content == "v1"
    assert entry.action_type == ActionType.NODE_UPDATE
    assert store.current_index == 1
    assert store.get_redo_description() == "Redo edit 2"

    entry = store.undo()
    assert entry.content == "v0"
    assert entry.action_type == ActionType.NODE_UPDATE
    assert store.can_undo() is False
    assert store.undo() is None


def test_redo_walks_forward_until_end():
    store = _seeded()
    store.undo()
    store.undo()
    assert store.redo().content == "v1"
    assert store.redo().content == "v2"
    assert store.redo() is None
    assert store.can_redo() is False


def test_push_after_undo_drops_redo_branch():
    store = _seeded()
    store.undo()
    store.push_entry(ActionType.TEXT_EDIT, "Text edit", "branch")
    assert [e.content for e in store.entries] == ["v0", "v1", "branch"]
    assert store.can_redo() is False


def test_evicts_oldest_beyond_max_size():
    store = _seeded(count=5, max_size=3)
    assert [e.content for e in store.entries] == ["v2", "v3", "v4"]
    assert store.current_index == 2


def test_disabled_store_ignores_pushes():
    store = _seeded(count=1)
    store.set_enabled(False)
    assert store.push_entry(ActionType.TEXT_EDIT, "Text edit", "ignored") is None
    assert len(store.entries) == 1
    store.set_enabled(True)
    store.push_entry(ActionType.TEXT_EDIT, "Text edit", "kept")
    assert len(store.entries) == 2


def test_entries_serialize_with_camel_case_and_metadata():
    store = HistoryStore(max_size=5, clock=lambda: 12.5)
    entry = store.push_entry(
        ActionType.NODE_MOVE,
        "Move node a",
        "<scxml/>",
        HistoryMetadata(active_node_id="a", viewport_state={"x": 1, "y": 2, "zoom": 1.5}, custom="kept"),
    )
    dumped = entry.model_dump(by_alias=True, mode="json")
    assert dumped["actionType"] == "node-move"
    assert dumped["timestamp"] == 12500
    assert dumped["metadata"]["activeNodeId"] == "a"
    assert dumped["metadata"]["viewportState"]["zoom"] == 1.5
    assert dumped["metadata"]["custom"] == "kept"
    assert len(entry.id) == 32


def test_snapshot_and_clear():
    store = _seeded()
    state = store.snapshot()
    assert state.current_index == 2
    assert len(state.entries) == 3
    store.clear()
    assert store.snapshot().entries == []
    assert store.current_index == -1
