from __future__ import annotations

import pytest

from statechart_engines.common.identity import RequestContext
from statechart_engines.editor_session.models import ContentUpdateRequest, CreateSessionRequest
from statechart_engines.editor_session.service import (
    EditorSessionNotFound,
    EditorSessionService,
    HistoryUnavailable,
)
from statechart_engines.logging.audit import set_audit_logger
from statechart_engines.scxml_commands.models import CommandEnvelope
from statechart_engines.scxml_commands.registry import InvalidCommandError
from statechart_engines.scxml_history.models import ActionType
from statechart_engines.scxml_history.scheduler import ManualScheduler

DOC = """<scxml xmlns="http://www.w3.org/2005/07/scxml" version="1.0" initial="a"><state id="a"><transition event="go" target="b"/></state><state id="b"/></scxml>"""


@pytest.fixture
def audit_events():
    events = []

    def _capture(event):
        events.append(event)
        return {"status": "accepted"}

    set_audit_logger(_capture)
    yield events
    set_audit_logger(None)


def _service(scheduler: ManualScheduler) -> EditorSessionService:
    return EditorSessionService(
        scheduler=scheduler,
        id_fn=lambda: "s1",
        text_debounce_ms=500,
        move_debounce_ms=300,
        settle_ms=100,
    )


def _ctx(tenant: str = "t_demo") -> RequestContext:
    return RequestContext(tenant_id=tenant, env="dev")


def test_create_and_command_records_history(audit_events):
    scheduler = ManualScheduler()
    svc = _service(scheduler)
    session = svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    assert session.id == "s1"

    result, session = svc.apply_command(
        _ctx(), "s1", CommandEnvelope(type="rename_state", args={"state_id": "b", "new_id": "c"})
    )
    assert result.success is True
    assert session.content == result.new_content
    entries = session.history.store.entries
    assert entries[-1].action_type == ActionType.NODE_UPDATE
    assert entries[-1].description == 'Rename "b" to "c"'
    assert [e.action for e in audit_events] == ["scxml_session:create", "scxml_session:command"]


def test_failed_command_leaves_session_untouched():
    svc = _service(ManualScheduler())
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    result, session = svc.apply_command(
        _ctx(), "s1", CommandEnvelope(type="rename_state", args={"state_id": "zzz", "new_id": "c"})
    )
    assert result.success is False
    assert session.content == DOC
    assert len(session.history.store.entries) == 1


def test_position_commands_coalesce_as_node_move():
    scheduler = ManualScheduler()
    svc = _service(scheduler)
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    for x in (10, 20, 30):
        svc.apply_command(_ctx(), "s1", CommandEnvelope(type="update_position", args={"node_id": "a", "x": x, "y": 0}))
        scheduler.advance(0.05)
    scheduler.advance(0.3)

    session = svc.get_session(_ctx(), "s1")
    entries = session.history.store.entries
    assert len(entries) == 2
    assert entries[-1].description == "Move node a"
    assert 'viz:xywh="30,0,160,80"' in entries[-1].content


def test_undo_applies_snapshot_without_recording_it():
    scheduler = ManualScheduler()
    svc = _service(scheduler)
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    svc.apply_command(_ctx(), "s1", CommandEnvelope(type="delete_node", args={"node_ids": "b"}))

    session = svc.undo(_ctx(), "s1")
    assert session.content == DOC
    assert session.guard.active is True

    # the editor echoes the restored text back while settling
    svc.update_content(_ctx(), "s1", ContentUpdateRequest(content=DOC))
    scheduler.advance(1)
    assert session.history.can_redo() is True
    assert len(session.history.store.entries) == 2

    session = svc.redo(_ctx(), "s1")
    assert 'id="b"' not in session.content


def test_command_inside_settle_window_is_recorded_and_drops_redo():
    scheduler = ManualScheduler()
    svc = _service(scheduler)
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    svc.apply_command(_ctx(), "s1", CommandEnvelope(type="rename_state", args={"state_id": "a", "new_id": "a2"}))
    svc.undo(_ctx(), "s1")
    scheduler.advance(0.05)

    result, session = svc.apply_command(
        _ctx(), "s1", CommandEnvelope(type="delete_node", args={"node_ids": "b"})
    )
    assert result.success is True
    assert session.guard.active is False
    entries = session.history.store.entries
    assert [e.description for e in entries] == ["Initial state", 'Delete state "b"']
    assert session.history.can_redo() is False
    assert entries[-1].content == session.content
    with pytest.raises(HistoryUnavailable):
        svc.redo(_ctx(), "s1")


def test_undo_flushes_pending_text_burst_first():
    scheduler = ManualScheduler()
    svc = _service(scheduler)
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    svc.update_content(_ctx(), "s1", ContentUpdateRequest(content=DOC + " "))

    session = svc.undo(_ctx(), "s1")
    assert session.content == DOC
    assert session.history.get_redo_description() == "Redo Text edit"


def test_nothing_to_undo_raises():
    svc = _service(ManualScheduler())
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    with pytest.raises(HistoryUnavailable):
        svc.undo(_ctx(), "s1")
    with pytest.raises(HistoryUnavailable):
        svc.redo(_ctx(), "s1")


def test_sessions_are_scoped_to_tenant():
    svc = _service(ManualScheduler())
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    with pytest.raises(EditorSessionNotFound):
        svc.get_session(_ctx("t_other"), "s1")
    svc.delete_session(_ctx(), "s1")
    with pytest.raises(EditorSessionNotFound):
        svc.get_session(_ctx(), "s1")


def test_invalid_envelope_propagates():
    svc = _service(ManualScheduler())
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    with pytest.raises(InvalidCommandError):
        svc.apply_command(_ctx(), "s1", CommandEnvelope(type="bogus"))


def test_reset_history_reseeds_current_document():
    svc = _service(ManualScheduler())
    svc.create_session(_ctx(), CreateSessionRequest(content=DOC))
    svc.apply_command(_ctx(), "s1", CommandEnvelope(type="rename_state", args={"state_id": "b", "new_id": "c"}))
    session = svc.reset_history(_ctx(), "s1")
    view = svc.history(_ctx(), "s1")
    assert view.current_index == 0
    assert view.entries[0].content == session.content
    assert view.entries[0].action_type == ActionType.FILE_LOAD
