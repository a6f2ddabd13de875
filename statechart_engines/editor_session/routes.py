"""FastAPI routes for SCXML editing sessions."""
from __future__ import annotations

from fastapi import APIRouter, Depends

from statechart_engines.common.error_envelope import (
    history_unavailable_error,
    invalid_command_error,
    not_found_error,
)
from statechart_engines.common.identity import RequestContext, get_request_context
from statechart_engines.editor_session.models import (
    CommandResponse,
    ContentUpdateRequest,
    CreateSessionRequest,
    HistoryView,
    SessionView,
)
from statechart_engines.editor_session.service import (
    EditorSessionNotFound,
    EditorSessionService,
    HistoryUnavailable,
)
from statechart_engines.scxml_commands.models import CommandEnvelope
from statechart_engines.scxml_commands.registry import InvalidCommandError

router = APIRouter(prefix="/scxml/sessions", tags=["scxml-sessions"])
service = EditorSessionService()


def _missing(session_id: str):
    not_found_error("scxml_session", session_id)


@router.post("", response_model=SessionView)
def create_session(req: CreateSessionRequest, context: RequestContext = Depends(get_request_context)):
    session = service.create_session(context, req)
    return service.view(session)


@router.get("/{session_id}", response_model=SessionView)
def get_session(session_id: str, context: RequestContext = Depends(get_request_context)):
    try:
        return service.view(service.get_session(context, session_id))
    except EditorSessionNotFound:
        _missing(session_id)


@router.delete("/{session_id}")
def delete_session(session_id: str, context: RequestContext = Depends(get_request_context)):
    try:
        service.delete_session(context, session_id)
    except EditorSessionNotFound:
        _missing(session_id)
    return {"status": "deleted"}


@router.post("/{session_id}/commands", response_model=CommandResponse)
def apply_command(
    session_id: str,
    envelope: CommandEnvelope,
    context: RequestContext = Depends(get_request_context),
):
    try:
        result, session = service.apply_command(context, session_id, envelope)
    except EditorSessionNotFound:
        _missing(session_id)
    except InvalidCommandError as exc:
        invalid_command_error(envelope.type, str(exc))
    return CommandResponse(result=result, session=service.view(session))


@router.put("/{session_id}/content", response_model=SessionView)
def update_content(
    session_id: str,
    req: ContentUpdateRequest,
    context: RequestContext = Depends(get_request_context),
):
    try:
        return service.view(service.update_content(context, session_id, req))
    except EditorSessionNotFound:
        _missing(session_id)


def _restore(session_id: str, direction: str, context: RequestContext):
    try:
        action = service.undo if direction == "undo" else service.redo
        return service.view(action(context, session_id))
    except EditorSessionNotFound:
        _missing(session_id)
    except HistoryUnavailable:
        history_unavailable_error(direction, session_id)


@router.post("/{session_id}/undo", response_model=SessionView)
def undo(session_id: str, context: RequestContext = Depends(get_request_context)):
    return _restore(session_id, "undo", context)


@router.post("/{session_id}/redo", response_model=SessionView)
def redo(session_id: str, context: RequestContext = Depends(get_request_context)):
    return _restore(session_id, "redo", context)


@router.post("/{session_id}/settled", response_model=SessionView)
def mark_settled(session_id: str, context: RequestContext = Depends(get_request_context)):
    try:
        return service.view(service.mark_settled(context, session_id))
    except EditorSessionNotFound:
        _missing(session_id)


@router.post("/{session_id}/flush", response_model=SessionView)
def flush(session_id: str, context: RequestContext = Depends(get_request_context)):
    try:
        return service.view(service.flush(context, session_id))
    except EditorSessionNotFound:
        _missing(session_id)


@router.get("/{session_id}/history", response_model=HistoryView)
def get_history(session_id: str, context: RequestContext = Depends(get_request_context)):
    try:
        return service.history(context, session_id)
    except EditorSessionNotFound:
        _missing(session_id)


@router.delete("/{session_id}/history", response_model=SessionView)
def reset_history(session_id: str, context: RequestContext = Depends(get_request_context)):
    try:
        return service.view(service.reset_history(context, session_id))
    except EditorSessionNotFound:
        _missing(session_id)
