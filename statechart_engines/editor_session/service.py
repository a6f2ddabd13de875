"""Editing sessions: live document text plus its undo history (in-memory only)."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, Optional, Tuple
from uuid import uuid4

from statechart_engines.common.identity import RequestContext
from statechart_engines.editor_session.models import (
    ContentUpdateRequest,
    CreateSessionRequest,
    HistoryView,
    SessionView,
)
from statechart_engines.logging.audit import emit_audit_event
from statechart_engines.scxml_commands.models import CommandEnvelope, CommandResult
from statechart_engines.scxml_commands.registry import build_command
from statechart_engines.scxml_history.guard import HistoryApplyGuard
from statechart_engines.scxml_history.manager import HistoryManager
from statechart_engines.scxml_history.scheduler import Scheduler, ThreadingScheduler
from statechart_engines.scxml_history.store import HistoryStore

logger = logging.getLogger(__name__)


class EditorSessionError(Exception):
    """Base editor session error."""


class EditorSessionNotFound(EditorSessionError):
    """Raised when a session is missing or belongs to another tenant/env."""


class HistoryUnavailable(EditorSessionError):
    """Raised when there is nothing to undo or redo."""

    def __init__(self, direction: str) -> None:
        super().__init__(f"nothing to {direction}")
        self.direction = direction


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EditorSession:
    id: str
    tenant_id: str
    env: str
    content: str
    history: HistoryManager
    created_at: datetime
    updated_at: datetime

    @property
    def guard(self) -> HistoryApplyGuard:
        return self.history.guard


class EditorSessionService:
    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        id_fn: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
        max_size: Optional[int] = None,
        text_debounce_ms: Optional[int] = None,
        move_debounce_ms: Optional[int] = None,
        settle_ms: Optional[int] = None,
    ) -> None:
        self._scheduler = scheduler or ThreadingScheduler()
        self._id_fn = id_fn or (lambda: uuid4().hex)
        self._clock = clock or _utc_now
        self._max_size = max_size
        self._text_debounce_ms = text_debounce_ms
        self._move_debounce_ms = move_debounce_ms
        self._settle_ms = settle_ms
        self._sessions: Dict[Tuple[str, str, str], EditorSession] = {}
        self._lock = threading.RLock()

    # --- lookup ---

    def _key(self, context: RequestContext, session_id: str) -> Tuple[str, str, str]:
        return (context.tenant_id, context.env or "dev", session_id)

    def get_session(self, context: RequestContext, session_id: str) -> EditorSession:
        with self._lock:
            session = self._sessions.get(self._key(context, session_id))
        if session is None:
            raise EditorSessionNotFound(session_id)
        return session

    def view(self, session: EditorSession) -> SessionView:
        history = session.history
        return SessionView(
            session_id=session.id,
            tenant_id=session.tenant_id,
            env=session.env,
            content=session.content,
            can_undo=history.can_undo(),
            can_redo=history.can_redo(),
            undo_description=history.get_undo_description(),
            redo_description=history.get_redo_description(),
            applying_history=session.guard.active,
            has_pending=history.has_pending(),
            created_at=session.created_at,
            updated_at=session.updated_at,
        )

    # --- lifecycle ---

    def create_session(self, context: RequestContext, req: CreateSessionRequest) -> EditorSession:
        guard = HistoryApplyGuard(scheduler=self._scheduler, settle_ms=self._settle_ms)
        manager = HistoryManager(
            store=HistoryStore(max_size=self._max_size),
            scheduler=self._scheduler,
            text_debounce_ms=self._text_debounce_ms,
            move_debounce_ms=self._move_debounce_ms,
            guard=guard,
        )
        manager.initialize(req.content, req.description)
        now = self._clock()
        session = EditorSession(
            id=self._id_fn(),
            tenant_id=context.tenant_id,
            env=context.env or "dev",
            content=req.content,
            history=manager,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._sessions[self._key(context, session.id)] = session
        emit_audit_event(
            context,
            action="scxml_session:create",
            surface="scxml_session",
            metadata={"session_id": session.id},
        )
        return session

    def delete_session(self, context: RequestContext, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(self._key(context, session_id), None)
        if session is None:
            raise EditorSessionNotFound(session_id)
        session.history.clear()
        session.guard.release()
        emit_audit_event(
            context,
            action="scxml_session:delete",
            surface="scxml_session",
            metadata={"session_id": session_id},
        )

    # --- edits ---

    def apply_command(
        self,
        context: RequestContext,
        session_id: str,
        envelope: CommandEnvelope,
    ) -> Tuple[CommandResult, EditorSession]:
        session = self.get_session(context, session_id)
        command, spec, args = build_command(envelope)
        result = command.execute(session.content)
        if not result.success:
            logger.info("Command %s rejected on session %s: %s", envelope.type, session_id, result.error)
            return result, session

        session.content = result.new_content
        session.updated_at = self._clock()
        # a command is a fresh edit even inside the settle window after undo/redo
        session.guard.release()
        if spec.moved_node is not None:
            session.history.track_node_move(spec.moved_node(args), result.new_content)
        else:
            session.history.track_action(spec.action_type, result.new_content, command.describe())
        emit_audit_event(
            context,
            action="scxml_session:command",
            surface="scxml_session",
            metadata={
                "session_id": session_id,
                "command_id": envelope.id,
                "type": envelope.type,
                "affected": result.affected_elements or [],
            },
        )
        return result, session

    def update_content(
        self,
        context: RequestContext,
        session_id: str,
        req: ContentUpdateRequest,
    ) -> EditorSession:
        session = self.get_session(context, session_id)
        session.content = req.content
        session.updated_at = self._clock()
        session.history.track_text_edit(req.content, req.metadata)
        return session

    # --- history ---

    def undo(self, context: RequestContext, session_id: str) -> EditorSession:
        return self._restore(context, session_id, "undo")

    def redo(self, context: RequestContext, session_id: str) -> EditorSession:
        return self._restore(context, session_id, "redo")

    def _restore(self, context: RequestContext, session_id: str, direction: str) -> EditorSession:
        session = self.get_session(context, session_id)
        history = session.history
        # a burst still on a debounce channel is a step of its own
        history.flush()
        content = history.undo() if direction == "undo" else history.redo()
        if content is None:
            raise HistoryUnavailable(direction)
        session.guard.enter()
        session.content = content
        session.updated_at = self._clock()
        emit_audit_event(
            context,
            action=f"scxml_session:{direction}",
            surface="scxml_session",
            metadata={"session_id": session_id},
        )
        return session

    def mark_settled(self, context: RequestContext, session_id: str) -> EditorSession:
        session = self.get_session(context, session_id)
        session.guard.release()
        return session

    def flush(self, context: RequestContext, session_id: str) -> EditorSession:
        session = self.get_session(context, session_id)
        session.history.flush()
        return session

    def history(self, context: RequestContext, session_id: str) -> HistoryView:
        session = self.get_session(context, session_id)
        state = session.history.store.snapshot()
        return HistoryView(
            session_id=session.id,
            current_index=state.current_index,
            max_size=state.max_size,
            is_enabled=state.is_enabled,
            entries=state.entries,
        )

    def reset_history(self, context: RequestContext, session_id: str) -> EditorSession:
        """Drop all history and re-seed it with the current document."""
        session = self.get_session(context, session_id)
        session.history.initialize(session.content)
        emit_audit_event(
            context,
            action="scxml_session:history_reset",
            surface="scxml_session",
            metadata={"session_id": session_id},
        )
        return session
