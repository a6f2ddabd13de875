"""SCXML editing sessions package."""

from statechart_engines.editor_session.service import (
    EditorSession,
    EditorSessionError,
    EditorSessionNotFound,
    EditorSessionService,
    HistoryUnavailable,
)

__all__ = [
    "EditorSession",
    "EditorSessionError",
    "EditorSessionNotFound",
    "EditorSessionService",
    "HistoryUnavailable",
]
