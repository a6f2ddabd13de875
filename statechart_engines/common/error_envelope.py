"""Error envelope shared by the statechart HTTP surfaces.

Every route failure is raised as an HTTPException whose detail reads:
{
  "error": {
    "code": "scxml_session.not_found",
    "message": "scxml_session s1 not found",
    "http_status": 404,
    "resource_kind": "scxml_session",
    "details": {"id": "s1"}
  }
}

Codes are ``<resource_kind>.<reason>``; command failures that happen inside a
well-formed request (unknown state, no-op reconnect) are not errors here, they
come back as a CommandResult with ``success=false``.
"""
from __future__ import annotations

from typing import Any, Dict, Literal, Optional

from fastapi import HTTPException
from pydantic import BaseModel, Field

ResourceKind = Literal["scxml_session", "scxml_history", "scxml_command"]


class ErrorDetail(BaseModel):
    code: str
    message: str
    http_status: int
    resource_kind: Optional[str] = None
    details: Dict[str, Any] = Field(default_factory=dict)


class ErrorEnvelope(BaseModel):
    error: ErrorDetail


def build_error_envelope(
    code: str,
    message: str,
    status_code: int = 400,
    resource_kind: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ErrorEnvelope:
    """Envelope without raising; http_status mirrors status_code."""
    return ErrorEnvelope(
        error=ErrorDetail(
            code=code,
            message=message,
            http_status=status_code,
            resource_kind=resource_kind,
            details=details or {},
        )
    )


def error_response(
    code: str,
    message: str,
    status_code: int = 400,
    resource_kind: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
) -> HTTPException:
    """Raise an HTTPException carrying the envelope.

    Args:
        code: "<resource_kind>.<reason>", e.g. "scxml_history.undo_unavailable"
        message: Human-readable message
        status_code: HTTP status (default 400)
        resource_kind: scxml_session, scxml_history or scxml_command
        details: Extra context such as the session id or command type
    """
    envelope = build_error_envelope(
        code=code,
        message=message,
        status_code=status_code,
        resource_kind=resource_kind,
        details=details,
    )
    raise HTTPException(status_code=status_code, detail=envelope.model_dump())


def not_found_error(resource_kind: ResourceKind, resource_id: str) -> HTTPException:
    return error_response(
        code=f"{resource_kind}.not_found",
        message=f"{resource_kind} {resource_id} not found",
        status_code=404,
        resource_kind=resource_kind,
        details={"id": resource_id},
    )


def invalid_command_error(command_type: str, message: str) -> HTTPException:
    """Unknown command type or arguments rejected by its schema (400)."""
    return error_response(
        code="scxml_command.invalid_arguments",
        message=message,
        status_code=400,
        resource_kind="scxml_command",
        details={"type": command_type},
    )


def history_unavailable_error(direction: str, session_id: str) -> HTTPException:
    """Undo or redo requested with nothing on that side of the cursor (409)."""
    return error_response(
        code=f"scxml_history.{direction}_unavailable",
        message=f"nothing to {direction}",
        status_code=409,
        resource_kind="scxml_history",
        details={"session_id": session_id},
    )
