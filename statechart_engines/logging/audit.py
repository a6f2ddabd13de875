"""Audit helper for recording editor session mutations."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, Field

from statechart_engines.common.identity import RequestContext

logger = logging.getLogger(__name__)
_audit_stream = logging.getLogger("statechart_engines.audit")


class AuditEvent(BaseModel):
    action: str
    tenant_id: str
    env: str
    surface: str = "audit"
    actor_type: str = "system"
    user_id: Optional[str] = None
    request_id: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = Field(default_factory=dict)


AuditLogger = Callable[[AuditEvent], Dict[str, Any]]


def default_audit_logger(event: AuditEvent) -> Dict[str, Any]:
    """Emit one structured JSON line on the audit logger."""
    _audit_stream.info(json.dumps(event.model_dump(mode="json"), sort_keys=True))
    return {"status": "accepted", "tenantId": event.tenant_id}


_audit_logger: AuditLogger = default_audit_logger


def set_audit_logger(audit_logger: Optional[AuditLogger]) -> None:
    global _audit_logger
    _audit_logger = audit_logger or default_audit_logger


def emit_audit_event(
    ctx: RequestContext,
    action: str,
    surface: str = "audit",
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    actor_type = "human" if ctx.user_id else "system"
    event = AuditEvent(
        action=action,
        tenant_id=ctx.tenant_id,
        env=ctx.env or "dev",
        surface=surface,
        actor_type=actor_type,
        user_id=ctx.user_id,
        request_id=ctx.request_id,
        metadata=dict(metadata or {}),
    )
    result = _audit_logger(event)
    if not result or result.get("status") != "accepted":
        detail = (result or {}).get("error", "audit persistence failed")
        if os.environ.get("AUDIT_STRICT") == "1":
            raise RuntimeError(detail)
        logger.warning("audit persistence failed: %s", detail)
