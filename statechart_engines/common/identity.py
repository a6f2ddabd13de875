"""Request identity helpers and the FastAPI context builder."""
from __future__ import annotations

import re
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional

from fastapi import Header, HTTPException

from statechart_engines.config import runtime_config

VALID_TENANT_PATTERN = re.compile(r"^t_[a-z0-9_-]+$")


@dataclass
class RequestContext:
    tenant_id: str
    env: Optional[str] = None
    user_id: Optional[str] = None
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def __post_init__(self) -> None:
        if not self.tenant_id:
            raise ValueError("tenant_id is required")
        if not VALID_TENANT_PATTERN.match(self.tenant_id):
            raise ValueError(
                f"tenant_id must match pattern ^t_[a-z0-9_-]+$, got: {self.tenant_id}"
            )
        if not self.request_id:
            raise ValueError("request_id is required")
        self.env = (self.env or runtime_config.get_env() or "dev").lower()


class RequestContextBuilder:
    """Builder for RequestContext from HTTP headers."""

    @classmethod
    def from_headers(cls, headers: Dict[str, str]) -> RequestContext:
        normalized = {key.lower(): value for key, value in headers.items()}
        tenant_id = normalized.get("x-tenant-id")
        if not tenant_id:
            raise ValueError("X-Tenant-Id header is required")
        return RequestContext(
            tenant_id=tenant_id,
            user_id=normalized.get("x-user-id"),
            request_id=normalized.get("x-request-id") or uuid.uuid4().hex,
        )


async def get_request_context(
    header_tenant: Optional[str] = Header(default=None, alias="X-Tenant-Id"),
    header_user: Optional[str] = Header(default=None, alias="X-User-Id"),
    header_request_id: Optional[str] = Header(default=None, alias="X-Request-Id"),
) -> RequestContext:
    headers: Dict[str, str] = {}
    if header_tenant:
        headers["X-Tenant-Id"] = header_tenant
    if header_user:
        headers["X-User-Id"] = header_user
    if header_request_id:
        headers["X-Request-Id"] = header_request_id

    try:
        return RequestContextBuilder.from_headers(headers)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
