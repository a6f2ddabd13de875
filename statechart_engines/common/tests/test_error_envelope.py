from __future__ import annotations

import pytest
from fastapi import HTTPException

from statechart_engines.common.error_envelope import (
    build_error_envelope,
    error_response,
    history_unavailable_error,
    invalid_command_error,
    not_found_error,
)
from statechart_engines.common.identity import RequestContext, RequestContextBuilder


def test_build_error_envelope_shape():
    envelope = build_error_envelope("scxml_command.invalid_arguments", "bad", resource_kind="scxml_command")
    assert envelope.model_dump() == {
        "error": {
            "code": "scxml_command.invalid_arguments",
            "message": "bad",
            "http_status": 400,
            "resource_kind": "scxml_command",
            "details": {},
        }
    }


def test_error_response_raises_http_exception():
    with pytest.raises(HTTPException) as exc:
        error_response("scxml_history.undo_unavailable", "nothing to undo", status_code=409)
    assert exc.value.status_code == 409
    assert exc.value.detail["error"]["code"] == "scxml_history.undo_unavailable"


def test_not_found_error_uses_resource_kind():
    with pytest.raises(HTTPException) as exc:
        not_found_error("scxml_session", "abc")
    assert exc.value.status_code == 404
    assert exc.value.detail["error"]["details"] == {"id": "abc"}


def test_history_and_command_helpers_name_their_resource():
    with pytest.raises(HTTPException) as exc:
        history_unavailable_error("redo", "s1")
    error = exc.value.detail["error"]
    assert exc.value.status_code == 409
    assert error["code"] == "scxml_history.redo_unavailable"
    assert error["details"] == {"session_id": "s1"}

    with pytest.raises(HTTPException) as exc:
        invalid_command_error("bogus", "Unknown command type: bogus")
    assert exc.value.status_code == 400
    assert exc.value.detail["error"]["resource_kind"] == "scxml_command"
    assert exc.value.detail["error"]["details"] == {"type": "bogus"}


def test_request_context_validates_tenant():
    with pytest.raises(ValueError):
        RequestContext(tenant_id="Bad Tenant")
    ctx = RequestContextBuilder.from_headers({"x-tenant-id": "t_demo", "X-User-Id": "u1"})
    assert ctx.tenant_id == "t_demo"
    assert ctx.user_id == "u1"
    assert ctx.request_id
