"""Stateless command execution over HTTP."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from statechart_engines.common.error_envelope import invalid_command_error
from statechart_engines.common.identity import RequestContext, get_request_context
from statechart_engines.scxml_commands.models import CommandResult, ExecuteCommandRequest
from statechart_engines.scxml_commands.registry import InvalidCommandError, execute_envelope

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scxml/commands", tags=["scxml-commands"])


@router.post("/execute", response_model=CommandResult, response_model_by_alias=True)
def execute_command(
    req: ExecuteCommandRequest,
    context: RequestContext = Depends(get_request_context),
):
    try:
        result = execute_envelope(req.content, req.command)
    except InvalidCommandError as exc:
        invalid_command_error(req.command.type, str(exc))
    if not result.success:
        logger.info("Command %s failed for tenant %s: %s", req.command.type, context.tenant_id, result.error)
    return result
