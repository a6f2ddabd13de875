"""Models for SCXML mutation commands."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CommandErrorCode(str, Enum):
    PARSE_FAILURE = "parse_failure"
    ELEMENT_NOT_FOUND = "element_not_found"
    NO_OP_REJECTED = "no_op_rejected"
    UNDO_UNAVAILABLE = "undo_unavailable"
    INVALID_ARGUMENTS = "invalid_arguments"


class CommandResult(BaseModel):
    """
    Outcome of executing or undoing a command.
    A failed result always carries the original, unmodified content.
    """
    new_content: str
    success: bool
    error: Optional[str] = None
    error_code: Optional[CommandErrorCode] = None
    affected_elements: Optional[List[str]] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StateType(str, Enum):
    STATE = "state"
    COMPOUND = "compound"
    PARALLEL = "parallel"
    FINAL = "final"


class TransitionField(str, Enum):
    EVENT = "event"
    COND = "cond"


class Waypoint(BaseModel):
    x: float
    y: float


class PositionUpdate(BaseModel):
    node_id: str
    x: float
    y: float


class CommandEnvelope(BaseModel):
    """A command addressed by type name with its raw arguments."""
    id: Optional[str] = Field(default=None, description="Client-side command ID for tracking")
    type: str = Field(..., description="Command type: rename_state, update_position, etc.")
    args: Dict[str, Any] = Field(default_factory=dict)


class ExecuteCommandRequest(BaseModel):
    content: str
    command: CommandEnvelope


# --- Per-command argument schemas ---

class RenameStateArgs(BaseModel):
    state_id: str
    new_id: str = Field(..., min_length=1)


class DeleteNodeArgs(BaseModel):
    node_ids: Union[str, List[str]]


class ChangeStateTypeArgs(BaseModel):
    node_id: str
    new_type: StateType


class ReconnectTransitionArgs(BaseModel):
    old_source_id: str
    old_target_id: str
    new_source_id: Optional[str] = None
    new_target_id: Optional[str] = None
    event: Optional[str] = None
    cond: Optional[str] = None
    old_source_handle: Optional[str] = None
    old_target_handle: Optional[str] = None
    new_source_handle: Optional[str] = None
    new_target_handle: Optional[str] = None
    index: Optional[int] = None


class UpdateTransitionFieldArgs(BaseModel):
    source_id: str
    target_id: str
    event: Optional[str] = None
    cond: Optional[str] = None
    new_value: str
    field: TransitionField
    index: Optional[int] = None


class UpdateWaypointsArgs(BaseModel):
    source_id: str
    target_id: str
    event: Optional[str] = None
    cond: Optional[str] = None
    waypoints: List[Waypoint] = Field(default_factory=list)
    index: Optional[int] = None


class UpdateTransitionHandlesArgs(BaseModel):
    source_id: str
    target_id: str
    event: Optional[str] = None
    cond: Optional[str] = None
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    index: Optional[int] = None


class UpdatePositionArgs(BaseModel):
    node_id: str
    x: float
    y: float


class UpdatePositionAndDimensionsArgs(BaseModel):
    node_id: str
    x: float
    y: float
    width: float
    height: float


class BatchUpdatePositionArgs(BaseModel):
    updates: List[PositionUpdate] = Field(..., min_length=1)


class UpdateActionsArgs(BaseModel):
    node_id: str
    entry_actions: List[str] = Field(default_factory=list)
    exit_actions: List[str] = Field(default_factory=list)
