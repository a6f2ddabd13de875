from __future__ import annotations

import time
import uuid
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ActionType(str, Enum):
    TEXT_EDIT = "text-edit"
    NODE_ADD = "node-add"
    NODE_DELETE = "node-delete"
    NODE_MOVE = "node-move"
    NODE_RESIZE = "node-resize"
    NODE_UPDATE = "node-update"
    EDGE_ADD = "edge-add"
    EDGE_DELETE = "edge-delete"
    EDGE_UPDATE = "edge-update"
    BULK_CHANGE = "bulk-change"
    FILE_LOAD = "file-load"


class ViewportState(BaseModel):
    x: float
    y: float
    zoom: float


class HistoryMetadata(BaseModel):
    """Editor context captured with a history entry."""
    cursor_position: Optional[int] = None
    selection_start: Optional[int] = None
    selection_end: Optional[int] = None
    viewport_state: Optional[ViewportState] = None
    active_node_id: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


def _now_ms() -> int:
    return int(time.time() * 1000)


class HistoryEntry(BaseModel):
    """Full-document snapshot recorded by the history store."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: int = Field(default_factory=_now_ms, description="Epoch milliseconds")
    action_type: ActionType
    description: str
    content: str
    metadata: Optional[HistoryMetadata] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class HistoryState(BaseModel):
    entries: List[HistoryEntry] = Field(default_factory=list)
    current_index: int = -1
    max_size: int = 50
    is_enabled: bool = True

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
