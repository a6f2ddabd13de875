from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from statechart_engines.scxml_commands.models import CommandResult
from statechart_engines.scxml_history.models import HistoryEntry, HistoryMetadata


class CreateSessionRequest(BaseModel):
    content: str
    description: str = "Initial state"


class ContentUpdateRequest(BaseModel):
    content: str
    metadata: Optional[HistoryMetadata] = None


class SessionView(BaseModel):
    session_id: str
    tenant_id: str
    env: str
    content: str
    can_undo: bool
    can_redo: bool
    undo_description: Optional[str] = None
    redo_description: Optional[str] = None
    applying_history: bool = False
    has_pending: bool = False
    created_at: datetime
    updated_at: datetime


class CommandResponse(BaseModel):
    result: CommandResult
    session: SessionView


class HistoryView(BaseModel):
    session_id: str
    current_index: int
    max_size: int
    is_enabled: bool
    entries: List[HistoryEntry] = Field(default_factory=list)
