from __future__ import annotations

import copy
from typing import List, Optional

from statechart_engines.scxml_commands.base import BaseCommand, CommandFailure, require_transition, set_or_remove
from statechart_engines.scxml_commands.models import CommandErrorCode
from statechart_engines.scxml_document.accessor import (
    ScxmlDocument,
    detach_element,
    insert_element,
    transitions_of,
    viz_attr,
)


class ReconnectTransitionCommand(BaseCommand):
    """Move a transition to a new source and/or target, or swap its handles.

    ``None`` for the new source or target means unchanged. A transition moved
    to another source is appended there unless ``insert_at`` names a child
    position.
    """

    def __init__(
        self,
        old_source_id: str,
        old_target_id: str,
        new_source_id: Optional[str] = None,
        new_target_id: Optional[str] = None,
        event: Optional[str] = None,
        cond: Optional[str] = None,
        old_source_handle: Optional[str] = None,
        old_target_handle: Optional[str] = None,
        new_source_handle: Optional[str] = None,
        new_target_handle: Optional[str] = None,
        index: Optional[int] = None,
        insert_at: Optional[int] = None,
    ) -> None:
        self.old_source_id = old_source_id
        self.old_target_id = old_target_id or ""
        self.new_source_id = new_source_id
        self.new_target_id = new_target_id
        self.event = event
        self.cond = cond
        self.old_source_handle = old_source_handle
        self.old_target_handle = old_target_handle
        self.new_source_handle = new_source_handle
        self.new_target_handle = new_target_handle
        self.index = index
        self.insert_at = insert_at
        self._original_position: Optional[int] = None
        self._landed_index: Optional[int] = None

    @property
    def final_source_id(self) -> str:
        return self.new_source_id or self.old_source_id

    @property
    def final_target_id(self) -> str:
        return self.new_target_id or self.old_target_id

    @property
    def source_handle_changed(self) -> bool:
        return self.new_source_handle != self.old_source_handle

    @property
    def target_handle_changed(self) -> bool:
        return self.new_target_handle != self.old_target_handle

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        source_moves = self.final_source_id != self.old_source_id
        target_moves = self.final_target_id != self.old_target_id
        if not (source_moves or target_moves or self.source_handle_changed or self.target_handle_changed):
            raise CommandFailure(CommandErrorCode.NO_OP_REJECTED, "No change in source, target, or handles")

        old_source = self.require_state(doc, self.old_source_id, "Source state")
        _, transition = require_transition(
            old_source, self.old_source_id, self.old_target_id, self.event, self.cond, index=self.index
        )
        new_source = old_source
        if source_moves:
            new_source = self.require_state(doc, self.final_source_id, "New source state")
        if target_moves and self.final_target_id:
            self.require_state(doc, self.final_target_id, "New target state")

        clone = copy.deepcopy(transition)
        if target_moves:
            clone.set("target", self.final_target_id)
        if (self.source_handle_changed and self.new_source_handle) or (
            self.target_handle_changed and self.new_target_handle
        ):
            self.declare_viz(doc)
        if self.source_handle_changed:
            set_or_remove(clone, viz_attr("sourceHandle"), self.new_source_handle or None)
        if self.target_handle_changed:
            set_or_remove(clone, viz_attr("targetHandle"), self.new_target_handle or None)

        if source_moves:
            self._original_position = old_source.index(transition)
            detach_element(transition)
            insert_element(new_source, clone, self.insert_at)
        else:
            self._original_position = None
            old_source.replace(transition, clone)
        self._landed_index = transitions_of(new_source).index(clone)

        return [self.old_source_id, self.final_source_id, self.final_target_id]

    def _inverse(self) -> "ReconnectTransitionCommand":
        if self._landed_index is None:
            raise self.undo_unavailable("Cannot undo: reconnect has not been executed")
        inverse = ReconnectTransitionCommand(
            old_source_id=self.final_source_id,
            old_target_id=self.final_target_id,
            new_source_id=self.old_source_id,
            new_target_id=self.old_target_id,
            event=self.event,
            cond=self.cond,
            old_source_handle=self.new_source_handle,
            old_target_handle=self.new_target_handle,
            new_source_handle=self.old_source_handle,
            new_target_handle=self.old_target_handle,
            index=self._landed_index,
            insert_at=self._original_position,
        )
        return self.releasing_viz(inverse)

    def describe(self) -> str:
        source_changed = bool(self.new_source_id) and self.new_source_id != self.old_source_id
        target_changed = bool(self.new_target_id) and self.new_target_id != self.old_target_id
        if source_changed and target_changed:
            return (
                f"Reconnect transition from {self.old_source_id}→{self.old_target_id} "
                f"to {self.new_source_id}→{self.new_target_id}"
            )
        if source_changed:
            return f"Reconnect transition source from {self.old_source_id} to {self.new_source_id}"
        if target_changed:
            return f"Reconnect transition target from {self.old_target_id} to {self.new_target_id}"
        return "Reconnect transition"
