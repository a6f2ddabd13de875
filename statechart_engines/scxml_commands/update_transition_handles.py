from __future__ import annotations

from typing import List, Optional

from statechart_engines.scxml_commands.base import (
    BaseCommand,
    reorder_attributes,
    require_transition,
    set_or_remove,
)
from statechart_engines.scxml_document.accessor import ScxmlDocument, viz_attr


class UpdateTransitionHandlesCommand(BaseCommand):
    """Set or clear the connection handles of a transition."""

    def __init__(
        self,
        source_id: str,
        target_id: str,
        event: Optional[str],
        cond: Optional[str],
        source_handle: Optional[str] = None,
        target_handle: Optional[str] = None,
        index: Optional[int] = None,
        attribute_order: Optional[List[str]] = None,
    ) -> None:
        self.source_id = source_id
        self.target_id = target_id or ""
        self.event = event
        self.cond = cond
        self.source_handle = source_handle or None
        self.target_handle = target_handle or None
        self.index = index
        self.attribute_order = attribute_order
        self.old_source_handle: Optional[str] = None
        self.old_target_handle: Optional[str] = None
        self._resolved_index: Optional[int] = None
        self._previous_order: Optional[List[str]] = None

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        source = self.require_state(doc, self.source_id, "Source state")
        position, transition = require_transition(
            source, self.source_id, self.target_id, self.event, self.cond, index=self.index, exact=True
        )

        self.old_source_handle = transition.get(viz_attr("sourceHandle"))
        self.old_target_handle = transition.get(viz_attr("targetHandle"))
        self._previous_order = list(transition.attrib)
        self._resolved_index = position

        if self.source_handle or self.target_handle:
            self.declare_viz(doc)
        set_or_remove(transition, viz_attr("sourceHandle"), self.source_handle)
        set_or_remove(transition, viz_attr("targetHandle"), self.target_handle)
        if self.attribute_order:
            reorder_attributes(transition, self.attribute_order)
        return [self.source_id]

    def _inverse(self) -> "UpdateTransitionHandlesCommand":
        if self._resolved_index is None:
            raise self.undo_unavailable("No previous handles to restore")
        inverse = UpdateTransitionHandlesCommand(
            self.source_id,
            self.target_id,
            self.event,
            self.cond,
            self.old_source_handle,
            self.old_target_handle,
            index=self._resolved_index,
            attribute_order=self._previous_order,
        )
        return self.releasing_viz(inverse)

    def describe(self) -> str:
        return (
            f"Update transition handles (source: {self.source_handle or 'none'}, "
            f"target: {self.target_handle or 'none'})"
        )
