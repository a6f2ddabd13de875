from __future__ import annotations

from typing import List, Optional

from statechart_engines.scxml_commands.base import (
    BaseCommand,
    reorder_attributes,
    require_transition,
    set_or_remove,
)
from statechart_engines.scxml_commands.models import TransitionField
from statechart_engines.scxml_document.accessor import ScxmlDocument


class UpdateTransitionFieldCommand(BaseCommand):
    """Set a transition's event or cond; the other of the two is cleared.

    The inverse restores the edited field, the cleared field and the original
    attribute order.
    """

    def __init__(
        self,
        source_id: str,
        target_id: str,
        event: Optional[str],
        cond: Optional[str],
        new_value: Optional[str],
        field: TransitionField,
        index: Optional[int] = None,
        restore_other: bool = False,
        other_value: Optional[str] = None,
        attribute_order: Optional[List[str]] = None,
    ) -> None:
        self.source_id = source_id
        self.target_id = target_id or ""
        self.event = event
        self.cond = cond
        self.new_value = new_value
        self.field = TransitionField(field)
        self.index = index
        self.restore_other = restore_other
        self.other_value = other_value
        self.attribute_order = attribute_order

        self.old_value: Optional[str] = None
        self.old_other_value: Optional[str] = None
        self.resolved_index: Optional[int] = None
        self.previous_order: Optional[List[str]] = None

    @property
    def other_field(self) -> TransitionField:
        return TransitionField.COND if self.field == TransitionField.EVENT else TransitionField.EVENT

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        source = self.require_state(doc, self.source_id, "Source state")
        position, transition = require_transition(
            source, self.source_id, self.target_id, self.event, self.cond, index=self.index
        )

        self.old_value = transition.get(self.field.value)
        self.old_other_value = transition.get(self.other_field.value)
        self.previous_order = list(transition.attrib)
        self.resolved_index = position

        set_or_remove(transition, self.field.value, self.new_value)
        if self.restore_other:
            set_or_remove(transition, self.other_field.value, self.other_value)
        else:
            transition.attrib.pop(self.other_field.value, None)
        if self.attribute_order:
            reorder_attributes(transition, self.attribute_order)
        return [self.source_id]

    def _inverse(self) -> "UpdateTransitionFieldCommand":
        if self.resolved_index is None:
            raise self.undo_unavailable("No previous value to restore")
        # locate by the post-execute attributes so a stale index still falls back correctly
        event = self.new_value if self.field == TransitionField.EVENT else None
        cond = self.new_value if self.field == TransitionField.COND else None
        if self.restore_other:
            if self.field == TransitionField.EVENT:
                cond = self.other_value
            else:
                event = self.other_value
        return UpdateTransitionFieldCommand(
            self.source_id,
            self.target_id,
            event,
            cond,
            self.old_value,
            self.field,
            index=self.resolved_index,
            restore_other=True,
            other_value=self.old_other_value,
            attribute_order=self.previous_order,
        )

    def describe(self) -> str:
        label = "condition" if self.field == TransitionField.COND else "event"
        return f'Update transition {label} to "{self.new_value or ""}"'
