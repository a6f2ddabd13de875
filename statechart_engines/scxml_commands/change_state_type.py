from __future__ import annotations

import logging
from typing import List, Optional

from lxml import etree

from statechart_engines.scxml_commands.base import BaseCommand, collect_state_ids, purge_references
from statechart_engines.scxml_commands.models import StateType
from statechart_engines.scxml_document.accessor import (
    ScxmlDocument,
    child_states,
    detach_element,
    local_name,
    transitions_of,
)

logger = logging.getLogger(__name__)

_TYPE_BY_TAG = {
    "final": StateType.FINAL,
    "parallel": StateType.PARALLEL,
}


class ChangeStateTypeCommand(BaseCommand):
    """Change the kind of a state.

    The element tag itself is left alone. Converting to ``final`` strips the
    node's outgoing transitions and nested states; undo only restores the type
    intent, not the stripped content.
    """

    def __init__(self, node_id: str, new_type: StateType) -> None:
        self.node_id = node_id
        self.new_type = StateType(new_type)
        self.old_type: Optional[StateType] = None
        self.stripped_transitions: List[str] = []
        self.stripped_children: List[str] = []

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        element = self.require_state(doc, self.node_id)
        self.old_type = _current_type(element)
        self.stripped_transitions = []
        self.stripped_children = []

        if self.new_type == StateType.FINAL:
            self._strip_for_final(doc, element)
        elif self.new_type == StateType.PARALLEL:
            logger.warning("Conversion of %s to parallel is not supported; document left unchanged", self.node_id)
        return [self.node_id]

    def _strip_for_final(self, doc: ScxmlDocument, element: etree._Element) -> None:
        removed = set()
        for transition in transitions_of(element):
            self.stripped_transitions.append(_fragment(transition))
            detach_element(transition)
        for child in child_states(element):
            removed |= collect_state_ids(child)
            self.stripped_children.append(_fragment(child))
            detach_element(child)
        if "initial" in element.attrib:
            del element.attrib["initial"]
        purge_references(doc, removed)

    def _inverse(self) -> "ChangeStateTypeCommand":
        if self.old_type is None:
            raise self.undo_unavailable("Cannot undo: state type change has not been executed")
        return ChangeStateTypeCommand(self.node_id, self.old_type)

    def describe(self) -> str:
        return f'Change state type to "{self.new_type.value}"'


def _current_type(element: etree._Element) -> StateType:
    tag = local_name(element)
    if tag in _TYPE_BY_TAG:
        return _TYPE_BY_TAG[tag]
    return StateType.COMPOUND if child_states(element) else StateType.STATE


def _fragment(element: etree._Element) -> str:
    return etree.tostring(element, encoding="unicode", with_tail=False)
