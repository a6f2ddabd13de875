"""Entry/exit action editing.

Actions travel as plain strings:

* ``assign|<location>|<expr>`` becomes ``<assign location=".." expr=".."/>``
* ``log|<label>|<expr>`` becomes ``<log label=".." expr=".."/>``
* anything else becomes ``<executable label="Action" expr=".."/>``
"""
from __future__ import annotations

from typing import List, Optional, Sequence

from lxml import etree

from statechart_engines.scxml_commands.base import BaseCommand
from statechart_engines.scxml_document.accessor import (
    ScxmlDocument,
    append_element,
    child_elements,
    detach_element,
    local_name,
)

ENTRY_CONTAINER = "onentry"
EXIT_CONTAINER = "onexit"


def encode_action(element: etree._Element) -> str:
    """Turn one executable element back into its action string."""
    name = local_name(element)
    if name == "assign":
        return f"assign|{element.get('location', '')}|{element.get('expr', '')}"
    if name == "log":
        return f"log|{element.get('label', '')}|{element.get('expr', '')}"
    if name == "executable":
        return element.get("expr", "")
    return element.get("expr") or name


def build_action(container: etree._Element, action: str) -> etree._Element:
    parts = action.split("|")
    if parts[0] == "assign" and len(parts) >= 3:
        element = append_element(container, "assign")
        element.set("location", parts[1])
        element.set("expr", "|".join(parts[2:]))
    elif parts[0] == "log" and len(parts) >= 3:
        element = append_element(container, "log")
        element.set("label", parts[1])
        element.set("expr", "|".join(parts[2:]))
    else:
        element = append_element(container, "executable")
        element.set("label", "Action")
        element.set("expr", action)
    return element


def extract_actions(state: etree._Element, container_name: str) -> List[str]:
    """Actions of the state's own containers; nested states are not consulted."""
    actions: List[str] = []
    for container in child_elements(state, container_name):
        actions.extend(encode_action(child) for child in container if isinstance(child.tag, str))
    return actions


class UpdateActionsCommand(BaseCommand):
    def __init__(self, node_id: str, entry_actions: Sequence[str], exit_actions: Sequence[str]) -> None:
        self.node_id = node_id
        self.entry_actions = list(entry_actions)
        self.exit_actions = list(exit_actions)
        self.previous_entry_actions: Optional[List[str]] = None
        self.previous_exit_actions: Optional[List[str]] = None

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        state = self.require_state(doc, self.node_id)
        self.previous_entry_actions = extract_actions(state, ENTRY_CONTAINER)
        self.previous_exit_actions = extract_actions(state, EXIT_CONTAINER)

        self._rebuild(state, ENTRY_CONTAINER, self.entry_actions)
        self._rebuild(state, EXIT_CONTAINER, self.exit_actions)
        return [self.node_id]

    @staticmethod
    def _rebuild(state: etree._Element, container_name: str, actions: List[str]) -> None:
        for container in child_elements(state, container_name):
            detach_element(container)
        if not actions:
            return
        container = append_element(state, container_name)
        for action in actions:
            build_action(container, action)

    def _inverse(self) -> "UpdateActionsCommand":
        if self.previous_entry_actions is None or self.previous_exit_actions is None:
            raise self.undo_unavailable("No previous actions to restore")
        return UpdateActionsCommand(self.node_id, self.previous_entry_actions, self.previous_exit_actions)

    def describe(self) -> str:
        parts = []
        if self.entry_actions:
            count = len(self.entry_actions)
            parts.append(f"{count} entry action{'s' if count > 1 else ''}")
        if self.exit_actions:
            count = len(self.exit_actions)
            parts.append(f"{count} exit action{'s' if count > 1 else ''}")
        return f"Update actions: {', '.join(parts) or 'no actions'}"
