from __future__ import annotations

from typing import List, Optional

from statechart_engines.scxml_commands.base import BaseCommand, CommandFailure
from statechart_engines.scxml_commands.models import CommandErrorCode
from statechart_engines.scxml_document.accessor import ScxmlDocument, find_state_element


class RenameStateCommand(BaseCommand):
    """Rename a state and rewrite every target/initial that referenced it."""

    def __init__(self, state_id: str, new_id: str) -> None:
        self.state_id = state_id
        self.new_id = new_id
        self._renamed: Optional[bool] = None

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        if not self.new_id:
            raise CommandFailure(CommandErrorCode.INVALID_ARGUMENTS, "New state id must not be empty")
        element = self.require_state(doc, self.state_id)
        if self.new_id != self.state_id and find_state_element(doc, self.new_id) is not None:
            raise CommandFailure(CommandErrorCode.INVALID_ARGUMENTS, f"State id already in use: {self.new_id}")

        element.set("id", self.new_id)
        for node in doc.root.iter():
            if not isinstance(node.tag, str):
                continue
            if node.get("target") == self.state_id:
                node.set("target", self.new_id)
            if node.get("initial") == self.state_id:
                node.set("initial", self.new_id)

        self._renamed = True
        return [self.state_id, self.new_id]

    def _inverse(self) -> "RenameStateCommand":
        if not self._renamed:
            raise self.undo_unavailable("Cannot undo: rename has not been executed")
        return RenameStateCommand(self.new_id, self.state_id)

    def describe(self) -> str:
        return f'Rename "{self.state_id}" to "{self.new_id}"'
