from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Union

from statechart_engines.scxml_commands.base import (
    BaseCommand,
    CommandFailure,
    collect_state_ids,
    purge_references,
)
from statechart_engines.scxml_commands.models import CommandErrorCode, CommandResult
from statechart_engines.scxml_document.accessor import ScxmlDocument, detach_element

logger = logging.getLogger(__name__)


class DeleteNodeCommand(BaseCommand):
    """Delete one or more states together with every transition pointing at them.

    Undo restores the full document captured before the delete.
    """

    def __init__(self, node_ids: Union[str, Sequence[str]]) -> None:
        if isinstance(node_ids, str):
            node_ids = [node_ids]
        self.node_ids: List[str] = list(node_ids)
        self.previous_content: Optional[str] = None

    def execute(self, scxml_content: str) -> CommandResult:
        result = super().execute(scxml_content)
        if result.success:
            self.previous_content = scxml_content
        return result

    def undo(self, scxml_content: str) -> CommandResult:
        if self.previous_content is None:
            return self.failure(
                "Cannot undo: no previous content captured",
                scxml_content,
                CommandErrorCode.UNDO_UNAVAILABLE,
            )
        return self.success(self.previous_content, list(self.node_ids))

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        if not self.node_ids:
            raise CommandFailure(CommandErrorCode.INVALID_ARGUMENTS, "No node ids given")
        targets = [self.require_state(doc, node_id) for node_id in self.node_ids]

        removed = set()
        for element in targets:
            removed |= collect_state_ids(element)

        for element in targets:
            detach_element(element)

        dropped = purge_references(doc, removed)
        logger.debug("Deleted %s (nested ids %s); dropped %s transitions", self.node_ids, sorted(removed), dropped)
        return list(self.node_ids)

    def _inverse(self) -> BaseCommand:
        raise self.undo_unavailable("Delete is undone from its captured snapshot")

    def describe(self) -> str:
        if len(self.node_ids) == 1:
            return f'Delete state "{self.node_ids[0]}"'
        return f"Delete {len(self.node_ids)} states"
