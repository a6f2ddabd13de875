"""Commands writing the ``viz:xywh`` geometry of state nodes."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Union

from statechart_engines.scxml_commands.base import BaseCommand, CommandFailure
from statechart_engines.scxml_commands.models import CommandErrorCode, PositionUpdate
from statechart_engines.scxml_document.accessor import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    Geometry,
    ScxmlDocument,
    read_geometry,
    round_half_up,
    viz_attr,
    write_geometry,
)


class _ClearGeometryCommand(BaseCommand):
    """Inverse for nodes that had no geometry before the forward edit."""

    def __init__(self, node_id: str) -> None:
        self.node_id = node_id

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        element = self.require_state(doc, self.node_id)
        element.attrib.pop(viz_attr("xywh"), None)
        return [self.node_id]

    def _inverse(self) -> BaseCommand:
        raise self.undo_unavailable("Clearing geometry cannot be undone")

    def describe(self) -> str:
        return f'Clear geometry of "{self.node_id}"'


class UpdatePositionCommand(BaseCommand):
    def __init__(self, node_id: str, x: float, y: float) -> None:
        self.node_id = node_id
        self.new_x = x
        self.new_y = y
        self.previous: Optional[Geometry] = None
        self._executed = False

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        element = self.require_state(doc, self.node_id)
        self.previous = read_geometry(element)
        width = self.previous.width if self.previous else DEFAULT_WIDTH
        height = self.previous.height if self.previous else DEFAULT_HEIGHT
        self.declare_viz(doc)
        write_geometry(element, self.new_x, self.new_y, width, height)
        self._executed = True
        return [self.node_id]

    def _inverse(self) -> BaseCommand:
        if not self._executed:
            raise self.undo_unavailable("No previous position to restore")
        if self.previous is None:
            return self.releasing_viz(_ClearGeometryCommand(self.node_id))
        return self.releasing_viz(UpdatePositionCommand(self.node_id, self.previous.x, self.previous.y))

    def describe(self) -> str:
        return f'Move "{self.node_id}" to ({round_half_up(self.new_x)}, {round_half_up(self.new_y)})'


class UpdatePositionAndDimensionsCommand(BaseCommand):
    def __init__(self, node_id: str, x: float, y: float, width: float, height: float) -> None:
        self.node_id = node_id
        self.new_x = x
        self.new_y = y
        self.new_width = width
        self.new_height = height
        self.previous: Optional[Geometry] = None
        self._executed = False

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        element = self.require_state(doc, self.node_id)
        self.previous = read_geometry(element)
        self.declare_viz(doc)
        write_geometry(element, self.new_x, self.new_y, self.new_width, self.new_height)
        self._executed = True
        return [self.node_id]

    def _inverse(self) -> BaseCommand:
        if not self._executed:
            raise self.undo_unavailable("No previous geometry to restore")
        if self.previous is None:
            return self.releasing_viz(_ClearGeometryCommand(self.node_id))
        prev = self.previous
        return self.releasing_viz(
            UpdatePositionAndDimensionsCommand(self.node_id, prev.x, prev.y, prev.width, prev.height)
        )

    def describe(self) -> str:
        return (
            f'Resize and move "{self.node_id}" to ({round_half_up(self.new_x)}, {round_half_up(self.new_y)}) '
            f"{round_half_up(self.new_width)}×{round_half_up(self.new_height)}"
        )


class BatchUpdatePositionCommand(BaseCommand):
    """Move several nodes in one parse/serialize pass.

    ``clear_node_ids`` drops the geometry of the listed nodes in the same pass;
    the inverse uses it for nodes that had no geometry before.
    """

    def __init__(
        self,
        updates: Sequence[Union[PositionUpdate, Dict[str, float]]],
        clear_node_ids: Sequence[str] = (),
    ) -> None:
        self.updates: List[PositionUpdate] = [
            u if isinstance(u, PositionUpdate) else PositionUpdate.model_validate(u) for u in updates
        ]
        self.clear_node_ids = list(clear_node_ids)
        self.previous: Dict[str, Optional[Geometry]] = {}
        self._executed = False

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        if not self.updates and not self.clear_node_ids:
            raise CommandFailure(CommandErrorCode.INVALID_ARGUMENTS, "No position updates given")
        elements = {u.node_id: self.require_state(doc, u.node_id) for u in self.updates}
        cleared = {node_id: self.require_state(doc, node_id) for node_id in self.clear_node_ids}

        previous: Dict[str, Optional[Geometry]] = {}
        for node_id, element in elements.items():
            previous[node_id] = read_geometry(element)

        if self.updates:
            self.declare_viz(doc)
        for update in self.updates:
            element = elements[update.node_id]
            current = read_geometry(element)
            width = current.width if current else DEFAULT_WIDTH
            height = current.height if current else DEFAULT_HEIGHT
            write_geometry(element, update.x, update.y, width, height)
        for element in cleared.values():
            element.attrib.pop(viz_attr("xywh"), None)

        self.previous = previous
        self._executed = True
        affected = [u.node_id for u in self.updates]
        affected += [node_id for node_id in self.clear_node_ids if node_id not in affected]
        return affected

    def _inverse(self) -> "BatchUpdatePositionCommand":
        if not self._executed:
            raise self.undo_unavailable("No previous positions to restore")
        restore = [
            PositionUpdate(node_id=node_id, x=geometry.x, y=geometry.y)
            for node_id, geometry in self.previous.items()
            if geometry is not None
        ]
        missing = [node_id for node_id, geometry in self.previous.items() if geometry is None]
        return self.releasing_viz(BatchUpdatePositionCommand(restore, clear_node_ids=missing))

    def describe(self) -> str:
        if len(self.updates) == 1:
            update = self.updates[0]
            return f'Move "{update.node_id}" to ({round_half_up(update.x)}, {round_half_up(update.y)})'
        return f"Move {len(self.updates)} states"
