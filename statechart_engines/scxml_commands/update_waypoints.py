from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from statechart_engines.scxml_commands.base import BaseCommand, reorder_attributes, require_transition
from statechart_engines.scxml_commands.models import Waypoint
from statechart_engines.scxml_document.accessor import (
    ScxmlDocument,
    format_waypoints,
    parse_waypoints,
    viz_attr,
)

PointLike = Union[Waypoint, Tuple[float, float]]


def _as_pair(point: PointLike) -> Tuple[float, float]:
    if isinstance(point, Waypoint):
        return point.x, point.y
    return float(point[0]), float(point[1])


class UpdateWaypointsCommand(BaseCommand):
    """Replace the bend points of a transition; an empty list removes them."""

    def __init__(
        self,
        source_id: str,
        target_id: str,
        event: Optional[str],
        cond: Optional[str],
        waypoints: Sequence[PointLike],
        index: Optional[int] = None,
        attribute_order: Optional[List[str]] = None,
    ) -> None:
        self.source_id = source_id
        self.target_id = target_id or ""
        self.event = event
        self.cond = cond
        self.waypoints = [_as_pair(point) for point in waypoints]
        self.index = index
        self.attribute_order = attribute_order
        self.old_waypoints: Optional[str] = None
        self._resolved_index: Optional[int] = None
        self._previous_order: Optional[List[str]] = None

    def _apply(self, doc: ScxmlDocument) -> List[str]:
        source = self.require_state(doc, self.source_id, "Source state")
        position, transition = require_transition(
            source, self.source_id, self.target_id, self.event, self.cond, index=self.index, exact=True
        )

        attr = viz_attr("waypoints")
        self.old_waypoints = transition.get(attr) or ""
        self._previous_order = list(transition.attrib)
        self._resolved_index = position

        if self.waypoints:
            self.declare_viz(doc)
            transition.set(attr, format_waypoints(self.waypoints))
        else:
            transition.attrib.pop(attr, None)
        if self.attribute_order:
            reorder_attributes(transition, self.attribute_order)
        return [self.source_id]

    def _inverse(self) -> "UpdateWaypointsCommand":
        if self.old_waypoints is None:
            raise self.undo_unavailable("No previous waypoints to restore")
        inverse = UpdateWaypointsCommand(
            self.source_id,
            self.target_id,
            self.event,
            self.cond,
            parse_waypoints(self.old_waypoints),
            index=self._resolved_index,
            attribute_order=self._previous_order,
        )
        return self.releasing_viz(inverse)

    def describe(self) -> str:
        if not self.waypoints:
            return "Remove waypoints from transition"
        return f"Update transition waypoints ({len(self.waypoints)} points)"
