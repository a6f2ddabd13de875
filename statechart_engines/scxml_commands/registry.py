"""Builds commands from ``{type, args}`` envelopes.

Each command type is registered with its argument schema, a factory and the
history action it is recorded as. Position updates are recorded on the
debounced node-move channel; everything else is recorded immediately.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from statechart_engines.scxml_commands.base import Command
from statechart_engines.scxml_commands.change_state_type import ChangeStateTypeCommand
from statechart_engines.scxml_commands.delete_node import DeleteNodeCommand
from statechart_engines.scxml_commands.geometry import (
    BatchUpdatePositionCommand,
    UpdatePositionAndDimensionsCommand,
    UpdatePositionCommand,
)
from statechart_engines.scxml_commands.models import (
    BatchUpdatePositionArgs,
    ChangeStateTypeArgs,
    CommandEnvelope,
    CommandResult,
    DeleteNodeArgs,
    ReconnectTransitionArgs,
    RenameStateArgs,
    UpdateActionsArgs,
    UpdatePositionAndDimensionsArgs,
    UpdatePositionArgs,
    UpdateTransitionFieldArgs,
    UpdateTransitionHandlesArgs,
    UpdateWaypointsArgs,
)
from statechart_engines.scxml_commands.reconnect_transition import ReconnectTransitionCommand
from statechart_engines.scxml_commands.rename import RenameStateCommand
from statechart_engines.scxml_commands.update_actions import UpdateActionsCommand
from statechart_engines.scxml_commands.update_transition import UpdateTransitionFieldCommand
from statechart_engines.scxml_commands.update_transition_handles import UpdateTransitionHandlesCommand
from statechart_engines.scxml_commands.update_waypoints import UpdateWaypointsCommand
from statechart_engines.scxml_history.models import ActionType


class InvalidCommandError(ValueError):
    """Unknown command type or arguments failing validation."""


@dataclass(frozen=True)
class CommandSpec:
    args_model: Type[BaseModel]
    factory: Callable[[BaseModel], Command]
    action_type: ActionType
    # node whose drag this command belongs to; None means record immediately
    moved_node: Optional[Callable[[BaseModel], str]] = None


def _delete_ids(args: DeleteNodeArgs):
    return [args.node_ids] if isinstance(args.node_ids, str) else list(args.node_ids)


COMMANDS: Dict[str, CommandSpec] = {
    "rename_state": CommandSpec(
        RenameStateArgs,
        lambda a: RenameStateCommand(a.state_id, a.new_id),
        ActionType.NODE_UPDATE,
    ),
    "delete_node": CommandSpec(
        DeleteNodeArgs,
        lambda a: DeleteNodeCommand(_delete_ids(a)),
        ActionType.NODE_DELETE,
    ),
    "change_state_type": CommandSpec(
        ChangeStateTypeArgs,
        lambda a: ChangeStateTypeCommand(a.node_id, a.new_type),
        ActionType.NODE_UPDATE,
    ),
    "reconnect_transition": CommandSpec(
        ReconnectTransitionArgs,
        lambda a: ReconnectTransitionCommand(**a.model_dump()),
        ActionType.EDGE_UPDATE,
    ),
    "update_transition_field": CommandSpec(
        UpdateTransitionFieldArgs,
        lambda a: UpdateTransitionFieldCommand(
            a.source_id, a.target_id, a.event, a.cond, a.new_value, a.field, index=a.index
        ),
        ActionType.EDGE_UPDATE,
    ),
    "update_waypoints": CommandSpec(
        UpdateWaypointsArgs,
        lambda a: UpdateWaypointsCommand(a.source_id, a.target_id, a.event, a.cond, a.waypoints, index=a.index),
        ActionType.EDGE_UPDATE,
    ),
    "update_transition_handles": CommandSpec(
        UpdateTransitionHandlesArgs,
        lambda a: UpdateTransitionHandlesCommand(
            a.source_id, a.target_id, a.event, a.cond, a.source_handle, a.target_handle, index=a.index
        ),
        ActionType.EDGE_UPDATE,
    ),
    "update_position": CommandSpec(
        UpdatePositionArgs,
        lambda a: UpdatePositionCommand(a.node_id, a.x, a.y),
        ActionType.NODE_MOVE,
        moved_node=lambda a: a.node_id,
    ),
    "update_position_and_dimensions": CommandSpec(
        UpdatePositionAndDimensionsArgs,
        lambda a: UpdatePositionAndDimensionsCommand(a.node_id, a.x, a.y, a.width, a.height),
        ActionType.NODE_RESIZE,
    ),
    "batch_update_position": CommandSpec(
        BatchUpdatePositionArgs,
        lambda a: BatchUpdatePositionCommand(a.updates),
        ActionType.NODE_MOVE,
        moved_node=lambda a: a.updates[0].node_id if len(a.updates) == 1 else f"{len(a.updates)} states",
    ),
    "update_actions": CommandSpec(
        UpdateActionsArgs,
        lambda a: UpdateActionsCommand(a.node_id, a.entry_actions, a.exit_actions),
        ActionType.NODE_UPDATE,
    ),
}
COMMANDS["update_transition"] = COMMANDS["update_transition_field"]


def build_command(envelope: CommandEnvelope) -> Tuple[Command, CommandSpec, BaseModel]:
    spec = COMMANDS.get(envelope.type)
    if spec is None:
        raise InvalidCommandError(f"Unknown command type: {envelope.type}")
    try:
        args = spec.args_model.model_validate(envelope.args)
    except ValidationError as exc:
        raise InvalidCommandError(f"Invalid arguments for {envelope.type}: {exc.errors()}") from exc
    return spec.factory(args), spec, args


def execute_envelope(content: str, envelope: CommandEnvelope) -> CommandResult:
    command, _, _ = build_command(envelope)
    return command.execute(content)
