"""Atomic, invertible mutation commands over SCXML documents."""

from statechart_engines.scxml_commands.base import BaseCommand, Command, CommandFailure
from statechart_engines.scxml_commands.change_state_type import ChangeStateTypeCommand
from statechart_engines.scxml_commands.delete_node import DeleteNodeCommand
from statechart_engines.scxml_commands.geometry import (
    BatchUpdatePositionCommand,
    UpdatePositionAndDimensionsCommand,
    UpdatePositionCommand,
)
from statechart_engines.scxml_commands.models import (
    CommandEnvelope,
    CommandErrorCode,
    CommandResult,
    PositionUpdate,
    StateType,
    TransitionField,
    Waypoint,
)
from statechart_engines.scxml_commands.reconnect_transition import ReconnectTransitionCommand
from statechart_engines.scxml_commands.registry import InvalidCommandError, build_command, execute_envelope
from statechart_engines.scxml_commands.rename import RenameStateCommand
from statechart_engines.scxml_commands.update_actions import UpdateActionsCommand
from statechart_engines.scxml_commands.update_transition import UpdateTransitionFieldCommand
from statechart_engines.scxml_commands.update_transition_handles import UpdateTransitionHandlesCommand
from statechart_engines.scxml_commands.update_waypoints import UpdateWaypointsCommand

__all__ = [
    "BaseCommand",
    "BatchUpdatePositionCommand",
    "ChangeStateTypeCommand",
    "Command",
    "CommandEnvelope",
    "CommandErrorCode",
    "CommandFailure",
    "CommandResult",
    "DeleteNodeCommand",
    "InvalidCommandError",
    "PositionUpdate",
    "ReconnectTransitionCommand",
    "RenameStateCommand",
    "StateType",
    "TransitionField",
    "UpdateActionsCommand",
    "UpdatePositionAndDimensionsCommand",
    "UpdatePositionCommand",
    "UpdateTransitionFieldCommand",
    "UpdateTransitionHandlesCommand",
    "UpdateWaypointsCommand",
    "Waypoint",
    "build_command",
    "execute_envelope",
]
