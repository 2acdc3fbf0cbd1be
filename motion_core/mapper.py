"""
Mapper - Transforms the current mode into exactly one command.

This is safety-critical code. The Mapper enforces:
- A total mapping: every mode yields a command
- Fail closed: anything unexpected becomes Stop
- No side effects: sending is the Supervisor's job
"""

import logging
from typing import Dict, Optional

from .types import (
    Command,
    MapperConfig,
    Mode,
    ModeKind,
    PostureCommand,
    TeleopDirection,
    VelocityCommand,
)


logger = logging.getLogger(__name__)


def build_teleop_table(config: MapperConfig) -> Dict[TeleopDirection, Command]:
    """
    Build the operator direction table.

    Args:
        config: Teleop speeds

    Returns:
        One command per TeleopDirection
    """
    return {
        TeleopDirection.FORWARD: VelocityCommand(config.forward_speed, 0.0, 0.0),
        TeleopDirection.BACKWARD: VelocityCommand(-config.backward_speed, 0.0, 0.0),
        TeleopDirection.TURN_LEFT: VelocityCommand(0.0, 0.0, config.turn_rate),
        TeleopDirection.TURN_RIGHT: VelocityCommand(0.0, 0.0, -config.turn_rate),
        TeleopDirection.STRAFE_LEFT: VelocityCommand(0.0, config.lateral_speed, 0.0),
        TeleopDirection.STRAFE_RIGHT: VelocityCommand(0.0, -config.lateral_speed, 0.0),
        TeleopDirection.STAND_UP: PostureCommand.STAND_UP,
        TeleopDirection.STAND_DOWN: PostureCommand.STAND_DOWN,
    }


class Mapper:
    """
    Maps a Mode (plus the sequencer's output) to a command.

    The table is built once from the config; map() only looks things up.
    """

    def __init__(self, config: Optional[MapperConfig] = None) -> None:
        """
        Initialize mapper with configuration.

        Args:
            config: Teleop speeds and rates
        """
        self.config = config or MapperConfig()
        self._teleop_table = build_teleop_table(self.config)

        missing = [d for d in TeleopDirection if d not in self._teleop_table]
        if missing:
            raise ValueError(f"Teleop table missing directions: {missing}")

    def map(self, mode: Mode, plan_command: Optional[Command] = None) -> Command:
        """
        Convert the current mode into the command for this tick.

        Args:
            mode: Current dispatcher mode
            plan_command: Sequencer output for this tick (AUTONOMOUS only)

        Returns:
            Exactly one VelocityCommand or PostureCommand
        """
        kind = getattr(mode, "kind", None)

        if kind is ModeKind.IDLE:
            return PostureCommand.STOP

        if kind is ModeKind.AUTONOMOUS:
            if isinstance(plan_command, (VelocityCommand, PostureCommand)):
                return plan_command
            return PostureCommand.STOP

        if kind is ModeKind.TELEOP:
            command = self._teleop_table.get(mode.direction)
            if command is not None:
                return command

        elif kind is ModeKind.POSTURE:
            if isinstance(mode.posture_kind, PostureCommand):
                return mode.posture_kind

        # SAFETY RULE: unknown or incomplete modes stop the robot
        logger.warning(f"Unmapped mode {mode!r}, sending stop")
        return PostureCommand.STOP

    def teleop_command(self, direction: TeleopDirection) -> Command:
        """Look up the command for one operator direction"""
        return self._teleop_table[direction]
