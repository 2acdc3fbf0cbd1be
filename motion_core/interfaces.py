"""
Core interfaces (protocols) for pluggable components.

These define the contracts that all implementations must follow.
Python Protocols are like interfaces in Java/C# - they define
what methods a class must have without forcing inheritance.
"""

from typing import Callable, Optional, Protocol
from .types import PoseSample, PostureCommand, VelocityCommand


PoseCallback = Callable[[PoseSample], None]


class PoseSource(Protocol):
    """
    Interface for pose/orientation feedback delivery.

    The callback may be invoked from any thread, at any rate, and may
    never be invoked at all before the robot is ready.
    """

    def subscribe_pose(self, callback: PoseCallback) -> None:
        """
        Register a handler for new pose samples.

        Args:
            callback: Called with each PoseSample as it arrives
        """
        ...


class CommandSink(Protocol):
    """
    Interface for robot actuation.

    Both operations are fire-and-forget: no acknowledgement is assumed.
    """

    async def send_velocity(self, command: VelocityCommand) -> None:
        """
        Send a continuous velocity command.

        Args:
            command: Forward/lateral speed (m/s) and angular rate (rad/s)
        """
        ...

    async def send_posture(self, posture: PostureCommand) -> None:
        """
        Send a discrete posture command.

        Args:
            posture: One of the enumerated postures
        """
        ...


class Transport(PoseSource, CommandSink, Protocol):
    """
    Interface for robot communication (DDS, simulation, etc.).

    All transport implementations must follow this interface.
    """

    async def connect(self, interface: str) -> bool:
        """
        Establish communication with the robot.

        Args:
            interface: Network interface name (e.g. "enp44s0")

        Returns:
            True if connected successfully
        """
        ...

    async def disconnect(self) -> None:
        """
        Close communication with the robot.

        Should send stop command before disconnecting.
        """
        ...

    @property
    def is_connected(self) -> bool:
        """
        Check if transport is connected.

        Returns:
            True if connected to the robot
        """
        ...


class InputProvider(Protocol):
    """
    Interface for operator input sources (keyboard, gamepad, scripted, etc.).

    Providers translate their device into single-character key tokens so
    every source shares one set of key bindings.
    """

    async def start(self) -> None:
        """
        Initialize and start the input provider.

        Called once when the system starts up.
        May open devices, change terminal modes, etc.
        """
        ...

    async def stop(self) -> None:
        """
        Stop and cleanup the input provider.

        Called when shutting down.
        Must close devices, restore terminal settings, etc.
        """
        ...

    def poll_key(self) -> Optional[str]:
        """
        Read one pending key token.

        Must never block. Returns None if no input is pending.
        """
        ...
